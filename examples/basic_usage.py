#!/usr/bin/env python3
"""
Image Copy Matcher - 基本的な使用例

このスクリプトは、Image Copy Matcherの基本的な使用方法を示します。
プログラムから直接ツールの機能を呼び出す例を提供します。
"""

from pathlib import Path

from image_copy_matcher import (
    CopyManager, EventChannel, EventDispatcher, RunOptions, create_default_logger
)


def example_basic_workflow():
    """基本的なワークフローの例"""
    print("=" * 60)
    print("Image Copy Matcher - 基本的な使用例")
    print("=" * 60)

    # 例用のディレクトリパス（実際の使用時は適切なパスに変更してください）
    low_res_directory = Path("~/Photos/LowRes").expanduser()
    hi_res_directory = Path("~/Photos/Originals").expanduser()
    destination_directory = Path("~/Photos/Selected").expanduser()

    print(f"低解像度フォルダ: {low_res_directory}")
    print(f"高解像度フォルダ: {hi_res_directory}")
    print(f"コピー先フォルダ: {destination_directory}")
    print()

    options = RunOptions(
        low_res_root=low_res_directory,
        hi_res_root=hi_res_directory,
        dest_root=destination_directory,
        overwrite=False,           # 既存ファイルはスキップ
        match_by_stem_only=True    # 拡張子を除いたファイル名で照合
    )

    # ワーカーからの通知はチャネル経由でこのスレッドに届く
    logger = create_default_logger()
    channel = EventChannel()
    dispatcher = EventDispatcher(
        channel,
        on_log=logger.log_line,
        on_progress=logger.log_progress,
        on_summary=logger.log_summary
    )

    manager = CopyManager(channel)
    handle = manager.start(options)
    dispatcher.run(poll_interval=0.1)
    handle.wait()

    if handle.summary is None:
        print("⚠️  フォルダの設定を確認してください。")
    elif handle.summary.errors:
        print(f"⚠️  {len(handle.summary.errors)}件のエラーがありました。")


def example_count_images():
    """各フォルダの画像数を数える例"""
    manager = CopyManager()
    for folder in (Path("~/Photos/LowRes").expanduser(),
                   Path("~/Photos/Originals").expanduser()):
        print(f"{folder}: {manager.count_images(folder)}枚")


if __name__ == '__main__':
    example_basic_workflow()
    print()
    example_count_images()
