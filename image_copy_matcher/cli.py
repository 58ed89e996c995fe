"""
コマンドラインインターフェース

Image Copy Matcherのメインエントリーポイントです。
argparseのサブコマンド機能を使用して、copy、count、settingsコマンドを提供します。
"""

import argparse
import sys
from typing import List, Optional

from .copy_manager import CopyManager
from .events import EventChannel, EventDispatcher
from .exceptions import ProcessingError, ValidationError
from .file_scanner import FileScanner
from .logger import ProgressLogger, create_default_logger, get_default_log_file
from .path_validator import PathValidator
from .settings import AppSettings, SettingsStore

# 表示側スレッドがイベントを待つ間隔（秒）
POLL_INTERVAL = 0.1


def create_parser() -> argparse.ArgumentParser:
    """
    コマンドライン引数パーサーを作成

    Returns:
        設定済みのArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog='image-copy-matcher',
        description='低解像度画像とファイル名が一致する高解像度画像を、'
                    '低解像度側のフォルダ構成のままコピーするツール',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用例:
  # 高解像度画像をコピー（フォルダ指定は設定ファイルに保存される）
  image-copy-matcher copy -l /path/to/lowres -H /path/to/hires -d /path/to/dest

  # 前回と同じフォルダで再実行
  image-copy-matcher copy

  # 各フォルダの画像数を表示
  image-copy-matcher count

  # 保存されている設定を表示
  image-copy-matcher settings
        """
    )

    subparsers = parser.add_subparsers(
        dest='command',
        help='利用可能なコマンド',
        metavar='<command>'
    )

    # copyコマンド（エイリアス: c）
    copy_parser = subparsers.add_parser(
        'copy',
        aliases=['c'],
        help='一致する高解像度画像をコピー',
        description='低解像度フォルダの各画像に一致する高解像度画像を探し、'
                    'コピー先に同じフォルダ構成でコピーします。'
                    '省略したオプションは保存されている設定を使用します。',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用例:
  # 拡張子を除いたファイル名で照合（デフォルト）
  image-copy-matcher copy -l ./lowres -H ./hires -d ./out

  # 拡張子も含めて照合し、既存ファイルを上書き
  image-copy-matcher copy --match-filename --overwrite

  # ワーカー数を指定し、設定を保存しない
  image-copy-matcher copy -w 4 --no-save
        """
    )
    _add_folder_arguments(copy_parser)

    overwrite_group = copy_parser.add_mutually_exclusive_group()
    overwrite_group.add_argument(
        '--overwrite',
        dest='overwrite',
        action='store_const',
        const=True,
        default=None,
        help='コピー先に同名ファイルがある場合は上書きする'
    )
    overwrite_group.add_argument(
        '--no-overwrite',
        dest='overwrite',
        action='store_const',
        const=False,
        help='コピー先に同名ファイルがある場合はスキップする'
    )

    match_group = copy_parser.add_mutually_exclusive_group()
    match_group.add_argument(
        '--match-stem',
        dest='match_by_stem_only',
        action='store_const',
        const=True,
        default=None,
        help='拡張子を除いたファイル名で照合する'
    )
    match_group.add_argument(
        '--match-filename',
        dest='match_by_stem_only',
        action='store_const',
        const=False,
        help='拡張子を含むファイル名で照合する'
    )

    copy_parser.add_argument(
        '--workers', '-w',
        type=int,
        default=None,
        help='並列ワーカー数（デフォルトはCPU数）'
    )
    copy_parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='詳細ログを表示'
    )
    copy_parser.add_argument(
        '--no-save',
        action='store_true',
        help='指定したフォルダやオプションを設定ファイルに保存しない'
    )

    # countコマンド（エイリアス: n）
    count_parser = subparsers.add_parser(
        'count',
        aliases=['n'],
        help='各フォルダの画像数を表示',
        description='低解像度・高解像度・コピー先フォルダの画像ファイル数を表示します。'
    )
    _add_folder_arguments(count_parser)

    # settingsコマンド（エイリアス: s）
    subparsers.add_parser(
        'settings',
        aliases=['s'],
        help='保存されている設定を表示',
        description='設定ファイルの場所と保存されている値を表示します。'
    )

    return parser


def _add_folder_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--low-res', '-l',
        type=str,
        default=None,
        help='低解像度画像のフォルダ'
    )
    parser.add_argument(
        '--hi-res', '-H',
        type=str,
        default=None,
        help='高解像度画像のフォルダ'
    )
    parser.add_argument(
        '--dest', '-d',
        type=str,
        default=None,
        help='コピー先フォルダ'
    )


def _apply_arguments(settings: AppSettings, args) -> AppSettings:
    """コマンドライン引数で指定された値を設定に反映"""
    if args.low_res is not None:
        settings.low_res_folder = args.low_res
    if args.hi_res is not None:
        settings.hi_res_folder = args.hi_res
    if args.dest is not None:
        settings.destination_folder = args.dest
    if getattr(args, 'overwrite', None) is not None:
        settings.overwrite = args.overwrite
    if getattr(args, 'match_by_stem_only', None) is not None:
        settings.match_by_name_only = args.match_by_stem_only
    return settings


def _load_settings(store: SettingsStore, progress_logger: ProgressLogger) -> AppSettings:
    result = store.load()
    if result.error:
        progress_logger.log_debug(f"設定を読み込めませんでした（デフォルトを使用）: {result.error}")
    return result.settings


def handle_copy_command(args, store: Optional[SettingsStore] = None) -> int:
    """
    copyコマンドを処理

    Args:
        args: 解析されたコマンドライン引数
        store: 設定ストア（省略時はデフォルトの場所）

    Returns:
        終了コード（0: 成功、1: エラー）
    """
    log_file = get_default_log_file() if args.verbose else None
    progress_logger = create_default_logger(verbose=args.verbose, log_file=log_file)
    store = store or SettingsStore()

    try:
        settings = _apply_arguments(_load_settings(store, progress_logger), args)
        if not args.no_save:
            saved = store.save(settings)
            if not saved.saved:
                progress_logger.log_debug(f"設定を保存できませんでした: {saved.error}")

        if args.workers is not None and args.workers < 1:
            raise ValidationError("--workers must be 1 or greater.")
        options = settings.to_run_options(max_workers=args.workers)

        # 実行前の検証（失敗時はログ1行のみ）
        try:
            PathValidator.validate_run_options(options)
        except ValidationError as e:
            progress_logger.log_line(str(e))
            return 1

        progress_logger.log_run_start(options)

        channel = EventChannel()
        manager = CopyManager(channel)
        summary_lines: List[str] = []
        dispatcher = EventDispatcher(
            channel,
            on_log=progress_logger.log_line,
            on_progress=progress_logger.log_progress,
            on_summary=summary_lines.append
        )

        handle = manager.start(options)
        try:
            dispatcher.run(poll_interval=POLL_INTERVAL)
        except KeyboardInterrupt:
            progress_logger.log_warning("中断を要求しました。処理中のファイルが終わるまで待機します。")
            handle.cancel()
            dispatcher.run(poll_interval=POLL_INTERVAL)
        handle.wait()

        for line in summary_lines:
            progress_logger.log_summary(line, handle.summary)

        if handle.error is not None or handle.summary is None:
            return 1
        if handle.summary.failure:
            return 1
        return 0

    except ValidationError as e:
        print(f"❌ 入力エラー: {e}", file=sys.stderr)
        return 1
    except ProcessingError as e:
        print(f"❌ 処理エラー: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"❌ 予期しないエラー: {e}", file=sys.stderr)
        return 1


def handle_count_command(args, store: Optional[SettingsStore] = None) -> int:
    """
    countコマンドを処理

    Returns:
        終了コード（0: 成功、1: エラー）
    """
    progress_logger = create_default_logger()
    store = store or SettingsStore()

    try:
        settings = _apply_arguments(_load_settings(store, progress_logger), args)
        scanner = FileScanner()

        for label, folder in (("Low Res", settings.low_res_folder),
                              ("Hi Res", settings.hi_res_folder),
                              ("Destination", settings.destination_folder)):
            count = scanner.count_images(folder)
            progress_logger.log_info(f"{label}: {count} ({folder or '未設定'})")

        return 0

    except Exception as e:
        print(f"❌ 予期しないエラー: {e}", file=sys.stderr)
        return 1


def handle_settings_command(args, store: Optional[SettingsStore] = None) -> int:
    """
    settingsコマンドを処理

    Returns:
        終了コード（0: 成功、1: エラー）
    """
    progress_logger = create_default_logger()
    store = store or SettingsStore()

    result = store.load()
    progress_logger.log_info(f"設定ファイル: {store.settings_path}")
    if result.error:
        progress_logger.log_warning(f"設定を読み込めませんでした（デフォルトを表示）: {result.error}")

    for key, value in result.settings.to_dict().items():
        progress_logger.log_info(f"  {key}: {value}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    メインエントリーポイント

    Args:
        argv: コマンドライン引数（省略時はsys.argv）

    Returns:
        終了コード（0: 成功、1: エラー）
    """
    parser = create_parser()
    if argv is None:
        argv = sys.argv[1:]

    # 引数が指定されていない場合はヘルプを表示
    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    if args.command in ['copy', 'c']:
        return handle_copy_command(args)
    elif args.command in ['count', 'n']:
        return handle_count_command(args)
    elif args.command in ['settings', 's']:
        return handle_settings_command(args)
    else:
        print(f"❌ 不明なコマンド: {args.command}", file=sys.stderr)
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
