"""
コピー処理管理モジュール

実行前の検証、両フォルダの走査、照合インデックスの構築、並列コピー、
サマリーの通知までの一連の処理を管理します。
処理はバックグラウンドスレッドでも実行でき、その場合の表示側への通知は
すべてイベントチャネル経由で行われます。
"""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from .copier import Copier
from .events import EventChannel
from .exceptions import EnumerationError, ValidationError
from .file_scanner import FileScanner
from .indexer import MatchIndex
from .models import RunOptions, RunSummary, summary_line
from .path_validator import PathValidator
from .planner import CopyPlanner
from .progress import ProgressReporter


class RunHandle:
    """バックグラウンド実行中の処理へのハンドル"""

    def __init__(self, thread: threading.Thread, cancel_event: threading.Event):
        self._thread = thread
        self._cancel_event = cancel_event
        self.summary: Optional[RunSummary] = None
        self.error: Optional[BaseException] = None

    def cancel(self) -> None:
        """次のファイルの境界で処理を中断するよう要求"""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        処理の終了を待つ

        Returns:
            終了していればTrue
        """
        self._thread.join(timeout)
        return not self._thread.is_alive()


class CopyManager:
    """走査からコピーまでの処理全体を担当するクラス"""

    def __init__(self, channel: Optional[EventChannel] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        CopyManagerを初期化

        Args:
            channel: ログ・進捗・サマリーの送り先
            clock: 進捗のETA計算に使う時計
        """
        self.channel = channel or EventChannel()
        self.clock = clock
        self.file_scanner = FileScanner()
        self.copier = Copier(self.channel)
        self.logger = logging.getLogger(__name__)

    def run(self, options: RunOptions,
            cancel_event: Optional[threading.Event] = None) -> Optional[RunSummary]:
        """
        1回分のコピー処理を実行

        Args:
            options: 実行オプション
            cancel_event: セットされると未着手のファイルを処理しない

        Returns:
            集計結果（検証に失敗して処理を開始しなかった場合はNone）
        """
        # 1. 実行前の検証（失敗時はログ1行のみで終了）
        try:
            PathValidator.validate_run_options(options)
        except ValidationError as e:
            self.logger.debug(f"検証エラー: {e}")
            self.channel.post_log(str(e))
            return None

        summary = RunSummary()
        start_time = self.clock()
        low_res_root = options.low_res_root.absolute()

        try:
            # 2. 両フォルダの走査
            low_res_files = self.file_scanner.scan_image_files(low_res_root)
            hi_res_files = self.file_scanner.scan_image_files(options.hi_res_root)
            self.logger.info(
                f"画像ファイル発見: 低解像度={len(low_res_files)}個, "
                f"高解像度={len(hi_res_files)}個")

        except EnumerationError as e:
            self.logger.error(f"フォルダ走査エラー: {e}")
            summary.failure = str(e)
            self.channel.post_log(f"Error: {e}")
            self.channel.post_summary(summary_line(summary))
            return summary

        # 3. インデックスを完全に構築してから照合を開始する
        index = MatchIndex.build(hi_res_files, options.match_by_stem_only)
        planner = CopyPlanner(index, low_res_root, options.dest_root)

        # 4. 並列コピー
        reporter = ProgressReporter(self.channel.post_progress,
                                    clock=self.clock, start_time=start_time)
        self.copier.copy_files(
            low_res_files,
            planner,
            overwrite=options.overwrite,
            max_workers=options.worker_count,
            reporter=reporter,
            cancel_event=cancel_event,
            summary=summary
        )

        # 5. 全件完了後にサマリーを通知
        self.channel.post_summary(summary_line(summary))
        return summary

    def start(self, options: RunOptions) -> RunHandle:
        """
        バックグラウンドスレッドで処理を開始

        呼び出し元のスレッドはブロックされません。処理が終わると
        （例外で終わった場合も）チャネルがクローズされます。

        Args:
            options: 実行オプション

        Returns:
            実行中の処理へのハンドル
        """
        cancel_event = threading.Event()
        handle: RunHandle

        def _target() -> None:
            try:
                handle.summary = self.run(options, cancel_event)
            except Exception as e:
                handle.error = e
                self.logger.error(f"予期しないエラー: {e}", exc_info=e)
                self.channel.post_log(f"Error: {e}")
            finally:
                self.channel.close()

        thread = threading.Thread(target=_target, name='image-copy-run', daemon=True)
        handle = RunHandle(thread, cancel_event)
        thread.start()
        return handle

    def count_images(self, folder: Optional[Path]) -> int:
        """フォルダ内の画像ファイル数（未設定や存在しない場合は0）"""
        return self.file_scanner.count_images(folder)
