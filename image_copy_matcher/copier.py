"""
ファイルコピー処理モジュール

低解像度側のファイルごとに一致する高解像度ファイルをコピー先へ
並列にコピーします。各ファイルの結果（コピー・スキップ・不一致・エラー）を
分類し、集計と進捗通知を行います。1ファイルの失敗が他のファイルの
処理を止めることはありません。
"""

import logging
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional

from .events import EventChannel
from .exceptions import FileOperationError
from .models import CopyPlan, ItemResult, OutcomeKind, RunSummary
from .path_validator import PathValidator
from .planner import CopyPlanner
from .progress import ProgressReporter

# 空き容量チェックの安全マージン
SAFETY_MARGIN_BYTES = 10 * 1024 * 1024  # 10MB


class Copier:
    """一致した高解像度ファイルをコピーするクラス"""

    def __init__(self, channel: Optional[EventChannel] = None):
        """
        Copierを初期化

        Args:
            channel: ログ行の送り先（Noneの場合はloggingに出力）
        """
        self.channel = channel
        self.logger = logging.getLogger(__name__)

    def copy_files(
        self,
        source_files: List[Path],
        planner: CopyPlanner,
        overwrite: bool = False,
        max_workers: int = 1,
        reporter: Optional[ProgressReporter] = None,
        cancel_event: Optional[threading.Event] = None,
        summary: Optional[RunSummary] = None
    ) -> RunSummary:
        """
        ソースファイル全件をワーカープールで処理

        Args:
            source_files: 低解像度側のファイルパスのリスト
            planner: コピー計画の作成に使うプランナー（インデックス構築済み）
            overwrite: コピー先が存在する場合に上書きするならTrue
            max_workers: ワーカー数
            reporter: 1件ごとに進捗を通知するレポーター
            cancel_event: セットされると未着手のファイルを処理しない
            summary: 集計先（省略時は新規作成）

        Returns:
            全件の処理が終わった後の集計
        """
        if summary is None:
            summary = RunSummary()
        summary.total = len(source_files)
        listener = reporter.report if reporter else None

        self.logger.info(
            f"ファイルコピー開始: {len(source_files)}個のファイル -> "
            f"{planner.dest_root} (ワーカー数={max_workers})")

        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
            future_to_path = {
                executor.submit(self._run_item, source_path, planner,
                                overwrite, summary, listener, cancel_event):
                source_path for source_path in source_files
            }

            # すべてのワーカーの完了を待つ
            for future in as_completed(future_to_path):
                future.result()

        if cancel_event is not None and cancel_event.is_set() and \
                summary.done < summary.total:
            summary.cancelled = True
            self.logger.warning(
                f"コピー処理を中断: {summary.done}/{summary.total}件処理済み")

        self.logger.info(
            f"ファイルコピー完了: コピー={summary.copied}, "
            f"不一致={summary.missing}, スキップ={summary.skipped}, "
            f"失敗={summary.failed}")
        return summary

    def _run_item(self, source_path: Path, planner: CopyPlanner,
                  overwrite: bool, summary: RunSummary, listener,
                  cancel_event: Optional[threading.Event]) -> Optional[ItemResult]:
        """ワーカー上で1件を処理し、結果を記録する"""
        if cancel_event is not None and cancel_event.is_set():
            return None

        try:
            result = self.process_item(source_path, planner, overwrite)
        except Exception as e:
            result = ItemResult(
                source_path=source_path,
                kind=OutcomeKind.ERROR,
                message=f"Unexpected error: {e}"
            )
            self.logger.debug("スタックトレース:", exc_info=e)

        self._emit(self.format_item_line(result))

        error = None
        if result.kind is OutcomeKind.ERROR:
            error = (str(self._relative_label(result)),
                     result.message or '')
        summary.record(result.kind, listener, error)
        return result

    def process_item(self, source_path: Path, planner: CopyPlanner,
                     overwrite: bool) -> ItemResult:
        """
        1ファイル分の分類とコピーを実行

        Args:
            source_path: 低解像度側のファイルパス
            planner: コピー計画の作成に使うプランナー
            overwrite: コピー先が存在する場合に上書きするならTrue

        Returns:
            処理結果
        """
        plan = planner.plan(source_path)
        if plan is None:
            return ItemResult(source_path=source_path, kind=OutcomeKind.MISSING)

        destination = plan.destination_path
        try:
            # 複数ワーカーが同時に作成しても既存エラーにはならない
            destination.parent.mkdir(parents=True, exist_ok=True)

            if destination.exists() and not overwrite:
                return self._skipped(plan)

            try:
                self._copy_file(plan.reference_path, destination, overwrite)
            except FileExistsError:
                # 同じコピー先を別のワーカーが先に作成した
                return self._skipped(plan)

        except (OSError, FileOperationError) as e:
            self.logger.debug(f"コピー失敗: {plan.reference_path} -> "
                              f"{destination} - {e}")
            return ItemResult(source_path=source_path,
                              kind=OutcomeKind.ERROR,
                              destination_path=destination,
                              message=self._describe_error(e),
                              relative_destination=plan.relative_destination)

        self.logger.debug(f"コピー成功: {plan.reference_path.name} -> {destination}")
        return ItemResult(source_path=source_path,
                          kind=OutcomeKind.COPIED,
                          destination_path=destination,
                          relative_destination=plan.relative_destination)

    def _skipped(self, plan: CopyPlan) -> ItemResult:
        self.logger.debug(f"既存ファイルをスキップ: {plan.destination_path}")
        return ItemResult(source_path=plan.source_path,
                          kind=OutcomeKind.SKIPPED,
                          destination_path=plan.destination_path,
                          relative_destination=plan.relative_destination)

    def _copy_file(self, source: Path, destination: Path, overwrite: bool) -> None:
        """
        ファイルの内容とメタデータをコピー

        上書き無効の場合はコピー先を排他的に作成するため、
        既に存在していればFileExistsErrorとなり既存ファイルには触れません。

        Raises:
            FileExistsError: 上書き無効でコピー先が既に存在する場合
            FileOperationError: 空き容量が不足している場合
            OSError: コピーに失敗した場合
        """
        try:
            source_size = source.stat().st_size
            if not self._check_disk_space(destination.parent, source_size):
                raise FileOperationError("Not enough disk space")
        except OSError as e:
            # ソースが読めない場合はこの後のコピーで失敗する
            self.logger.debug(f"ディスク容量チェックスキップ: {source} - {e}")

        if overwrite:
            # shutil.copy2を使用してメタデータも保持
            shutil.copy2(source, destination)
            return

        with open(source, 'rb') as fsrc:
            fdst = open(destination, 'xb')
            try:
                with fdst:
                    shutil.copyfileobj(fsrc, fdst)
            except OSError:
                # 途中まで書いたファイルを残さない
                destination.unlink(missing_ok=True)
                raise
        shutil.copystat(source, destination)

    def _check_disk_space(self, target_dir: Path, required_bytes: int) -> bool:
        """
        ディスク空き容量を確認

        Args:
            target_dir: 確認対象ディレクトリ
            required_bytes: 必要なバイト数

        Returns:
            容量が十分な場合True（確認自体に失敗した場合もTrue）
        """
        try:
            enough = PathValidator.check_disk_space(
                target_dir, required_bytes + SAFETY_MARGIN_BYTES)
        except (OSError, ValueError) as e:
            self.logger.warning(f"ディスク容量チェックエラー: {e}")
            return True

        if not enough:
            self.logger.warning(
                f"ディスク容量不足: 必要={required_bytes:,}bytes ({target_dir})")
        return enough

    @staticmethod
    def _describe_error(error: Exception) -> str:
        if isinstance(error, OSError) and error.strerror:
            return error.strerror
        return str(error)

    @staticmethod
    def _relative_label(result: ItemResult) -> Path:
        """ログ表示用のコピー先相対パス"""
        if result.relative_destination is not None:
            return result.relative_destination
        return Path(result.source_path.name)

    @classmethod
    def format_item_line(cls, result: ItemResult) -> str:
        """
        1ファイル分のログ行を作成

        Args:
            result: 処理結果

        Returns:
            表示用のログ行
        """
        label = cls._relative_label(result)
        if result.kind is OutcomeKind.COPIED:
            return f"Copied: {label}"
        if result.kind is OutcomeKind.SKIPPED:
            return f"Skipped (exists): {label}"
        if result.kind is OutcomeKind.MISSING:
            return f"No match for: {result.source_path.name}"
        return f"Error copying {label}: {result.message}"

    def _emit(self, line: str) -> None:
        if self.channel is not None:
            self.channel.post_log(line)
        else:
            self.logger.info(line)
