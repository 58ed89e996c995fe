"""
データモデル定義

Image Copy Matcherで使用するデータクラスを定義します。
"""

import os
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple


@dataclass(frozen=True)
class RunOptions:
    """1回の実行に渡されるオプション（実行中は不変）"""
    low_res_root: Optional[Path]
    hi_res_root: Optional[Path]
    dest_root: Optional[Path]
    overwrite: bool = False
    match_by_stem_only: bool = True
    max_workers: Optional[int] = None

    @property
    def worker_count(self) -> int:
        """ワーカー数（未指定の場合は利用可能なプロセッサ数）"""
        if self.max_workers and self.max_workers > 0:
            return self.max_workers
        return os.cpu_count() or 1


class OutcomeKind(Enum):
    """ソースファイル1件ごとの処理結果"""
    COPIED = 'copied'
    SKIPPED = 'skipped'    # コピー先が存在し、上書き無効
    MISSING = 'missing'    # 高解像度側に一致するファイルなし
    ERROR = 'error'


@dataclass(frozen=True)
class CopyPlan:
    """コピー計画"""
    source_path: Path
    reference_path: Path
    destination_path: Path
    relative_destination: Path  # コピー先ルートからの相対パス


@dataclass(frozen=True)
class ItemResult:
    """1ファイル分の処理結果"""
    source_path: Path
    kind: OutcomeKind
    destination_path: Optional[Path] = None
    message: Optional[str] = None
    relative_destination: Optional[Path] = None  # コピー先ルートからの相対パス


@dataclass(frozen=True)
class ProgressSnapshot:
    """進捗のスナップショット"""
    done: int
    total: int
    copied: int
    missing: int
    skipped: int
    failed: int
    percent: float = 0.0
    eta: str = 'ETA: --'


@dataclass
class RunSummary:
    """
    実行全体の集計

    複数のワーカーから同時に更新されるため、カウンタの更新は
    ロックで保護されます。
    """
    total: int = 0
    copied: int = 0
    missing: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)
    cancelled: bool = False
    failure: Optional[str] = None
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False)

    @property
    def done(self) -> int:
        """処理済みの件数"""
        return self.copied + self.missing + self.skipped + self.failed

    def record(self, kind: OutcomeKind,
               listener: Optional[Callable[[ProgressSnapshot], None]] = None,
               error: Optional[Tuple[str, str]] = None) -> ProgressSnapshot:
        """
        結果を1件記録する

        listenerはロックを保持したまま呼び出されるため、
        通知されるdoneの値は単調増加になります。

        Args:
            kind: 処理結果の種類
            listener: 更新後のスナップショットを受け取るコールバック
            error: (相対パス, エラーメッセージ) のタプル

        Returns:
            更新後のスナップショット
        """
        with self._lock:
            if kind is OutcomeKind.COPIED:
                self.copied += 1
            elif kind is OutcomeKind.SKIPPED:
                self.skipped += 1
            elif kind is OutcomeKind.MISSING:
                self.missing += 1
            else:
                self.failed += 1
                if error:
                    self.errors.append(error)

            snapshot = self._snapshot_unlocked()
            if listener:
                listener(snapshot)
            return snapshot

    def snapshot(self) -> ProgressSnapshot:
        """現在のカウンタのスナップショットを取得"""
        with self._lock:
            return self._snapshot_unlocked()

    def _snapshot_unlocked(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            done=self.done,
            total=self.total,
            copied=self.copied,
            missing=self.missing,
            skipped=self.skipped,
            failed=self.failed
        )


def summary_line(summary: RunSummary) -> str:
    """実行終了時のサマリー行を作成"""
    line = (f"Done. Copied: {summary.copied}, Missing: {summary.missing}, "
            f"Skipped: {summary.skipped}, Errors: {summary.failed}")
    if summary.cancelled:
        line += " (cancelled)"
    return line
