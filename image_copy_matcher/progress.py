"""
進捗レポートモジュール

処理済み件数と経過時間から進捗率と残り時間（ETA）を計算し、
イベントチャネル経由で表示側へ通知します。
"""

import dataclasses
import time
from typing import Callable, Optional

from .models import ProgressSnapshot


def format_eta(remaining_seconds: float) -> str:
    """
    残り秒数を「分:秒」形式に整形

    Args:
        remaining_seconds: 残り秒数

    Returns:
        "mm:ss" 形式の文字列（60分以上の場合も分の合計で表示）
    """
    seconds = max(0, int(round(remaining_seconds)))
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


def calculate_percent(done: int, total: int) -> float:
    """進捗率（%）を計算（totalが0の場合は0）"""
    if total <= 0:
        return 0.0
    return done / total * 100


def calculate_eta(done: int, total: int, elapsed: float) -> str:
    """
    ETA表示文字列を計算

    Args:
        done: 処理済み件数
        total: 全件数
        elapsed: 経過秒数

    Returns:
        "ETA: mm:ss remaining"、done=0の場合は "ETA: --"
    """
    if done <= 0:
        return "ETA: --"
    remaining = (elapsed / done) * max(0, total - done)
    return f"ETA: {format_eta(remaining)} remaining"


class ProgressReporter:
    """進捗率とETAを付加して表示側へ通知するクラス"""

    def __init__(self, publish: Callable[[ProgressSnapshot], None],
                 clock: Callable[[], float] = time.monotonic,
                 start_time: Optional[float] = None):
        """
        ProgressReporterを初期化

        Args:
            publish: 計算済みスナップショットを受け取る関数（ブロックしないこと）
            clock: 経過時間の計測に使う時計
            start_time: 開始時刻（省略時は現在時刻）
        """
        self.publish = publish
        self.clock = clock
        self.start_time = clock() if start_time is None else start_time

    def build(self, snapshot: ProgressSnapshot) -> ProgressSnapshot:
        """スナップショットに進捗率とETAを付加"""
        elapsed = max(0.0, self.clock() - self.start_time)
        return dataclasses.replace(
            snapshot,
            percent=calculate_percent(snapshot.done, snapshot.total),
            eta=calculate_eta(snapshot.done, snapshot.total, elapsed)
        )

    def report(self, snapshot: ProgressSnapshot) -> ProgressSnapshot:
        """
        進捗を通知

        ワーカースレッドから呼ばれるため、publishはキューへの投入のみを
        行い、表示側の処理を待たずに戻ります。
        """
        progress = self.build(snapshot)
        self.publish(progress)
        return progress
