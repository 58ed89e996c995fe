"""
イベントチャネル

ワーカースレッドからのログ行・進捗・サマリーをキューに積み、
表示側の単一のコンシューマーが順番に取り出して処理します。
ワーカーは表示側の処理を待たずに次のファイルへ進めます。
"""

import logging
import queue
from typing import Any, Callable, Optional, Tuple

from .models import ProgressSnapshot

EVENT_LOG = 'log'
EVENT_PROGRESS = 'progress'
EVENT_SUMMARY = 'summary'
EVENT_CLOSED = 'closed'

Event = Tuple[str, Any]


class EventChannel:
    """(種類, ペイロード) 形式のイベントを運ぶチャネル"""

    def __init__(self):
        """EventChannelを初期化"""
        # 上限なしのキューなので put_nowait がブロックすることはない
        self._queue: "queue.Queue[Event]" = queue.Queue()
        self._closed = False

    def post(self, kind: str, payload: Any = None) -> None:
        """イベントを投入（ブロックしない）"""
        self._queue.put_nowait((kind, payload))

    def post_log(self, message: str) -> None:
        """ログ行を投入"""
        self.post(EVENT_LOG, message)

    def post_progress(self, snapshot: ProgressSnapshot) -> None:
        """進捗スナップショットを投入"""
        self.post(EVENT_PROGRESS, snapshot)

    def post_summary(self, line: str) -> None:
        """サマリー行を投入"""
        self.post(EVENT_SUMMARY, line)

    def close(self) -> None:
        """終了イベントを投入（2回目以降は何もしない）"""
        if not self._closed:
            self._closed = True
            self.post(EVENT_CLOSED)

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, timeout: Optional[float] = None) -> Optional[Event]:
        """
        イベントを1件取り出す

        Args:
            timeout: 待機秒数（Noneの場合は無期限に待つ）

        Returns:
            イベント、タイムアウトした場合はNone
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def get_nowait(self) -> Optional[Event]:
        """待たずにイベントを1件取り出す（空の場合はNone）"""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None


class EventDispatcher:
    """
    チャネルの唯一のコンシューマー

    表示の更新はすべてこのクラスのハンドラー経由で、
    run()/drain()を呼び出したスレッド上で行われます。
    """

    def __init__(self, channel: EventChannel,
                 on_log: Optional[Callable[[str], None]] = None,
                 on_progress: Optional[Callable[[ProgressSnapshot], None]] = None,
                 on_summary: Optional[Callable[[str], None]] = None):
        self.channel = channel
        self.handlers = {
            EVENT_LOG: on_log,
            EVENT_PROGRESS: on_progress,
            EVENT_SUMMARY: on_summary,
        }
        self.finished = False
        self.logger = logging.getLogger(__name__)

    def dispatch(self, event: Event) -> bool:
        """
        イベントを1件処理

        Returns:
            終了イベントだった場合False
        """
        kind, payload = event
        if kind == EVENT_CLOSED:
            self.finished = True
            return False

        handler = self.handlers.get(kind)
        if handler is not None:
            handler(payload)
        elif kind not in self.handlers:
            self.logger.debug(f"未知のイベント: {kind}")
        return True

    def run(self, poll_interval: Optional[float] = None,
            on_idle: Optional[Callable[[], None]] = None) -> None:
        """
        終了イベントを受け取るまでイベントを処理

        Args:
            poll_interval: 待機の上限秒数（Noneの場合は無期限）
            on_idle: 待機がタイムアウトするたびに呼ばれる関数
        """
        while not self.finished:
            event = self.channel.get(timeout=poll_interval)
            if event is None:
                if on_idle:
                    on_idle()
                continue
            self.dispatch(event)

    def drain(self) -> int:
        """
        キューに溜まっているイベントを待たずに処理

        Returns:
            処理したイベント数
        """
        count = 0
        while not self.finished:
            event = self.channel.get_nowait()
            if event is None:
                break
            self.dispatch(event)
            count += 1
        return count
