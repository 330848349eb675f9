"""TrackingDebouncer — フラグ評価イベントのバッチ送信"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from .events import FecusioCoreEvent, FlagEvaluationSucceededEvent
from .scheduler import AsyncioScheduler, Scheduler

if TYPE_CHECKING:
    from .http_client import FecusioTransport

logger = logging.getLogger(__name__)

DEFAULT_TRACKING_INTERVAL_SECONDS = 2.0


class TrackingState(StrEnum):
    """デバウンサーの状態。"""

    IDLE = "IDLE"
    ARMED = "ARMED"


class TrackingDebouncer:
    """フラグ評価イベントを溜め、最初のイベントから interval 秒後にまとめて送信する。

    タイマーは最初のイベントで一度だけ張られ、後続のイベントで延長されない。
    送信失敗はログに残して破棄する（再送・再キューなし）。
    """

    def __init__(
        self,
        transport: FecusioTransport,
        interval: float = DEFAULT_TRACKING_INTERVAL_SECONDS,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._transport = transport
        self._interval = interval
        self._scheduler = scheduler or AsyncioScheduler()
        self._queue: list[FlagEvaluationSucceededEvent] = []
        self._state = TrackingState.IDLE

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def pending(self) -> tuple[FlagEvaluationSucceededEvent, ...]:
        return tuple(self._queue)

    def __call__(self, event: FecusioCoreEvent) -> None:
        self.handle(event)

    def handle(self, event: FecusioCoreEvent) -> None:
        """EventBus ハンドラ。flag-evaluation-succeeded 以外は無視する。"""
        if not isinstance(event, FlagEvaluationSucceededEvent):
            return
        self._queue.append(event)
        if self._state is not TrackingState.IDLE:
            return
        try:
            self._scheduler.after(self._interval, self._flush)
        except Exception as e:
            # タイマーを張れなければ IDLE のまま。次のイベントで再試行する
            logger.warning(
                "Failed to schedule tracking flush",
                extra={"event_count": len(self._queue), "error": str(e)},
            )
            return
        self._state = TrackingState.ARMED

    async def flush(self) -> int:
        """キューを即時送信する。送信したイベント数を返す。"""
        return await self._flush()

    async def _flush(self) -> int:
        # スナップショットとクリアの間に await を挟まない
        batch, self._queue = self._queue, []
        self._state = TrackingState.IDLE
        if not batch:
            return 0
        try:
            await self._transport.track(batch)
        except Exception as e:
            logger.warning(
                "Failed to send tracking batch",
                extra={"event_count": len(batch), "error": str(e)},
            )
            return 0
        logger.debug("Tracking batch sent", extra={"event_count": len(batch)})
        return len(batch)
