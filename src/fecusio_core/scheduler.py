"""遅延実行スケジューラ"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], Awaitable[None]]


class Scheduler(Protocol):
    """delay 秒後にコールバックを 1 回実行するプロトコル。"""

    def after(self, delay: float, callback: Callback) -> None: ...


class AsyncioScheduler:
    """asyncio Task ベースのスケジューラ。

    実行中のイベントループ上で呼び出す必要がある。
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    def after(self, delay: float, callback: Callback) -> None:
        task = asyncio.get_running_loop().create_task(self._run(delay, callback))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def pending(self) -> int:
        """未完了のタスク数。"""
        return len(self._tasks)

    async def _run(self, delay: float, callback: Callback) -> None:
        await asyncio.sleep(delay)
        try:
            await callback()
        except Exception:
            logger.exception("Scheduled callback failed")
