"""Detached side-effect tasks — spawned by a request, never awaited by it."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class DetachedTasks:
    """Owns fire-and-forget work such as cache refreshes and trims.

    Tasks are strongly referenced until they finish. Their results are
    discarded and their failures are logged, never re-raised.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._failures = 0

    def spawn(self, coro: Coroutine[Any, Any, Any], label: str = "") -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro, name=label or None)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def drain(self) -> None:
        """Wait until every detached task (including ones spawned meanwhile) is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    @property
    def failures(self) -> int:
        return self._failures

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._failures += 1
            logger.debug("Detached task %s failed: %s", task.get_name(), exc)
