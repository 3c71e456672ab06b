"""Cancellable delayed execution."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any


class Debouncer:
    """Runs only the most recently scheduled call once ``delay`` has passed quietly."""

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._task: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, func: Callable[..., Any], *args: Any) -> asyncio.Task:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(func, *args))
        return self._task

    def cancel(self) -> bool:
        if not self.pending:
            return False
        assert self._task is not None
        self._task.cancel()
        return True

    async def flush(self) -> None:
        """Wait for the pending call, if any."""
        task = self._task
        if task is None:
            return
        await asyncio.wait([task])
        if not task.cancelled():
            task.result()

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        await asyncio.sleep(self.delay)
        result = func(*args)
        if isinstance(result, Awaitable):
            result = await result
        return result
