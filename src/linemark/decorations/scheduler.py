"""Deferred-callback schedulers for decoration retries."""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol


class Scheduler(Protocol):
    """Runs ``callback`` once, ``delay`` seconds from now, on the host loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        ...


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    When no loop is given the running loop is looked up at scheduling time, so
    the scheduler can be created before the loop starts.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        loop = self._loop or asyncio.get_running_loop()
        loop.call_later(max(0.0, delay), callback)


__all__ = ["AsyncioScheduler", "Scheduler"]
