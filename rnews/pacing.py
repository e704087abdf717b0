"""Fixed-delay pacing used between translation calls and webhook sends."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

SleepFunc = Callable[[float], Awaitable[None]]


class Pacer:
    """Awaitable fixed delay with an injectable sleep function.

    Tests pass a fake ``sleep`` to observe requested delays without waiting.
    """

    def __init__(self, interval_seconds: float, sleep: SleepFunc | None = None) -> None:
        self.interval = max(0.0, interval_seconds)
        self._sleep = sleep or asyncio.sleep

    async def pause(self) -> None:
        if self.interval:
            await self._sleep(self.interval)

