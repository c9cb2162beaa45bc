"""Local one-second countdown between token polls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from qr_authenticator.state import SessionState
from qr_authenticator.timers import ScopedTimer

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class CountdownInterpolator:
    """Ticks ``SessionState.countdown`` down from the last server value.

    When the value would drop below zero it jumps back to the last server
    value and holds there until the next ``reset()``.
    """

    def __init__(
        self,
        state: SessionState,
        *,
        tick_seconds: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._state = state
        self._tick_seconds = tick_seconds
        self._sleep = sleep
        self._timer = ScopedTimer("countdown-tick")
        self._last_remaining: int | None = None
        self._holding = False

    @property
    def running(self) -> bool:
        return self._timer.active

    @property
    def value(self) -> int | None:
        return self._state.countdown

    def reset(self, remaining: int) -> None:
        logger.debug("Countdown reset to %ss", remaining)
        self._last_remaining = remaining
        self._holding = False
        self._state.countdown = remaining
        self._state.changed()
        self._timer.start(self._run())

    def stop(self) -> None:
        self._timer.cancel()

    def tick(self) -> None:
        value = self._state.countdown
        if value is None or self._holding:
            return
        if value <= 0:
            self._state.countdown = self._last_remaining
            self._holding = True
        else:
            self._state.countdown = value - 1
        self._state.changed()

    async def _run(self) -> None:
        while True:
            await self._sleep(self._tick_seconds)
            self.tick()
