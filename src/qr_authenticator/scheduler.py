"""Poll the account service for the current code, aligned to its expiry."""

from __future__ import annotations

import asyncio
import dataclasses
import enum
import logging

from qr_authenticator.client import AccountServiceClient
from qr_authenticator.countdown import CountdownInterpolator, Sleep
from qr_authenticator.errors import PollFailure
from qr_authenticator.state import Account, SessionState, TokenState
from qr_authenticator.timers import ScopedTimer

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 30.0


class SchedulerState(enum.Enum):
    IDLE = "idle"
    POLLING = "polling"


class TokenRefreshScheduler:
    """Keeps ``SessionState.token`` fresh while an account is registered.

    A single loop task issues one request, waits for it to resolve, and only
    then arms the sleep before the next one. Failed polls keep the previous
    code and retry after a fixed backoff, indefinitely.
    """

    def __init__(
        self,
        client: AccountServiceClient,
        state: SessionState,
        countdown: CountdownInterpolator,
        *,
        fallback_seconds: float = DEFAULT_INTERVAL_SECONDS,
        retry_backoff_seconds: float = DEFAULT_INTERVAL_SECONDS,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._state = state
        self._countdown = countdown
        self._fallback_seconds = fallback_seconds
        self._retry_backoff_seconds = retry_backoff_seconds
        self._sleep = sleep
        self._timer = ScopedTimer("token-poll")
        self.status = SchedulerState.IDLE

    def next_delay(self, remaining_seconds: int | None) -> float:
        """Seconds until the next poll; 0 or missing falls back to the default."""
        if not remaining_seconds:
            return self._fallback_seconds
        return float(remaining_seconds)

    def start(self, account: Account) -> None:
        logger.info("Polling tokens for account %s", account.id)
        self.status = SchedulerState.POLLING
        self._countdown.stop()
        self._timer.start(self._run(account))

    def stop(self) -> None:
        self._timer.cancel()
        self._countdown.stop()
        if self.status is SchedulerState.POLLING:
            logger.info("Token polling stopped")
        self.status = SchedulerState.IDLE

    async def poll_once(self, account: Account) -> float:
        """Fetch one token, update state, and return the delay before the next poll."""
        try:
            fresh = await self._client.fetch_token(account.id)
        except PollFailure as exc:
            logger.warning("Token poll failed, retrying in %ss: %s", self._retry_backoff_seconds, exc)
            self._state.error = str(exc)
            self._state.changed()
            return self._retry_backoff_seconds

        current = self._state.token or TokenState(code=fresh.code)
        self._state.token = dataclasses.replace(
            current, code=fresh.code, remaining_seconds=fresh.remaining_seconds
        )
        self._state.error = None
        self._state.changed()
        if fresh.remaining_seconds is not None:
            self._countdown.reset(fresh.remaining_seconds)
        return self.next_delay(fresh.remaining_seconds)

    async def _run(self, account: Account) -> None:
        while True:
            delay = await self.poll_once(account)
            await self._sleep(delay)
