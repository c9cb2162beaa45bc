"""Wire the pipeline, scheduler and countdown around one SessionState."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType

import httpx

from qr_authenticator.client import AccountServiceClient
from qr_authenticator.config import Settings
from qr_authenticator.countdown import CountdownInterpolator, Sleep
from qr_authenticator.gestures import ClipboardEvent, DropEvent
from qr_authenticator.ingestion import IngestionPipeline
from qr_authenticator.scheduler import TokenRefreshScheduler
from qr_authenticator.state import Account, SessionState

logger = logging.getLogger(__name__)


class AuthenticatorSession:
    """One in-memory authenticator session.

    Registering an account starts token polling; ``reset()`` and ``aclose()``
    cancel every timer the session owns.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        poll_sleep: Sleep = asyncio.sleep,
        tick_sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.settings = settings or Settings()
        self.state = SessionState()
        self.client = AccountServiceClient(self.settings, transport=transport)
        self.countdown = CountdownInterpolator(
            self.state, tick_seconds=self.settings.tick_seconds, sleep=tick_sleep
        )
        self.scheduler = TokenRefreshScheduler(
            self.client,
            self.state,
            self.countdown,
            fallback_seconds=self.settings.poll_fallback_seconds,
            retry_backoff_seconds=self.settings.retry_backoff_seconds,
            sleep=poll_sleep,
        )
        self.pipeline = IngestionPipeline(self.client, self.state, on_registered=self._on_registered)

    def _on_registered(self, account: Account) -> None:
        self.scheduler.start(account)

    async def paste(self, event: ClipboardEvent) -> Account | None:
        return await self.pipeline.begin_from_clipboard(event)

    async def drop(self, event: DropEvent) -> Account | None:
        return await self.pipeline.begin_from_drop(event)

    def reset(self) -> None:
        """Forget the account and stop polling and ticking."""
        self.pipeline.cancel()
        self.scheduler.stop()
        self.state.reset()
        logger.info("Session reset")

    async def aclose(self) -> None:
        self.scheduler.stop()
        await self.client.aclose()

    async def __aenter__(self) -> AuthenticatorSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
