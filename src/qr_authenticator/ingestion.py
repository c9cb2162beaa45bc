"""Turn a pasted or dropped QR image into a registered account."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable

from PIL import Image

from qr_authenticator import decoder
from qr_authenticator.client import AccountServiceClient
from qr_authenticator.errors import ImageLoadFailure, IngestionError, NoImageFound, NoQRCode, NotAnImage
from qr_authenticator.gestures import ClipboardEvent, DropEvent, GestureItem, is_image_type
from qr_authenticator.state import PENDING_CODE, Account, IngestionStatus, SessionState, TokenState

logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    DECODING = "decoding"
    REGISTERING = "registering"
    ERROR = "error"


class IngestionPipeline:
    """Runs one ingestion at a time: load, decode, register.

    Gestures arriving while an ingestion is in flight are ignored.
    """

    def __init__(
        self,
        client: AccountServiceClient,
        state: SessionState,
        on_registered: Callable[[Account], None] | None = None,
    ) -> None:
        self._client = client
        self._state = state
        self._on_registered = on_registered
        self.stage = Stage.IDLE
        self._generation = 0

    def cancel(self) -> None:
        """Discard the result of any ingestion still in flight."""
        self._generation += 1

    async def begin_from_clipboard(self, event: ClipboardEvent) -> Account | None:
        def pick() -> GestureItem:
            item = event.first_image()
            if item is None:
                raise NoImageFound()
            return item

        return await self._ingest("clipboard", pick)

    async def begin_from_drop(self, event: DropEvent) -> Account | None:
        def pick() -> GestureItem:
            item = event.first_file()
            if item is None or not is_image_type(item.mime_type):
                raise NotAnImage()
            return item

        return await self._ingest("drop", pick)

    async def _ingest(self, source: str, pick: Callable[[], GestureItem]) -> Account | None:
        if self._state.is_busy:
            logger.info("Ignoring %s gesture while another ingestion is running", source)
            return None

        self._state.status = IngestionStatus.BUSY
        self._state.error = None
        self._state.changed()
        generation = self._generation
        try:
            self.stage = Stage.LOADING
            item = pick()
            account = await self._run(item, generation)
        except IngestionError as exc:
            if generation != self._generation:
                logger.info("Dropping %s failure from a cancelled ingestion: %s", source, exc)
                return None
            logger.warning("Ingestion from %s failed during %s: %s", source, self.stage.value, exc)
            self.stage = Stage.ERROR
            self._state.error = str(exc)
            return None
        finally:
            self.stage = Stage.IDLE
            self._state.status = IngestionStatus.IDLE
            self._state.changed()

        if account is not None and self._on_registered is not None:
            self._on_registered(account)
        return account

    async def _run(self, item: GestureItem, generation: int) -> Account | None:
        img = await asyncio.to_thread(self._load, item)

        self.stage = Stage.DECODING
        payload = await asyncio.to_thread(decoder.decode, img)
        if payload is None:
            raise NoQRCode()

        self.stage = Stage.REGISTERING
        account = await self._client.register(payload)
        if generation != self._generation:
            logger.info("Dropping registration of %s, session was reset meanwhile", account.id)
            return None

        self._state.account = account
        self._state.token = TokenState(code=PENDING_CODE)
        self._state.countdown = None
        self._state.error = None
        return account

    @staticmethod
    def _load(item: GestureItem) -> Image.Image:
        try:
            raw = item.read_bytes()
        except OSError as exc:
            raise ImageLoadFailure() from exc
        return decoder.load_image(raw)
