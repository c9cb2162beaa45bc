"""Session data model shared by the pipeline, scheduler and UI."""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field

PENDING_CODE = "--"

Listener = Callable[["SessionState"], None]


@dataclass(frozen=True)
class Account:
    id: str
    issuer: str
    account_name: str


@dataclass(frozen=True)
class TokenState:
    code: str
    remaining_seconds: int | None = None


class IngestionStatus(enum.Enum):
    IDLE = "idle"
    BUSY = "busy"


@dataclass
class SessionState:
    """Mutable state of one in-memory session.

    Mutations are made by a single owner each (pipeline, scheduler or
    countdown) on the event loop thread; they call ``changed()`` afterwards so
    subscribers can re-render.
    """

    account: Account | None = None
    token: TokenState | None = None
    countdown: int | None = None
    status: IngestionStatus = IngestionStatus.IDLE
    error: str | None = None
    _listeners: list[Listener] = field(default_factory=list, repr=False)

    @property
    def is_busy(self) -> bool:
        return self.status is IngestionStatus.BUSY

    @property
    def has_account(self) -> bool:
        return self.account is not None

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def reset(self) -> None:
        """Discard the account and everything derived from it."""
        self.account = None
        self.token = None
        self.countdown = None
        self.error = None
        self.changed()
