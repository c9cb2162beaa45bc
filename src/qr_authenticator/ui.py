"""Textual TUI for the QR authenticator."""

from __future__ import annotations

from typing import ClassVar

import pyperclip
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Header, Static

from qr_authenticator.clipboard import grab_clipboard
from qr_authenticator.config import Settings
from qr_authenticator.gestures import ClipboardEvent, DropEvent, gesture_from_paste
from qr_authenticator.session import AuthenticatorSession
from qr_authenticator.state import PENDING_CODE, SessionState

DROP_HINT = "Paste or drop QR code here"
BUSY_HINT = "Processing..."


class AuthenticatorApp(App[None]):
    """Shows the current code of one account registered from a QR image."""

    TITLE = "My Authenticator"
    CSS = """
    #drop-zone {
        height: 5;
        margin: 1 2;
        border: dashed $accent;
        content-align: center middle;
    }
    #drop-zone.busy {
        background: $boost;
    }
    #account-row {
        height: 4;
        margin: 0 2;
        border: solid $accent;
    }
    #account-info {
        width: 1fr;
    }
    #issuer {
        text-style: bold;
    }
    #account-name, #countdown {
        color: $text-muted;
    }
    #token-info {
        width: 20;
    }
    #code, #countdown {
        text-align: right;
    }
    #error {
        margin: 0 2;
        color: $error;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("p", "paste_image", "Paste image"),
        Binding("c", "copy_code", "Copy code"),
        Binding("ctrl+r", "reset", "Reset"),
    ]

    def __init__(
        self,
        settings: Settings | None = None,
        session: AuthenticatorSession | None = None,
    ) -> None:
        super().__init__()
        self._settings = settings or Settings()
        self._session = session

    @property
    def session(self) -> AuthenticatorSession:
        if self._session is None:
            self._session = AuthenticatorSession(self._settings)
        return self._session

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="account-row"):
            with Vertical(id="account-info"):
                yield Static(PENDING_CODE, id="issuer")
                yield Static(PENDING_CODE, id="account-name")
            with Vertical(id="token-info"):
                yield Static(PENDING_CODE, id="code")
                yield Static(f"{PENDING_CODE} seconds", id="countdown")
        yield Static(DROP_HINT, id="drop-zone")
        yield Static("", id="error")
        yield Footer()

    def on_mount(self) -> None:
        self.session.state.subscribe(self._render_state)
        self._render_state(self.session.state)

    async def on_unmount(self) -> None:
        self.session.state.unsubscribe(self._render_state)
        await self.session.aclose()

    def _render_state(self, state: SessionState) -> None:
        self.query_one("#account-row").display = state.has_account
        if state.account is not None:
            self.query_one("#issuer", Static).update(state.account.issuer or PENDING_CODE)
            self.query_one("#account-name", Static).update(state.account.account_name or PENDING_CODE)
        code = state.token.code if state.token is not None else PENDING_CODE
        self.query_one("#code", Static).update(Text(code, style="bold cyan"))
        countdown = state.countdown if state.countdown else PENDING_CODE
        self.query_one("#countdown", Static).update(f"{countdown} seconds")

        drop_zone = self.query_one("#drop-zone", Static)
        drop_zone.update(BUSY_HINT if state.is_busy else DROP_HINT)
        drop_zone.set_class(state.is_busy, "busy")
        self.query_one("#error", Static).update(state.error or "")

    # -- gestures -----------------------------------------------------------

    def _start_ingestion(self, gesture: ClipboardEvent | DropEvent) -> None:
        if isinstance(gesture, DropEvent):
            work = self.session.drop(gesture)
        else:
            work = self.session.paste(gesture)
        self.run_worker(work, name="ingestion", group="ingestion")

    def on_paste(self, event: events.Paste) -> None:
        event.stop()
        self._start_ingestion(gesture_from_paste(event.text))

    def action_paste_image(self) -> None:
        self._start_ingestion(grab_clipboard())

    def action_copy_code(self) -> None:
        token = self.session.state.token
        if token is None or token.code == PENDING_CODE:
            self.notify("No code to copy yet.", severity="warning")
            return
        try:
            pyperclip.copy(token.code)
        except pyperclip.PyperclipException as e:
            self.notify(f"Copy failed: {e}", severity="error")
            return
        self.notify(f"Copied: {token.code}", severity="information")

    def action_reset(self) -> None:
        self.session.reset()
