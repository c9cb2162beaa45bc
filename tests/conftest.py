"""Shared fixtures for the qr_authenticator test suite."""

from __future__ import annotations

import asyncio
import io
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
import qrcode
from PIL import Image

from qr_authenticator.config import Settings

TOTP_URI = "otpauth://totp/Example:user@example.com?secret=JBSWY3DPEHPK3PXP&issuer=Example"

REGISTERED = {"secretName": "abc123", "issuer": "Example", "accountName": "user@example.com"}


def make_qr_png(data: str = TOTP_URI) -> bytes:
    """Render a QR code for ``data`` as PNG bytes."""
    buf = io.BytesIO()
    qrcode.make(data).save(buf)
    return buf.getvalue()


def make_blank_png() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (120, 120), "white").save(buf, format="PNG")
    return buf.getvalue()


async def wait_until(predicate: Callable[[], bool], rounds: int = 2000) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    for _ in range(rounds):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


class FakeSleep:
    """Stand-in for ``asyncio.sleep`` that parks until ``advance()`` is called."""

    def __init__(self) -> None:
        self.delays: list[float] = []
        self._waiters: list[asyncio.Future[None]] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        await fut

    @property
    def pending(self) -> int:
        return sum(1 for f in self._waiters if not f.done())

    def advance(self) -> None:
        waiters, self._waiters = self._waiters, []
        for fut in waiters:
            if not fut.done():
                fut.set_result(None)


class FakeAccountService:
    """Scripted account service for ``httpx.MockTransport``.

    ``token_responses`` are consumed one per token request; the last one
    repeats. Each entry is ``(status, body)`` or an exception to raise.
    Registration waits for ``register_gate`` when one is given.
    """

    def __init__(
        self,
        register_response: tuple[int, object] = (201, REGISTERED),
        token_responses: list[tuple[int, object] | Exception] | None = None,
        register_gate: asyncio.Event | None = None,
    ) -> None:
        self.register_response = register_response
        self.register_gate = register_gate
        self.token_responses = token_responses or [(200, {"token": "123456", "timeRemaining": 30})]
        self.requests: list[httpx.Request] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def token_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == "/api/tokens"]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if request.url.path == "/api/accounts":
                if self.register_gate is not None:
                    await self.register_gate.wait()
                status, body = self.register_response
            else:
                index = min(len(self.token_requests) - 1, len(self.token_responses) - 1)
                scripted = self.token_responses[index]
                if isinstance(scripted, Exception):
                    raise scripted
                status, body = scripted
            if isinstance(body, (dict, list)):
                return httpx.Response(status, json=body)
            return httpx.Response(status, content=str(body).encode())
        finally:
            self.in_flight -= 1

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings() -> Settings:
    return Settings(service_url="http://testserver")


@pytest.fixture
def service() -> FakeAccountService:
    return FakeAccountService()


@pytest.fixture
def qr_png() -> bytes:
    return make_qr_png()


@pytest.fixture
def qr_file(tmp_path: Path, qr_png: bytes) -> Path:
    path = tmp_path / "code.png"
    path.write_bytes(qr_png)
    return path
