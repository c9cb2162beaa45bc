"""HTTP client for the external account service.

The service owns TOTP secrets and computes codes; this client only registers
a decoded provisioning URI and asks for the current code.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from qr_authenticator.config import Settings
from qr_authenticator.errors import AuthenticatorError, PollFailure, RegistrationFailure
from qr_authenticator.state import Account, TokenState

logger = logging.getLogger(__name__)

ACCOUNTS_PATH = "/api/accounts"
TOKENS_PATH = "/api/tokens"


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    secret_name: str = Field(alias="secretName")
    issuer: str = ""
    account_name: str = Field(default="", alias="accountName")


class TokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    time_remaining: int | None = Field(default=None, alias="timeRemaining", ge=0)


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_message(response: httpx.Response, body: Any, fallback: str) -> str:
    """Pick the service-provided error text, else a generic message."""
    if isinstance(body, dict):
        message = body.get("error")
        if isinstance(message, str) and message:
            return message
    return f"{fallback} (HTTP {response.status_code})"


class AccountServiceClient:
    """Request/response wrapper around the registration and token endpoints."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._http = httpx.AsyncClient(
            base_url=settings.service_url.rstrip("/"),
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        error_cls: type[AuthenticatorError],
        **kwargs: Any,
    ) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise error_cls(f"Could not reach account service: {exc}") from exc

        logger.debug("%s %s -> %s", method, path, response.status_code)
        body = _json_body(response)
        if not response.is_success:
            raise error_cls(_error_message(response, body, error_cls.default_message))
        if body is None:
            raise error_cls(f"{error_cls.default_message}: response was not JSON")
        return body

    async def register(self, uri: str) -> Account:
        """Register a provisioning URI and return the created account."""
        body = await self._send("POST", ACCOUNTS_PATH, RegistrationFailure, json={"uri": uri})
        try:
            data = RegistrationResponse.model_validate(body)
        except ValidationError as exc:
            raise RegistrationFailure("Malformed registration response") from exc
        logger.info("Registered account %s (%s)", data.account_name, data.issuer)
        return Account(id=data.secret_name, issuer=data.issuer, account_name=data.account_name)

    async def fetch_token(self, account_id: str) -> TokenState:
        """Fetch the current code and its remaining validity for an account."""
        body = await self._send("GET", TOKENS_PATH, PollFailure, params={"id": account_id})
        try:
            data = TokenResponse.model_validate(body)
        except ValidationError as exc:
            raise PollFailure("Malformed token response") from exc
        return TokenState(code=data.token, remaining_seconds=data.time_remaining)
