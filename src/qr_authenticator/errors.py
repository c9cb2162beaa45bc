"""Error kinds raised while ingesting QR images and refreshing tokens.

The string form of every error is the message shown to the user.
"""

from __future__ import annotations


class AuthenticatorError(Exception):
    """Base class for all errors surfaced in the session error line."""

    default_message = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class IngestionError(AuthenticatorError):
    """An ingestion attempt failed; the user has to paste or drop again."""


class NoImageFound(IngestionError):
    default_message = "No image found in clipboard"


class NotAnImage(IngestionError):
    default_message = "Please drop an image file"


class ImageLoadFailure(IngestionError):
    default_message = "Failed to read image"


class NoQRCode(IngestionError):
    default_message = "No QR code found in image"


class RegistrationFailure(IngestionError):
    default_message = "Failed to register account"


class PollFailure(AuthenticatorError):
    """A token refresh failed; the scheduler retries on its own."""

    default_message = "Failed to fetch token"
