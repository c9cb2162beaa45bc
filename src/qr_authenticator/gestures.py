"""Payloads carried by paste and drop gestures."""

from __future__ import annotations

import mimetypes
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

from qr_authenticator.decoder import DATA_URL_PREFIX, parse_data_url

IMAGE_TYPE_PREFIX = "image/"


class GestureItem(Protocol):
    mime_type: str

    def read_bytes(self) -> bytes: ...


def is_image_type(mime_type: str) -> bool:
    return mime_type.startswith(IMAGE_TYPE_PREFIX)


@dataclass(frozen=True)
class DataItem:
    """In-memory clipboard content with a declared media type."""

    mime_type: str
    data: bytes

    def read_bytes(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class FileItem:
    """A file on disk; its type is declared from the file name."""

    path: Path
    mime_type: str

    @classmethod
    def from_path(cls, path: Path) -> FileItem:
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(path=path, mime_type=guessed or "application/octet-stream")

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


@dataclass(frozen=True)
class ClipboardEvent:
    items: tuple[GestureItem, ...] = ()

    def first_image(self) -> GestureItem | None:
        return next((item for item in self.items if is_image_type(item.mime_type)), None)


@dataclass(frozen=True)
class DropEvent:
    files: tuple[FileItem, ...] = ()

    def first_file(self) -> FileItem | None:
        return self.files[0] if self.files else None


def _split_paths(text: str) -> list[Path]:
    """Split pasted text into paths, accepting quoting and ``file://`` URIs."""
    try:
        tokens = shlex.split(text)
    except ValueError:
        return []
    paths: list[Path] = []
    for token in tokens:
        if token.startswith("file://"):
            token = unquote(urlparse(token).path)
        try:
            paths.append(Path(token).expanduser())
        except RuntimeError:
            paths.append(Path(token))
    return paths


def _is_existing_file(path: Path) -> bool:
    try:
        return path.is_file()
    except (OSError, ValueError):
        return False


def gesture_from_paste(text: str) -> ClipboardEvent | DropEvent:
    """Classify text pasted into the terminal.

    A ``data:`` URL is clipboard content. Existing file paths are what
    terminals insert when files are dragged onto them, so they become a
    drop. Anything else is a clipboard holding plain text.
    """
    stripped = text.strip()
    if stripped.startswith(DATA_URL_PREFIX):
        try:
            mime_type, data = parse_data_url(stripped)
        except ValueError:
            return ClipboardEvent(items=(DataItem("text/plain", text.encode()),))
        return ClipboardEvent(items=(DataItem(mime_type, data),))

    paths = _split_paths(stripped)
    if paths and all(_is_existing_file(p) for p in paths):
        return DropEvent(files=tuple(FileItem.from_path(p) for p in paths))
    return ClipboardEvent(items=(DataItem("text/plain", text.encode()),))
