"""Read the system clipboard into a ClipboardEvent."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image, ImageGrab

from qr_authenticator.gestures import ClipboardEvent, DataItem, FileItem, GestureItem

logger = logging.getLogger(__name__)


def grab_clipboard() -> ClipboardEvent:
    """Snapshot the clipboard as image data and/or copied files.

    An unreadable or unsupported clipboard yields an empty event.
    """
    try:
        content = ImageGrab.grabclipboard()
    except (NotImplementedError, OSError) as exc:
        logger.warning("Clipboard unavailable: %s", exc)
        return ClipboardEvent()

    items: list[GestureItem] = []
    if isinstance(content, Image.Image):
        buf = io.BytesIO()
        content.save(buf, format="PNG")
        items.append(DataItem("image/png", buf.getvalue()))
    elif isinstance(content, list):
        items.extend(FileItem.from_path(Path(name)) for name in content)
    return ClipboardEvent(items=tuple(items))
