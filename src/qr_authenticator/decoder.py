"""Rasterize image bytes and read the QR payload embedded in them."""

from __future__ import annotations

import base64
import binascii
import io
import logging

import zxingcpp
from PIL import Image, UnidentifiedImageError

from qr_authenticator.errors import ImageLoadFailure

logger = logging.getLogger(__name__)

DATA_URL_PREFIX = "data:"


def parse_data_url(url: str) -> tuple[str, bytes]:
    """Split a base64 ``data:`` URL into its media type and decoded bytes."""
    header, sep, body = url.strip().partition(",")
    if not header.startswith(DATA_URL_PREFIX) or not sep or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URL")
    media_type = header[len(DATA_URL_PREFIX) : -len(";base64")] or "text/plain"
    try:
        return media_type, base64.b64decode(body, validate=True)
    except binascii.Error as exc:
        raise ValueError("Invalid base64 payload in data URL") from exc


def load_image(raw: bytes | str) -> Image.Image:
    """Decode raw image bytes (or a data URL) into a fully loaded raster."""
    try:
        data = parse_data_url(raw)[1] if isinstance(raw, str) else raw
        img = Image.open(io.BytesIO(data))
        img.load()
    except (ValueError, UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        logger.debug("Image load failed: %s", exc)
        raise ImageLoadFailure() from exc
    return img


def decode(img: Image.Image) -> str | None:
    """Return the text of the first QR symbol in the image, or None."""
    results = zxingcpp.read_barcodes(img.convert("L"), formats=zxingcpp.BarcodeFormat.QRCode)
    for result in results:
        if result.text:
            return result.text
    return None


def decode_pixels(data: bytes, width: int, height: int) -> str | None:
    """Decode a raw RGBA pixel buffer of the given dimensions."""
    if len(data) != width * height * 4:
        raise ValueError(f"Expected {width * height * 4} bytes of RGBA data, got {len(data)}")
    return decode(Image.frombytes("RGBA", (width, height), data))
