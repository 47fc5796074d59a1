"""QR code encoding for crypto payment addresses."""

from __future__ import annotations

import io
from typing import Callable

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from .errors import QrEncodingError

QrEncoder = Callable[[str], bytes]


def encode_qr(payload: str, box_size: int = 8, border: int = 1) -> bytes:
    """Return a PNG image of ``payload``; raises QrEncodingError on failure."""
    if not payload or not payload.strip():
        raise QrEncodingError("QR payload is empty")
    try:
        qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=box_size, border=border)
        qr.add_data(payload.strip())
        qr.make(fit=True)
        image = qr.make_image(fill_color="black", back_color="white")
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
    except Exception as exc:
        raise QrEncodingError(f"Could not encode QR payload: {exc}") from exc
    return buffer.getvalue()
