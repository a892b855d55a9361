"""QR image renderer for payment payloads."""
from __future__ import annotations

import base64
import io

import qrcode
from PIL import Image

from .config import settings

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


def generate_qr_image(data: str, *, level: str | None = None, size: int | None = None) -> Image.Image:
    """Generate a black-on-white QR image, optionally scaled to ``size`` pixels square."""

    level = (level or settings.render.error_correction).upper()
    if level not in ERROR_CORRECTION_LEVELS:
        raise ValueError(f"Unknown error correction level: {level}")

    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECTION_LEVELS[level],
        box_size=settings.render.box_size,
        border=settings.render.border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    if size is not None and image.size != (size, size):
        image = image.resize((size, size), resample=Image.Resampling.NEAREST)
    return image


def qr_image_to_png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def render_png(url: str, payload: str, *, size: int | None = None, level: str | None = None) -> str:
    """Render ``url + payload`` into a base64 PNG string without line breaks."""

    image = generate_qr_image(f"{url}{payload}", level=level, size=size)
    return base64.b64encode(qr_image_to_png_bytes(image)).decode("ascii")
