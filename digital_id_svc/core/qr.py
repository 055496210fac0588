from __future__ import annotations
from io import BytesIO
import qrcode
from qrcode.exceptions import DataOverflowError

from .config import get_settings
settings = get_settings()

_EC_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

def _build(data: str, ec_level: str) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None,  # smallest symbol that fits
        error_correction=_EC_LEVELS[ec_level],
        box_size=settings.qr_box_size,
        border=settings.qr_border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr

def render_qr_png(data: str, *, ec_level: str = "M") -> bytes:
    """
    Render a token as a PNG QR symbol.

    Long tokens (long trip names, many non-ASCII characters) may not fit at
    level M; level L is tried before giving up with DataOverflowError.
    """
    ec_level = ec_level.upper()
    try:
        qr = _build(data, ec_level)
    except DataOverflowError:
        if ec_level == "L":
            raise
        qr = _build(data, "L")
    img = qr.make_image(fill_color="black", back_color="white")
    b = BytesIO(); img.save(b, format="PNG")
    return b.getvalue()
