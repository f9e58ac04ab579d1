from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

_ERROR_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


def render_qr_png(target: str, error_correction: str = "H", border: int = 2, width: int = 300) -> bytes:
    """Render ``target`` as a PNG QR code roughly ``width`` pixels wide.

    High error correction keeps the code scannable from a cracked phone
    screen at the counter.
    """
    qr = qrcode.QRCode(
        error_correction=_ERROR_LEVELS[error_correction.upper()],
        border=border,
        box_size=1,
    )
    qr.add_data(target)
    qr.make(fit=True)
    # Whole pixels per module, closest to the requested width
    modules = qr.modules_count + 2 * border
    qr.box_size = max(1, width // modules)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = BytesIO()
    img.save(buf)
    return buf.getvalue()
