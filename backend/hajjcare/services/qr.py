"""QR image rendering for share links."""

import io

import qrcode
from qrcode.constants import ERROR_CORRECT_M

# Quiet-zone width in modules
QR_BORDER = 2

# Pixel size of one module
QR_BOX_SIZE = 8


def render_qr_png(data: str) -> bytes:
    """Render ``data`` as a PNG QR code.

    Raises:
        ValueError: If ``data`` is empty.
    """
    if not data or not data.strip():
        raise ValueError("QR payload must not be empty")

    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_M,
        box_size=QR_BOX_SIZE,
        border=QR_BORDER,
    )
    qr.add_data(data)
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
