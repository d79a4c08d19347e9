from __future__ import annotations

import base64
import io

import qrcode


def render_png(data: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_data_url(data: str) -> str:
    """PNG QR code as a ``data:image/png;base64,...`` URL for <img src>."""
    encoded = base64.b64encode(render_png(data)).decode("ascii")
    return f"data:image/png;base64,{encoded}"
