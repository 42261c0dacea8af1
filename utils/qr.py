"""
QR codes that send players' phones to an event page
"""
import base64
import io

import qrcode

from utils.settings import PUBLIC_BASE_URL


def player_url(event_code: str) -> str:
    return f"{PUBLIC_BASE_URL}/event/{event_code}"


def qr_data_uri(data: str) -> str:
    """Render ``data`` as a PNG QR code wrapped in a data URI"""
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode()
    return f"data:image/png;base64,{encoded}"
