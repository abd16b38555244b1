"""
Enlace de detalle de una OP y su código QR.
"""
import base64
import io

import qrcode


def build_details_url(base_url: str, order_id: int) -> str:
    """
    URL pública de la vista de detalle de la OP (la que codifica el QR).

    La base llega como configuración (PUBLIC_BASE_URL); se ignora la barra final.
    """
    return f"{base_url.rstrip('/')}/#/view/{order_id}"


def build_qr_data_uri(payload: str) -> str:
    """PNG del QR como data URI, listo para un <img src=...>."""
    qr_img = qrcode.make(payload)
    buf = io.BytesIO()
    qr_img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
