"""
Servicios de aplicacion.
"""
from etiquetas.application.services.label_links import build_details_url, build_qr_data_uri
