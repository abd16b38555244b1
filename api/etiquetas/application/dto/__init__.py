"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .label_dto import LabelResponseDTO, LabelQrResponseDTO
from .sync_dto import PowerBiSyncRequestDTO, PowerBiSyncResponseDTO

__all__ = [
    "LabelResponseDTO",
    "LabelQrResponseDTO",
    "PowerBiSyncRequestDTO",
    "PowerBiSyncResponseDTO",
]
