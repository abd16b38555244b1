"""
Casos de uso de la aplicacion.
"""
from .label_use_cases import LabelUseCases
from .sync_use_cases import PowerBiSyncUseCases

__all__ = ["LabelUseCases", "PowerBiSyncUseCases"]
