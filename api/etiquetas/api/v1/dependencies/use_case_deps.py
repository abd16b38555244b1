"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Depends

from etiquetas.api.v1.dependencies.repository_deps import get_label_repository
from etiquetas.application.use_cases.label_use_cases import LabelUseCases
from etiquetas.application.use_cases.sync_use_cases import PowerBiSyncUseCases
from etiquetas.core.config import settings
from etiquetas.infrastructure.external.powerbi_sync.sync_service import build_from_settings
from etiquetas.infrastructure.repositories.label_repository import LabelRepository


async def get_label_use_cases(
    repository: LabelRepository = Depends(get_label_repository)
) -> LabelUseCases:
    """
    Dependencia para obtener los casos de uso de etiquetas.

    Args:
        repository: Repositorio de etiquetas

    Returns:
        LabelUseCases: Instancia de casos de uso de etiquetas
    """
    return LabelUseCases(repository, settings.PUBLIC_BASE_URL)


def get_powerbi_sync_use_cases() -> PowerBiSyncUseCases:
    """
    Dependencia para obtener el caso de uso de sincronización Power BI.

    Returns:
        PowerBiSyncUseCases: pipeline construido desde settings en cada corrida
    """
    return PowerBiSyncUseCases(
        pipeline_factory=lambda: build_from_settings(settings),
        default_scope=settings.POWERBI_SCOPE,
    )
