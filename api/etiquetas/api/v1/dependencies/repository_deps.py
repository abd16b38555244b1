"""
Dependencias para inyección de repositorios.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from etiquetas.core.config import settings
from etiquetas.infrastructure.database.session import get_db
from etiquetas.infrastructure.repositories.label_repository import LabelRepository


async def get_label_repository(
    session: AsyncSession = Depends(get_db)
) -> LabelRepository:
    """
    Dependencia para obtener el repositorio de etiquetas.

    Args:
        session: Sesión de base de datos

    Returns:
        LabelRepository: Repositorio sobre LABELS_TABLE_NAME
    """
    return LabelRepository(session, settings.LABELS_TABLE_NAME)
