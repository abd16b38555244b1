"""
Endpoints para sincronizacion de datos externos.
Permite sincronizar Power BI con PostgreSQL desde la UI.
"""
from fastapi import APIRouter, Depends, status
from loguru import logger

from etiquetas.api.v1.dependencies.use_case_deps import get_powerbi_sync_use_cases
from etiquetas.application.dto.sync_dto import PowerBiSyncRequestDTO, PowerBiSyncResponseDTO
from etiquetas.application.use_cases.sync_use_cases import PowerBiSyncUseCases


router = APIRouter(prefix="/sync", tags=["Sync"])


@router.post(
    "/powerbi",
    response_model=PowerBiSyncResponseDTO,
    status_code=status.HTTP_200_OK,
    summary="Sincronizar Power BI con PostgreSQL"
)
async def sync_powerbi(
    request: PowerBiSyncRequestDTO,
    use_cases: PowerBiSyncUseCases = Depends(get_powerbi_sync_use_cases)
) -> PowerBiSyncResponseDTO:
    """
    Ejecuta una corrida completa: token Azure AD, consulta DAX, normalizacion,
    deduplicacion y UPSERT por lotes.

    Si la corrida falla, la respuesta de error incluye la etapa (`stage`) y las
    lineas de log acumuladas hasta el fallo (`logLines`).
    """
    result = await use_cases.run(request)
    logger.info(f"Sync Power BI completado: {result.records_written} registro(s) guardado(s)")
    return result
