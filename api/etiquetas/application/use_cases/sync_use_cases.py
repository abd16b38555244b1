"""
Caso de uso para disparar la sincronización Power BI -> Postgres desde la API.
"""
import asyncio
from typing import Callable

from loguru import logger

from etiquetas.application.dto.sync_dto import PowerBiSyncRequestDTO, PowerBiSyncResponseDTO
from etiquetas.infrastructure.external.powerbi_sync.sync_service import PowerBiToPostgresSync
from etiquetas.infrastructure.external.powerbi_sync.types import PowerBiSyncConfig
from etiquetas.shared.exceptions.domain import MalformedInputError

# (atributo del DTO, nombre en el payload)
REQUIRED_FIELDS = (
    ("tenant_id", "tenantId"),
    ("client_id", "clientId"),
    ("client_secret", "clientSecret"),
    ("group_id", "groupId"),
    ("dataset_id", "datasetId"),
    ("table_name", "tableName"),
)


def to_sync_config(dto: PowerBiSyncRequestDTO, default_scope: str) -> PowerBiSyncConfig:
    """
    Valida el payload y lo convierte en PowerBiSyncConfig.

    Campos ausentes o en blanco se reportan todos juntos.
    """
    missing = [alias for attr, alias in REQUIRED_FIELDS if not (getattr(dto, attr) or "").strip()]
    if missing:
        raise MalformedInputError(missing)

    return PowerBiSyncConfig(
        tenant_id=dto.tenant_id.strip(),
        client_id=dto.client_id.strip(),
        client_secret=dto.client_secret,
        group_id=dto.group_id.strip(),
        dataset_id=dto.dataset_id.strip(),
        table_name=dto.table_name.strip(),
        scope=(dto.scope or "").strip() or default_scope,
    )


class PowerBiSyncUseCases:
    """
    Ejecuta una corrida del pipeline.

    El pipeline es síncrono (requests + psycopg); se ejecuta en un thread para
    no bloquear el event loop. Se construye uno nuevo por corrida.
    """

    def __init__(self, pipeline_factory: Callable[[], PowerBiToPostgresSync], default_scope: str):
        self.pipeline_factory = pipeline_factory
        self.default_scope = default_scope

    async def run(self, dto: PowerBiSyncRequestDTO) -> PowerBiSyncResponseDTO:
        config = to_sync_config(dto, self.default_scope)
        logger.info(f"Iniciando sincronizacion Power BI -> Postgres desde API: {config!r}")

        pipeline = self.pipeline_factory()
        result = await asyncio.to_thread(pipeline.run, config)

        return PowerBiSyncResponseDTO(
            records_written=result.records_written,
            log_lines=result.log_lines,
            failed_batches=result.failed_batches,
        )
