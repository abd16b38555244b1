"""
DTOs del disparo de sincronización Power BI -> Postgres.

El payload usa camelCase, igual que la configuración que guarda la UI.
"""
from typing import Optional

from pydantic import BaseModel, Field


class PowerBiSyncRequestDTO(BaseModel):
    """
    Configuración de la corrida.

    Todos los campos son opcionales a nivel de esquema: los faltantes se
    reportan juntos como MalformedInputError, no como 422 campo por campo.
    """

    tenant_id: Optional[str] = Field(None, alias="tenantId")
    client_id: Optional[str] = Field(None, alias="clientId")
    client_secret: Optional[str] = Field(None, alias="clientSecret")
    scope: Optional[str] = Field(None, alias="scope")
    group_id: Optional[str] = Field(None, alias="groupId")
    dataset_id: Optional[str] = Field(None, alias="datasetId")
    table_name: Optional[str] = Field(None, alias="tableName")

    class Config:
        """Configuración de Pydantic."""
        populate_by_name = True


class PowerBiSyncResponseDTO(BaseModel):
    records_written: int = Field(..., alias="recordsWritten")
    log_lines: list[str] = Field(default_factory=list, alias="logLines")
    failed_batches: list[int] = Field(default_factory=list, alias="failedBatches")

    class Config:
        populate_by_name = True
