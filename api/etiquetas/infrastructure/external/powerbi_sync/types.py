"""
Tipos y utilidades puras para el pipeline Power BI -> Postgres.

Se mantienen libres de I/O para poder testearlos fácilmente.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

# Columnas del destino (mismos nombres que el dataset de Power BI).
COL_ORDER_ID = "ord_in_codigo"
COL_OPENED_AT = "ord_dt_abertura_real"
COL_BRANCH_ID = "fil_in_codigo"
COL_PRODUCT_CODE = "pro_st_alternativo"
COL_PRODUCT_DESCRIPTION = "pro_st_descricao"
COL_BATCH_CODE = "orl_st_lotefabricacao"
COL_COMPOSITION = "esv_st_valor"

LABEL_COLUMNS: tuple[str, ...] = (
    COL_ORDER_ID,
    COL_OPENED_AT,
    COL_BRANCH_ID,
    COL_PRODUCT_CODE,
    COL_PRODUCT_DESCRIPTION,
    COL_BATCH_CODE,
    COL_COMPOSITION,
)

# Clave compuesta: UNIQUE en la tabla destino y target del ON CONFLICT.
CONFLICT_COLUMNS: tuple[str, ...] = (COL_ORDER_ID, COL_BRANCH_ID, COL_BATCH_CODE)

DEFAULT_BRANCH_ID = 1
DEFAULT_PRODUCT_DESCRIPTION = "Produto sem descrição"

LogSink = Callable[[str], None]


def utc_now() -> datetime:
    """Retorna la hora actual en UTC, como datetime aware."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normaliza datetime a UTC (aware).

    Power BI devuelve fechas sin zona; se asumen en UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class ProductionLabelRecord:
    """Orden de producción lista para imprimir etiqueta."""

    order_id: int
    opened_at: datetime
    branch_id: int = DEFAULT_BRANCH_ID
    product_code: str = ""
    product_description: str = DEFAULT_PRODUCT_DESCRIPTION
    batch_code: str = ""
    composition: str = ""

    @property
    def key(self) -> tuple[int, int, str]:
        """Clave compuesta (orden, filial, lote)."""
        return (self.order_id, self.branch_id, self.batch_code)

    def to_row(self) -> dict[str, Any]:
        return {
            COL_ORDER_ID: self.order_id,
            COL_OPENED_AT: self.opened_at,
            COL_BRANCH_ID: self.branch_id,
            COL_PRODUCT_CODE: self.product_code,
            COL_PRODUCT_DESCRIPTION: self.product_description,
            COL_BATCH_CODE: self.batch_code,
            COL_COMPOSITION: self.composition,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ProductionLabelRecord":
        opened_at = row.get(COL_OPENED_AT)
        branch_id = row.get(COL_BRANCH_ID)
        return cls(
            order_id=int(row[COL_ORDER_ID]),
            opened_at=ensure_utc(opened_at) if opened_at else utc_now(),
            branch_id=int(branch_id) if branch_id is not None else DEFAULT_BRANCH_ID,
            product_code=row.get(COL_PRODUCT_CODE) or "",
            product_description=row.get(COL_PRODUCT_DESCRIPTION) or DEFAULT_PRODUCT_DESCRIPTION,
            batch_code=row.get(COL_BATCH_CODE) or "",
            composition=row.get(COL_COMPOSITION) or "",
        )


@dataclass(frozen=True)
class PowerBiSyncConfig:
    """Credenciales Azure AD + ubicación del dataset a consultar."""

    tenant_id: str
    client_id: str
    client_secret: str
    group_id: str
    dataset_id: str
    table_name: str
    scope: str = "https://analysis.windows.net/powerbi/api/.default"

    def __repr__(self) -> str:
        # No exponer el secret en logs/tracebacks.
        return (
            f"PowerBiSyncConfig(tenant_id={self.tenant_id!r}, client_id={self.client_id!r}, "
            f"group_id={self.group_id!r}, dataset_id={self.dataset_id!r}, "
            f"table_name={self.table_name!r}, scope={self.scope!r})"
        )


class SyncStage(str, Enum):
    """Estados del pipeline (lineal, sin retrocesos)."""

    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    QUERYING = "querying"
    TRANSFORMING = "transforming"
    UPSERTING = "upserting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BatchErrorPolicy(str, Enum):
    """Qué hacer cuando falla el UPSERT de un lote."""

    ABORT = "abort"
    CONTINUE = "continue"


@dataclass(frozen=True)
class UpsertOutcome:
    written: int
    batches: int
    failed_batches: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class SyncRunResult:
    """Resultado de una corrida. No se persiste."""

    records_written: int
    log_lines: list[str]
    failed_batches: list[int] = field(default_factory=list)
