"""
Mapeo de filas crudas de Power BI -> ProductionLabelRecord.

executeQueries devuelve los nombres de columna a veces como "[col]" y a
veces como "col", según la configuración del dataset. Cada campo declara
su lista ordenada de claves candidatas; se toma la primera con valor.

Este módulo no realiza I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional

from loguru import logger

from .types import (
    COL_BATCH_CODE,
    COL_BRANCH_ID,
    COL_COMPOSITION,
    COL_OPENED_AT,
    COL_ORDER_ID,
    COL_PRODUCT_CODE,
    COL_PRODUCT_DESCRIPTION,
    DEFAULT_BRANCH_ID,
    DEFAULT_PRODUCT_DESCRIPTION,
    ProductionLabelRecord,
    ensure_utc,
    utc_now,
)


@dataclass(frozen=True)
class FieldSource:
    """
    Origen de un campo del registro.

    - field: atributo de ProductionLabelRecord
    - candidates: claves a probar en la fila cruda, en orden de preferencia
    """

    field: str
    candidates: tuple[str, ...]


def _bracketed_then_bare(column: str) -> tuple[str, ...]:
    return (f"[{column}]", column)


FIELD_SOURCES: tuple[FieldSource, ...] = (
    FieldSource("order_id", _bracketed_then_bare(COL_ORDER_ID)),
    FieldSource("opened_at", _bracketed_then_bare(COL_OPENED_AT)),
    FieldSource("branch_id", _bracketed_then_bare(COL_BRANCH_ID)),
    FieldSource("product_code", _bracketed_then_bare(COL_PRODUCT_CODE)),
    FieldSource("product_description", _bracketed_then_bare(COL_PRODUCT_DESCRIPTION)),
    FieldSource("batch_code", _bracketed_then_bare(COL_BATCH_CODE)),
    FieldSource("composition", _bracketed_then_bare(COL_COMPOSITION)),
)


def resolve_value(raw: dict[str, Any], candidates: tuple[str, ...]) -> Any:
    """Primer valor presente (no None, no string vacío) entre las claves candidatas."""
    for key in candidates:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        try:
            as_float = float(str(value).strip())
        except ValueError:
            return None
        return int(as_float) if as_float.is_integer() else None


def _to_datetime(value: Any, now: datetime) -> datetime:
    if value is None:
        return now
    if isinstance(value, datetime):
        return ensure_utc(value)
    try:
        # Power BI serializa fechas como "2024-05-01T00:00:00" (a veces con Z)
        return ensure_utc(datetime.fromisoformat(str(value).strip().replace("Z", "+00:00")))
    except ValueError:
        logger.warning(f"Fecha de apertura no parseable '{value}', se usa la hora actual")
        return now


def _to_text(value: Any, default: str) -> str:
    if value is None:
        return default
    return str(value).strip()


def normalize_row(raw: dict[str, Any], now: Optional[datetime] = None) -> Optional[ProductionLabelRecord]:
    """
    Mapea una fila cruda a ProductionLabelRecord aplicando defaults.

    Retorna None (fila descartada) si no hay ord_in_codigo entero.
    """
    now = ensure_utc(now) if now else utc_now()
    values = {src.field: resolve_value(raw, src.candidates) for src in FIELD_SOURCES}

    order_id = _to_int(values["order_id"])
    if order_id is None:
        return None

    branch_id = _to_int(values["branch_id"])
    return ProductionLabelRecord(
        order_id=order_id,
        opened_at=_to_datetime(values["opened_at"], now),
        branch_id=branch_id if branch_id is not None else DEFAULT_BRANCH_ID,
        product_code=_to_text(values["product_code"], ""),
        product_description=_to_text(values["product_description"], DEFAULT_PRODUCT_DESCRIPTION),
        batch_code=_to_text(values["batch_code"], ""),
        composition=_to_text(values["composition"], ""),
    )


def normalize_rows(
    rows: Iterable[dict[str, Any]], now: Optional[datetime] = None
) -> list[ProductionLabelRecord]:
    """Normaliza preservando el orden de entrada (la deduplicación depende de él)."""
    now = ensure_utc(now) if now else utc_now()
    records = []
    for raw in rows:
        record = normalize_row(raw, now=now)
        if record is not None:
            records.append(record)
    return records


def deduplicate(records: Iterable[ProductionLabelRecord]) -> list[ProductionLabelRecord]:
    """
    Un registro por (orden, filial, lote); gana la última ocurrencia.

    Postgres rechaza un INSERT ... ON CONFLICT que toque la misma clave dos
    veces en un mismo comando, así que esto es obligatorio antes del UPSERT.
    """
    unique: dict[tuple[int, int, str], ProductionLabelRecord] = {}
    for record in records:
        unique[record.key] = record
    return list(unique.values())
