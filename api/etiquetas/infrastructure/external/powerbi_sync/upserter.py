"""
Escritura por lotes de etiquetas en Postgres.

Los lotes se envían en orden, uno a la vez: el ON CONFLICT de Postgres no
es seguro frente a UPSERTs concurrentes sobre claves solapadas.
"""

from __future__ import annotations

from typing import Iterator, Sequence, TypeVar

import psycopg

from etiquetas.shared.exceptions.sync import MissingConflictConstraintError, StorageWriteError

from .pg_repository import PostgresLabelRepository
from .types import (
    CONFLICT_COLUMNS,
    BatchErrorPolicy,
    LogSink,
    ProductionLabelRecord,
    UpsertOutcome,
)

DEFAULT_BATCH_SIZE = 50

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Particiones contiguas de `size` elementos (la última puede ser menor)."""
    if size <= 0:
        raise ValueError("El tamaño de lote debe ser positivo")
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _to_storage_error(exc: psycopg.Error, batch_index: int, table_name: str) -> StorageWriteError:
    sqlstate = getattr(exc, "sqlstate", None)
    if PostgresLabelRepository.is_missing_conflict_constraint(exc):
        return MissingConflictConstraintError(
            f"La tabla {table_name} no tiene UNIQUE ({', '.join(CONFLICT_COLUMNS)}) "
            f"requerido por el UPSERT (lote {batch_index}): {exc}",
            batch_index=batch_index,
            sqlstate=sqlstate,
        )
    return StorageWriteError(
        f"Error al guardar lote {batch_index} en {table_name}: {exc}",
        batch_index=batch_index,
        sqlstate=sqlstate,
    )


class LabelUpserter:
    """
    Parte los registros en lotes y hace UPSERT de cada uno con su propio commit.

    Con BatchErrorPolicy.ABORT el primer lote fallido se propaga como
    StorageWriteError; con CONTINUE se registra y se sigue con el siguiente.
    """

    def __init__(
        self,
        repository: PostgresLabelRepository,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_batch_error: BatchErrorPolicy = BatchErrorPolicy.ABORT,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("El tamaño de lote debe ser positivo")
        self._repo = repository
        self._batch_size = batch_size
        self._on_batch_error = on_batch_error

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def on_batch_error(self) -> BatchErrorPolicy:
        return self._on_batch_error

    def upsert(
        self,
        conn: psycopg.Connection,
        records: Sequence[ProductionLabelRecord],
        log: LogSink,
    ) -> UpsertOutcome:
        written = 0
        batches = 0
        failed: list[int] = []

        for index, batch in enumerate(chunked(records, self._batch_size)):
            batches += 1
            try:
                written += self._repo.upsert_batch(conn, [r.to_row() for r in batch])
            except psycopg.Error as e:
                error = _to_storage_error(e, index, self._repo.table_name)
                log(f"[upserting] Error en lote {index} ({len(batch)} registros): {error.message}")
                if self._on_batch_error is BatchErrorPolicy.ABORT:
                    raise error from e
                failed.append(index)
                continue

            log(f"Lote {index}: {len(batch)} registros guardados ({written}/{len(records)})")

        return UpsertOutcome(written=written, batches=batches, failed_batches=failed)
