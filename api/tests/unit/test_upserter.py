from __future__ import annotations

from datetime import datetime
from typing import Any

import psycopg
import pytest
from psycopg import errors as pg_errors

from etiquetas.infrastructure.external.powerbi_sync.pg_repository import (
    PostgresLabelRepository,
    build_upsert_sql,
    read_schema_sql,
)
from etiquetas.infrastructure.external.powerbi_sync.types import (
    BatchErrorPolicy,
    ProductionLabelRecord,
)
from etiquetas.infrastructure.external.powerbi_sync.upserter import LabelUpserter, chunked
from etiquetas.shared.exceptions.sync import MissingConflictConstraintError, StorageWriteError


class _DummyCursor:
    def __init__(self) -> None:
        self.executed_sql: str | None = None
        self.executemany_values = None

    def executemany(self, sql: str, values) -> None:
        self.executed_sql = sql
        self.executemany_values = values

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class _DummyConn:
    def __init__(self) -> None:
        self._cursor = _DummyCursor()
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return self._cursor

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class _RecordingRepo:
    """Registra cada lote; falla en los índices indicados."""

    table_name = "etiquetas_producao"

    def __init__(self, fail_on: dict[int, Exception] | None = None) -> None:
        self.batches: list[list[dict[str, Any]]] = []
        self._fail_on = fail_on or {}

    def upsert_batch(self, conn, rows) -> int:
        index = len(self.batches)
        self.batches.append(list(rows))
        if index in self._fail_on:
            raise self._fail_on[index]
        return len(self.batches[-1])


def _records(n: int, now: datetime) -> list[ProductionLabelRecord]:
    return [ProductionLabelRecord(order_id=i, opened_at=now) for i in range(1, n + 1)]


def test_chunked_partitions_contiguously() -> None:
    assert [list(c) for c in chunked([1, 2, 3, 4, 5], 2)] == [[1, 2], [3, 4], [5]]
    with pytest.raises(ValueError):
        list(chunked([1], 0))


def test_upsert_sql_targets_composite_key() -> None:
    sql = build_upsert_sql("etiquetas_producao")

    assert sql.startswith('INSERT INTO "etiquetas_producao"')
    assert 'ON CONFLICT ("ord_in_codigo", "fil_in_codigo", "orl_st_lotefabricacao") DO UPDATE SET' in sql
    assert '"esv_st_valor" = EXCLUDED."esv_st_valor"' in sql
    assert '"ord_in_codigo" = EXCLUDED' not in sql


def test_upsert_sql_quotes_schema_qualified_table() -> None:
    assert 'INSERT INTO "producao"."etiquetas"' in build_upsert_sql("producao.etiquetas")


def test_schema_sql_declares_unique_constraint() -> None:
    ddl = read_schema_sql("etiquetas_producao")

    assert 'CREATE TABLE IF NOT EXISTS "etiquetas_producao"' in ddl
    assert "UNIQUE (ord_in_codigo, fil_in_codigo, orl_st_lotefabricacao)" in ddl


def test_repository_upsert_batch_commits(fixed_now: datetime) -> None:
    repo = PostgresLabelRepository("postgresql://dummy", "etiquetas_producao")
    conn = _DummyConn()
    rows = [r.to_row() for r in _records(2, fixed_now)]

    assert repo.upsert_batch(conn, rows) == 2
    assert conn.commits == 1
    assert "ON CONFLICT" in (conn._cursor.executed_sql or "")
    assert conn._cursor.executemany_values[0][0] == 1


def test_missing_conflict_constraint_is_detected() -> None:
    assert PostgresLabelRepository.is_missing_conflict_constraint(pg_errors.InvalidColumnReference("x"))
    assert not PostgresLabelRepository.is_missing_conflict_constraint(pg_errors.UniqueViolation("x"))


def test_batches_are_sequential_and_sized(fixed_now: datetime) -> None:
    repo = _RecordingRepo()
    lines: list[str] = []

    outcome = LabelUpserter(repo, batch_size=50).upsert(object(), _records(125, fixed_now), lines.append)

    assert [len(b) for b in repo.batches] == [50, 50, 25]
    assert [b[0]["ord_in_codigo"] for b in repo.batches] == [1, 51, 101]
    assert outcome.written == 125
    assert outcome.batches == 3
    assert outcome.failed_batches == []
    assert lines[-1] == "Lote 2: 25 registros guardados (125/125)"


def test_abort_policy_stops_at_first_failed_batch(fixed_now: datetime) -> None:
    repo = _RecordingRepo(fail_on={1: psycopg.OperationalError("conexion perdida")})
    lines: list[str] = []

    with pytest.raises(StorageWriteError) as exc_info:
        LabelUpserter(repo, batch_size=50).upsert(object(), _records(125, fixed_now), lines.append)

    assert exc_info.value.batch_index == 1
    assert len(repo.batches) == 2
    assert any("Error en lote 1" in line for line in lines)


def test_continue_policy_records_failed_batches(fixed_now: datetime) -> None:
    repo = _RecordingRepo(fail_on={1: psycopg.OperationalError("conexion perdida")})
    lines: list[str] = []
    upserter = LabelUpserter(repo, batch_size=50, on_batch_error=BatchErrorPolicy.CONTINUE)

    outcome = upserter.upsert(object(), _records(125, fixed_now), lines.append)

    assert len(repo.batches) == 3
    assert outcome.written == 75
    assert outcome.failed_batches == [1]
    assert any("Error en lote 1" in line for line in lines)


def test_missing_constraint_maps_to_specific_error(fixed_now: datetime) -> None:
    repo = _RecordingRepo(fail_on={0: pg_errors.InvalidColumnReference(
        "there is no unique or exclusion constraint matching the ON CONFLICT specification"
    )})

    with pytest.raises(MissingConflictConstraintError) as exc_info:
        LabelUpserter(repo).upsert(object(), _records(3, fixed_now), lambda _: None)

    assert exc_info.value.error_code == "MISSING_CONFLICT_CONSTRAINT"
    assert exc_info.value.sqlstate == "42P10"
    assert "UNIQUE" in exc_info.value.message


def test_invalid_batch_size() -> None:
    with pytest.raises(ValueError):
        LabelUpserter(_RecordingRepo(), batch_size=0)
