"""
Repositorio Postgres (psycopg) para la tabla de etiquetas (UPSERT).

Se usa psycopg (v3) con una conexión de escritura dedicada
(SYNC_DATABASE_URL); la lectura de la API usa otra credencial.

Precondición de esquema: la tabla destino debe tener
UNIQUE (ord_in_codigo, fil_in_codigo, orl_st_lotefabricacao). Ver schema.sql.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Sequence

import psycopg
from psycopg import errors as pg_errors
from psycopg.rows import dict_row

from .types import CONFLICT_COLUMNS, LABEL_COLUMNS

SCHEMA_SQL_PATH = Path(__file__).resolve().parent / "schema.sql"


def read_schema_sql(table_name: str) -> str:
    """DDL recomendado para la tabla destino."""
    return SCHEMA_SQL_PATH.read_text(encoding="utf-8").replace("{table}", _qualified(table_name))


def _quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _qualified(table_name: str) -> str:
    """'schema.tabla' o 'tabla' -> identificadores entre comillas."""
    return ".".join(_quote_ident(part) for part in table_name.split("."))


def build_upsert_sql(
    table_name: str,
    columns: Sequence[str] = LABEL_COLUMNS,
    conflict_columns: Sequence[str] = CONFLICT_COLUMNS,
) -> str:
    """
    INSERT ... ON CONFLICT (clave compuesta) DO UPDATE.

    Una clave existente reemplaza las demás columnas; una clave nueva inserta.
    """
    insert_cols_sql = ", ".join(_quote_ident(c) for c in columns)
    placeholders = ", ".join(["%s"] * len(columns))
    conflict_sql = ", ".join(_quote_ident(c) for c in conflict_columns)
    update_cols = [c for c in columns if c not in conflict_columns]
    set_sql = ", ".join(f"{_quote_ident(c)} = EXCLUDED.{_quote_ident(c)}" for c in update_cols)

    return (
        f"INSERT INTO {_qualified(table_name)} ({insert_cols_sql}) "
        f"VALUES ({placeholders}) "
        f"ON CONFLICT ({conflict_sql}) DO UPDATE SET {set_sql}"
    )


class PostgresLabelRepository:
    def __init__(self, dsn: str, table_name: str) -> None:
        self._dsn = dsn
        self._table_name = table_name

    @property
    def table_name(self) -> str:
        return self._table_name

    def connect(self) -> psycopg.Connection:
        """
        Abre conexión (autocommit False). El caller controla commits.
        """
        try:
            return psycopg.connect(self._dsn, row_factory=dict_row)
        except psycopg.OperationalError as e:
            raise psycopg.OperationalError(
                f"{e}\n"
                f"Sugerencia: verifica que SYNC_DATABASE_URL sea accesible desde donde ejecutas el sync "
                f"y que el rol tenga permisos de escritura sobre {self._table_name}."
            ) from e

    def ensure_table(self, conn: psycopg.Connection) -> None:
        with conn.cursor() as cur:
            cur.execute(read_schema_sql(self._table_name))

    def upsert_batch(self, conn: psycopg.Connection, rows: Iterable[dict[str, Any]]) -> int:
        """
        UPSERT de un lote y commit. Si algo falla, rollback y relanza el error de psycopg.

        Retorna la cantidad de filas enviadas.
        """
        rows_list = list(rows)
        if not rows_list:
            return 0

        sql = build_upsert_sql(self._table_name)
        values = [tuple(row[c] for c in LABEL_COLUMNS) for row in rows_list]

        try:
            with conn.cursor() as cur:
                cur.executemany(sql, values)
            conn.commit()
        except psycopg.Error:
            conn.rollback()
            raise
        return len(rows_list)

    @staticmethod
    def is_missing_conflict_constraint(exc: BaseException) -> bool:
        """
        42P10: "there is no unique or exclusion constraint matching the ON CONFLICT specification".
        """
        if isinstance(exc, pg_errors.InvalidColumnReference):
            return True
        return getattr(exc, "sqlstate", None) == "42P10"
