"""
Repositorio de lectura de etiquetas de producción.

Se consulta la tabla por nombre (no por el modelo ORM) porque el nombre es
configurable y, en algunos backends, el identificador llega con otra
capitalización que la usada al crear la tabla.
"""
from typing import List

from loguru import logger
from sqlalchemy import BigInteger, DateTime, Integer, Text, column, select, table
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from etiquetas.core.config import settings
from etiquetas.infrastructure.external.powerbi_sync.types import (
    COL_BATCH_CODE,
    COL_BRANCH_ID,
    COL_COMPOSITION,
    COL_OPENED_AT,
    COL_ORDER_ID,
    COL_PRODUCT_CODE,
    COL_PRODUCT_DESCRIPTION,
    ProductionLabelRecord,
)
from etiquetas.shared.exceptions.domain import StorageReadError


def _labels_table(table_name: str):
    schema = None
    name = table_name
    if "." in table_name:
        schema, name = table_name.split(".", 1)
    return table(
        name,
        column(COL_ORDER_ID, BigInteger),
        column(COL_OPENED_AT, DateTime(timezone=True)),
        column(COL_BRANCH_ID, Integer),
        column(COL_PRODUCT_CODE, Text),
        column(COL_PRODUCT_DESCRIPTION, Text),
        column(COL_BATCH_CODE, Text),
        column(COL_COMPOSITION, Text),
        schema=schema,
    )


def is_unknown_table_error(exc: BaseException) -> bool:
    """42P01 en Postgres, 'no such table' en SQLite."""
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == "42P01":
        return True
    message = str(orig if orig is not None else exc).lower()
    return "no such table" in message or ("relation" in message and "does not exist" in message)


class LabelRepository:
    """
    Consulta de etiquetas por número de OP.
    """

    def __init__(self, db: AsyncSession, table_name: str = settings.LABELS_TABLE_NAME):
        self.db = db
        self.table_name = table_name

    async def find_by_order_id(self, order_id: int) -> List[ProductionLabelRecord]:
        """
        Retorna todas las filas de la OP (una por filial/lote), o [] si no existe.
        """
        try:
            return await self._select(self.table_name, order_id)
        except DBAPIError as e:
            fallback = self.table_name.lower()
            if not is_unknown_table_error(e) or fallback == self.table_name:
                raise StorageReadError(
                    f"Error al consultar etiquetas de la OP {order_id}: {e.orig or e}",
                    self.table_name,
                ) from e

            logger.warning(
                f"Tabla '{self.table_name}' no reconocida; reintentando como '{fallback}'"
            )
            await self.db.rollback()

        try:
            return await self._select(fallback, order_id)
        except DBAPIError as e:
            raise StorageReadError(
                f"Error al consultar etiquetas de la OP {order_id}: {e.orig or e}",
                fallback,
            ) from e

    async def _select(self, table_name: str, order_id: int) -> List[ProductionLabelRecord]:
        labels = _labels_table(table_name)
        query = (
            select(labels)
            .where(labels.c[COL_ORDER_ID] == order_id)
            .order_by(labels.c[COL_BRANCH_ID], labels.c[COL_BATCH_CODE])
        )
        result = await self.db.execute(query)
        return [ProductionLabelRecord.from_row(dict(row)) for row in result.mappings().all()]
