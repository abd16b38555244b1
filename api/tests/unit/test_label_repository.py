from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.ext.asyncio import AsyncSession

from etiquetas.infrastructure.database.models import ProductionLabelModel
from etiquetas.infrastructure.external.powerbi_sync.row_mapping import normalize_row
from etiquetas.infrastructure.repositories.label_repository import (
    LabelRepository,
    is_unknown_table_error,
)
from etiquetas.shared.exceptions.domain import StorageReadError


async def _seed(db: AsyncSession) -> None:
    opened = datetime(2025, 2, 1, 7, 0, tzinfo=timezone.utc)
    db.add_all([
        ProductionLabelModel(
            ord_in_codigo=244, ord_dt_abertura_real=opened, fil_in_codigo=2,
            pro_st_alternativo="X1", pro_st_descricao="Tecido azul",
            orl_st_lotefabricacao="L2", esv_st_valor="100% algodao",
        ),
        ProductionLabelModel(
            ord_in_codigo=244, ord_dt_abertura_real=opened, fil_in_codigo=1,
            pro_st_alternativo="X1", pro_st_descricao="Tecido azul",
            orl_st_lotefabricacao="L1", esv_st_valor="100% algodao",
        ),
        ProductionLabelModel(ord_in_codigo=245, ord_dt_abertura_real=opened),
    ])
    await db.commit()


@pytest.mark.asyncio
async def test_find_by_order_id_returns_every_row_of_the_order(db_session: AsyncSession) -> None:
    await _seed(db_session)

    records = await LabelRepository(db_session, "etiquetas_producao").find_by_order_id(244)

    assert [(r.branch_id, r.batch_code) for r in records] == [(1, "L1"), (2, "L2")]
    assert records[0].product_description == "Tecido azul"
    assert records[0].opened_at == datetime(2025, 2, 1, 7, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_unknown_order_returns_empty_list(db_session: AsyncSession) -> None:
    await _seed(db_session)

    assert await LabelRepository(db_session, "etiquetas_producao").find_by_order_id(999) == []


@pytest.mark.asyncio
async def test_server_defaults_fill_missing_columns(db_session: AsyncSession) -> None:
    await _seed(db_session)

    [record] = await LabelRepository(db_session, "etiquetas_producao").find_by_order_id(245)

    assert record.branch_id == 1
    assert record.product_description == "Produto sem descrição"
    assert record.batch_code == ""


@pytest.mark.asyncio
async def test_branch_zero_survives_the_round_trip(db_session: AsyncSession) -> None:
    record = normalize_row({"ord_in_codigo": 9, "fil_in_codigo": 0, "orl_st_lotefabricacao": "L"})
    db_session.add(ProductionLabelModel(**record.to_row()))
    await db_session.commit()

    [stored] = await LabelRepository(db_session, "etiquetas_producao").find_by_order_id(9)

    assert stored.branch_id == 0
    assert stored.key == record.key == (9, 0, "L")


@pytest.mark.asyncio
async def test_missing_lowercase_table_is_a_storage_error(db_session: AsyncSession) -> None:
    with pytest.raises(StorageReadError) as exc_info:
        await LabelRepository(db_session, "tabla_inexistente").find_by_order_id(1)

    assert exc_info.value.status_code == 503
    assert exc_info.value.details == {"table": "tabla_inexistente"}


@pytest.mark.asyncio
async def test_unknown_table_retries_with_lowercase_name() -> None:
    undefined = ProgrammingError(
        "SELECT ...", {}, Exception('relation "Etiquetas_Producao" does not exist')
    )
    result = MagicMock()
    result.mappings.return_value.all.return_value = [
        {"ord_in_codigo": 244, "ord_dt_abertura_real": None, "fil_in_codigo": 1,
         "pro_st_alternativo": "X1", "pro_st_descricao": None,
         "orl_st_lotefabricacao": "L1", "esv_st_valor": ""},
    ]
    db = MagicMock()
    db.execute = AsyncMock(side_effect=[undefined, result])
    db.rollback = AsyncMock()

    records = await LabelRepository(db, "Etiquetas_Producao").find_by_order_id(244)

    assert [r.product_code for r in records] == ["X1"]
    db.rollback.assert_awaited_once()
    retried = str(db.execute.await_args_list[1].args[0])
    assert "FROM etiquetas_producao" in retried


@pytest.mark.asyncio
async def test_connectivity_error_does_not_retry() -> None:
    db = MagicMock()
    db.execute = AsyncMock(side_effect=OperationalError("SELECT ...", {}, Exception("connection refused")))
    db.rollback = AsyncMock()

    with pytest.raises(StorageReadError):
        await LabelRepository(db, "Etiquetas_Producao").find_by_order_id(244)

    assert db.execute.await_count == 1
    db.rollback.assert_not_awaited()


def test_unknown_table_detection() -> None:
    class _PgError(Exception):
        sqlstate = "42P01"

    assert is_unknown_table_error(ProgrammingError("q", {}, _PgError("x")))
    assert is_unknown_table_error(OperationalError("q", {}, Exception("no such table: t")))
    assert not is_unknown_table_error(OperationalError("q", {}, Exception("timeout")))
