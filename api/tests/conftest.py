"""
Configuración de fixtures para pytest.
"""
import os

# El engine se crea al importar la sesión: apuntarlo a SQLite antes de cualquier import de la app.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import etiquetas.infrastructure.database  # noqa: F401  registra los modelos en Base
from etiquetas.infrastructure.database.session import Base, build_engine
from etiquetas.infrastructure.external.powerbi_sync.types import PowerBiSyncConfig


# URL de base de datos de prueba
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Fixture que proporciona una sesión de base de datos para tests.
    Crea una base de datos en memoria para cada test.
    """
    engine = build_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def sync_config() -> PowerBiSyncConfig:
    return PowerBiSyncConfig(
        tenant_id="tenant-1",
        client_id="client-1",
        client_secret="s3cr3t",
        group_id="group-1",
        dataset_id="dataset-1",
        table_name="Ordens Producao",
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 10, 12, 0, 0, tzinfo=timezone.utc)
