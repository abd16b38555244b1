"""
Sesiones async de la ruta de lectura (consulta de etiquetas).

La API solo lee: DATABASE_URL debería apuntar a un rol sin permisos de
escritura. Los UPSERT del sync usan psycopg con SYNC_DATABASE_URL.
"""
from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker
)
from sqlalchemy.orm import declarative_base

from etiquetas.core.config import settings


Base = declarative_base()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Engine async para `url`.

    SQLite (tests) no admite pool_size/max_overflow; en PostgreSQL se usa pool
    con pre-ping porque la API puede quedar ociosa entre impresiones.
    """
    args = {"echo": echo}
    if make_url(url).get_backend_name() == "postgresql":
        args.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,
        })
    return create_async_engine(url, **args)


engine = build_engine(settings.effective_database_url, echo=settings.DEBUG)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Sesión por request, para usar como dependencia en FastAPI.

    No hace commit: la ruta de lectura no modifica datos.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Crea la tabla de etiquetas si no existe (desarrollo y tests)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Cierra las conexiones de la base de datos."""
    await engine.dispose()
