"""
Ciclo de vida de la aplicacion (inicio y cierre).
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from loguru import logger

from etiquetas.core.config import settings
from etiquetas.infrastructure.database.session import close_db, init_db


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Inicializa recursos al arrancar y los libera al cerrar.

    En desarrollo crea la tabla de etiquetas si no existe; en produccion la
    conexion de lectura no tiene permisos de DDL y el esquema se gestiona con
    alembic o con `scripts/powerbi_to_postgres_sync.py --schema-only`.
    """
    try:
        logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
        logger.info(f"Entorno: {settings.ENVIRONMENT}")

        _validate_config()

        if settings.is_development:
            await init_db()
            logger.info("Base de datos inicializada")

        logger.add(
            settings.LOG_FILE,
            rotation="500 MB",
            retention="10 days",
            level=settings.LOG_LEVEL
        )

        logger.success("Aplicacion iniciada correctamente")
        _print_available_urls()
    except Exception as e:
        logger.error(f"Error durante startup: {e}")
        logger.exception("Detalle del error:")
        raise

    yield

    logger.info("Cerrando aplicacion...")
    await close_db()
    logger.info("Conexiones de base de datos cerradas")
    logger.success("Aplicacion cerrada correctamente")


def _validate_config() -> None:
    """Valida que la configuracion critica este presente."""
    warnings = []

    if not settings.SYNC_DATABASE_URL:
        warnings.append("SYNC_DATABASE_URL no configurada - el sync de Power BI fallara")

    if not settings.PUBLIC_BASE_URL.startswith(("http://", "https://")):
        warnings.append(f"PUBLIC_BASE_URL '{settings.PUBLIC_BASE_URL}' no es una URL absoluta - los QR no seran navegables")

    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")


def _print_available_urls() -> None:
    """Imprime las URLs disponibles de la aplicacion."""
    access_host = "localhost" if settings.HOST == "0.0.0.0" else settings.HOST
    base_url = f"http://{access_host}:{settings.PORT}"

    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")
    logger.opt(colors=True).info("<bold><green>URLS DISPONIBLES:</green></bold>")
    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")
    logger.opt(colors=True).info(f"<cyan>  Swagger UI:  {base_url}/docs</cyan>")
    logger.opt(colors=True).info(f"<cyan>  Etiquetas:   {base_url}/api/v1/labels/{{order_id}}</cyan>")
    logger.opt(colors=True).info(f"<cyan>  Sync:        {base_url}/api/v1/sync/powerbi</cyan>")
    logger.opt(colors=True).info(f"<cyan>  Health:      {base_url}/health</cyan>")
    logger.opt(colors=True).info("<bold><green>" + "=" * 80 + "</green></bold>")
