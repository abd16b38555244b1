"""
Script para inicializar la tabla de etiquetas (desarrollo).

Usa la conexion de lectura (DATABASE_URL); en produccion usar alembic o
`powerbi_to_postgres_sync.py --ensure-table`, que corren con el rol de escritura.
"""
import asyncio
import sys
from pathlib import Path

from loguru import logger

_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

from etiquetas.core.config import settings
from etiquetas.infrastructure.database.session import close_db, init_db


async def main():
    """Crea la tabla de etiquetas si no existe."""
    logger.info(f"Inicializando tabla {settings.LABELS_TABLE_NAME}...")

    try:
        await init_db()
        logger.success("Base de datos inicializada correctamente")
    except Exception as e:
        logger.error(f"Error al inicializar base de datos: {e}")
        raise
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
