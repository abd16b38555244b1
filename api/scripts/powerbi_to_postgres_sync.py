"""
CLI: Power BI -> Postgres (one-way sync de ordenes de produccion).

Uso recomendado:
  - Ejecutar como job (cron/systemd timer).
  - La API tambien expone POST /api/v1/sync/powerbi para dispararlo desde la UI.

Variables de entorno requeridas:
  - POWERBI_TENANT_ID
  - POWERBI_CLIENT_ID
  - POWERBI_CLIENT_SECRET
  - POWERBI_GROUP_ID
  - POWERBI_DATASET_ID
  - POWERBI_TABLE_NAME
  - SYNC_DATABASE_URL (rol con permisos de escritura sobre LABELS_TABLE_NAME)

Ejecución:
  python scripts/powerbi_to_postgres_sync.py
  python scripts/powerbi_to_postgres_sync.py --schema-only
  python scripts/powerbi_to_postgres_sync.py --ensure-table --continue-on-batch-error
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger
from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
# La carpeta "api" contiene el paquete raíz `etiquetas/`.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

# api/.env primero; el .env de la raíz del repo no pisa lo ya definido.
_REPO_ROOT = _API_ROOT.parent
load_dotenv(_API_ROOT / ".env", override=False)
load_dotenv(_REPO_ROOT / ".env", override=False)

from etiquetas.core.config import Settings
from etiquetas.infrastructure.external.powerbi_sync.pg_repository import read_schema_sql
from etiquetas.infrastructure.external.powerbi_sync.sync_service import build_from_settings
from etiquetas.infrastructure.external.powerbi_sync.types import BatchErrorPolicy, PowerBiSyncConfig
from etiquetas.shared.exceptions.sync import SyncError

_REQUIRED_ENV = (
    "POWERBI_TENANT_ID",
    "POWERBI_CLIENT_ID",
    "POWERBI_CLIENT_SECRET",
    "POWERBI_GROUP_ID",
    "POWERBI_DATASET_ID",
    "POWERBI_TABLE_NAME",
)


def config_from_settings(settings: Settings) -> PowerBiSyncConfig:
    missing = [name for name in _REQUIRED_ENV if not getattr(settings, name)]
    if missing:
        raise SystemExit(f"Faltan variables de entorno obligatorias: {', '.join(missing)}")

    return PowerBiSyncConfig(
        tenant_id=settings.POWERBI_TENANT_ID,
        client_id=settings.POWERBI_CLIENT_ID,
        client_secret=settings.POWERBI_CLIENT_SECRET,
        group_id=settings.POWERBI_GROUP_ID,
        dataset_id=settings.POWERBI_DATASET_ID,
        table_name=settings.POWERBI_TABLE_NAME,
        scope=settings.POWERBI_SCOPE,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sincroniza ordenes de produccion desde Power BI a Postgres.")
    parser.add_argument(
        "--schema-only",
        action="store_true",
        help="Solo imprime el DDL recomendado (no ejecuta sync).",
    )
    parser.add_argument(
        "--ensure-table",
        action="store_true",
        help="Crea la tabla destino (y su UNIQUE compuesto) si no existe antes de sincronizar.",
    )
    parser.add_argument(
        "--continue-on-batch-error",
        action="store_true",
        help="Registra los lotes fallidos y sigue con los siguientes en vez de abortar.",
    )
    args = parser.parse_args(argv)

    settings = Settings()

    if args.schema_only:
        print(read_schema_sql(settings.LABELS_TABLE_NAME))
        return 0

    config = config_from_settings(settings)
    policy = BatchErrorPolicy.CONTINUE if args.continue_on_batch_error else None
    pipeline = build_from_settings(settings, on_batch_error=policy)

    if args.ensure_table and settings.SYNC_DATABASE_URL:
        repo = pipeline.storage
        with repo.connect() as conn:
            repo.ensure_table(conn)
            conn.commit()
        logger.info(f"Tabla {repo.table_name} verificada")

    logger.info("Iniciando Power BI -> Postgres sync...")
    try:
        result = pipeline.run(config)
    except SyncError as e:
        logger.error(f"Sync fallido en etapa '{e.stage}' [{e.error_code}]: {e.message}")
        return 1

    if result.failed_batches:
        logger.warning(f"Sync con lotes fallidos: {result.failed_batches}")
        return 2

    logger.info(f"Sync OK: records_written={result.records_written}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
