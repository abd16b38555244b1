"""
Configuracion de Alembic para migraciones de base de datos.

- Usa SYNC_DATABASE_URL (rol de escritura) si esta definida; si no, la URL de lectura
- Importa los modelos para autogenerate
- Las migraciones corren sincronas con psycopg (v3)
"""
import sys
from pathlib import Path
from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

# Agregar el directorio raiz al path para imports
API_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(API_DIR))

from etiquetas.core.config import settings
from etiquetas.infrastructure.database.session import Base
from etiquetas.infrastructure.database.models import ProductionLabelModel  # noqa: F401

config = context.config


def _migration_url() -> str:
    url = settings.SYNC_DATABASE_URL or settings.effective_database_url
    scheme, sep, rest = url.partition("://")
    if scheme.startswith("postgres"):
        return f"postgresql+psycopg{sep}{rest}"
    return url


config.set_main_option("sqlalchemy.url", _migration_url())
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Ejecuta migraciones en modo 'offline'.

    Genera SQL sin conectarse a la base de datos.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Conecta a la base de datos y ejecuta las migraciones directamente."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
