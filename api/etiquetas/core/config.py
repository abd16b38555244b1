"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y configuraciones globales.

Separacion de credenciales de almacenamiento:
- DATABASE_URL: conexion de lectura (consultas de etiquetas), rol de solo lectura.
- SYNC_DATABASE_URL: conexion de escritura (UPSERT del sync), rol con privilegios.
"""
import json
from typing import List, Literal
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.

    - ENVIRONMENT: 'development' o 'production'
    - DATABASE_URL se puede especificar completa o por componentes
    - SYNC_DATABASE_URL no tiene default: sin ella el sync no arranca
    """

    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="Gerador de Etiquetas de Producao")
    APP_VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="production")

    # Configuracion del servidor
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # Base de datos (lectura) - Componentes separados
    DATABASE_HOST: str = Field(default="localhost")
    DATABASE_PORT: int = Field(default=5432)
    DATABASE_USER: str = Field(default="etiquetas_reader")
    DATABASE_PASSWORD: str = Field(default="etiquetas_pass")
    DATABASE_NAME: str = Field(default="etiquetas_db")

    # Base de datos (lectura) - URL completa (override de componentes si se proporciona)
    DATABASE_URL: str = Field(default="")
    DB_POOL_SIZE: int = Field(default=5)
    DB_MAX_OVERFLOW: int = Field(default=10)

    # Base de datos (escritura) - usada solo por el pipeline de sync (psycopg)
    SYNC_DATABASE_URL: str = Field(default="")

    # Tabla de referencia con las ordenes de produccion
    LABELS_TABLE_NAME: str = Field(default="etiquetas_producao")

    # URL publica donde se sirve la vista de detalle (contenido del QR)
    PUBLIC_BASE_URL: str = Field(default="http://localhost:5173")

    # Azure AD / Power BI
    AZURE_AUTHORITY_URL: str = Field(default="https://login.microsoftonline.com")
    POWERBI_API_URL: str = Field(default="https://api.powerbi.com/v1.0/myorg")
    POWERBI_SCOPE: str = Field(default="https://analysis.windows.net/powerbi/api/.default")
    HTTP_TIMEOUT_S: int = Field(default=60)

    # Valores por defecto para el job CLI (la API los recibe en el body)
    POWERBI_TENANT_ID: str = Field(default="")
    POWERBI_CLIENT_ID: str = Field(default="")
    POWERBI_CLIENT_SECRET: str = Field(default="")
    POWERBI_GROUP_ID: str = Field(default="")
    POWERBI_DATASET_ID: str = Field(default="")
    POWERBI_TABLE_NAME: str = Field(default="")

    # Sync
    SYNC_BATCH_SIZE: int = Field(default=50)
    # 'abort' detiene el sync en el primer lote fallido; 'continue' lo registra y sigue
    SYNC_BATCH_ERROR_POLICY: Literal["abort", "continue"] = Field(default="abort")

    # CORS (acepta lista JSON o "*" para todos los origenes)
    CORS_ORIGINS: str = Field(default="*")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/app.log")

    @computed_field
    @property
    def effective_database_url(self) -> str:
        """
        Retorna la URL de base de datos efectiva.
        Si DATABASE_URL esta definida, la usa directamente.
        Si no, construye la URL desde los componentes individuales.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}"
            f"@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}"
        )

    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"

    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


def get_cors_origins(cors_string: str) -> List[str]:
    """
    Parsea la configuracion de CORS.
    Acepta "*" para todos los origenes o una lista JSON.
    """
    if cors_string == "*":
        return ["*"]
    try:
        return json.loads(cors_string)
    except json.JSONDecodeError:
        # Si no es JSON valido, retornar como lista simple
        return [origin.strip() for origin in cors_string.split(",")]


# Instancia global de configuracion
settings = Settings()
