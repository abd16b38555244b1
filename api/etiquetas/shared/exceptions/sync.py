"""
Excepciones del pipeline de sincronización Power BI -> Postgres.

Cada error lleva un `error_code` estable para que la UI pueda ofrecer
remediación dirigida (p.ej. crear el UNIQUE constraint que falta) sin
parsear el mensaje.
"""
from typing import Any, Optional

from etiquetas.shared.exceptions.base import AppException


class SyncError(AppException):
    """
    Excepción base del sync.

    El pipeline completa `stage` y `log_lines` antes de relanzar, para que el
    caller vea hasta dónde llegó la corrida.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        error_code: str = "SYNC_ERROR",
        details: Optional[dict[str, Any]] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details
        )
        self.stage = stage
        self.log_lines: list[str] = []

    def to_dict(self) -> dict[str, Any]:
        content = super().to_dict()
        content["stage"] = self.stage
        content["logLines"] = self.log_lines
        return content


class AuthenticationError(SyncError):
    """El endpoint de tokens de Azure AD rechazó las credenciales o no respondió."""

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="AUTHENTICATION_FAILED",
            details={"status": status, "body": body},
        )
        self.status = status
        self.body = body


class QueryError(SyncError):
    """La API de Power BI respondió con un status no-2xx (o no respondió)."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
        error_code: str = "QUERY_FAILED",
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            details={"status": status, "body": body},
        )
        self.status = status
        self.body = body


class RemoteQueryError(SyncError):
    """Respuesta 2xx de Power BI que trae un payload `error` embebido."""

    def __init__(self, message: str, error_payload: Any):
        super().__init__(
            message=message,
            error_code="REMOTE_QUERY_ERROR",
            details={"error": error_payload},
        )
        self.error_payload = error_payload


class StorageConfigError(SyncError):
    """Faltan credenciales/URL de almacenamiento para escribir."""

    def __init__(self, missing: list[str]):
        super().__init__(
            message=f"Configuracion de almacenamiento incompleta: falta {', '.join(missing)}",
            status_code=500,
            error_code="STORAGE_CONFIG_ERROR",
            details={"missing": missing},
        )
        self.missing = missing


class StorageWriteError(SyncError):
    """Falló el UPSERT de un lote."""

    def __init__(
        self,
        message: str,
        batch_index: Optional[int] = None,
        error_code: str = "STORAGE_WRITE_ERROR",
        sqlstate: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            status_code=500,
            error_code=error_code,
            details={"batch_index": batch_index, "sqlstate": sqlstate},
        )
        self.batch_index = batch_index
        self.sqlstate = sqlstate


class MissingConflictConstraintError(StorageWriteError):
    """
    La tabla destino no tiene el UNIQUE constraint que exige el ON CONFLICT.

    La remediación es estructural (crear el constraint), no transitoria.
    """

    def __init__(self, message: str, batch_index: Optional[int] = None, sqlstate: Optional[str] = None):
        super().__init__(
            message=message,
            batch_index=batch_index,
            error_code="MISSING_CONFLICT_CONSTRAINT",
            sqlstate=sqlstate,
        )
