"""
Excepciones relacionadas con la lógica de dominio.
"""
from typing import Any

from etiquetas.shared.exceptions.base import AppException


class DomainException(AppException):
    """Excepción base para errores de dominio."""

    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details
        )


class EntityNotFoundException(DomainException):
    """Excepción cuando no se encuentra una entidad."""

    def __init__(self, entity_name: str, entity_id: Any):
        super().__init__(
            message=f"{entity_name} con ID {entity_id} no encontrado",
            error_code="ENTITY_NOT_FOUND",
            details={"entity": entity_name, "id": str(entity_id)}
        )
        self.status_code = 404


class ValidationException(DomainException):
    """Excepción para errores de validación."""

    def __init__(self, message: str, field: str = None, error_code: str = "VALIDATION_ERROR", details=None):
        if details is None and field:
            details = {"field": field}
        super().__init__(
            message=message,
            error_code=error_code,
            details=details
        )


class MalformedInputError(ValidationException):
    """Excepción cuando el payload que dispara el sync no trae los campos obligatorios."""

    def __init__(self, missing_fields: list[str]):
        super().__init__(
            message=f"Faltan campos obligatorios en la configuracion: {', '.join(missing_fields)}",
            error_code="MALFORMED_INPUT",
            details={"missing_fields": missing_fields}
        )
        self.missing_fields = missing_fields


class StorageReadError(AppException):
    """Error de conectividad/autorizacion al leer etiquetas (no aplica a 'no encontrado')."""

    def __init__(self, message: str, table_name: str):
        super().__init__(
            message=message,
            status_code=503,
            error_code="STORAGE_READ_ERROR",
            details={"table": table_name}
        )
