"""
Excepción base para todas las excepciones de la aplicación.
"""
from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Error con status HTTP y código estable.

    El manejador global de FastAPI responde con `to_dict()`, así que las
    subclases que necesiten exponer más contexto lo agregan ahí.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            message: Mensaje legible para el operador
            status_code: Código de estado HTTP
            error_code: Código estable para que la UI decida la remediación
            details: Contexto adicional (serializable a JSON)
        """
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }
