"""
DTOs de la consulta de etiquetas.
"""
from datetime import datetime

from pydantic import BaseModel, Field

from etiquetas.infrastructure.external.powerbi_sync.types import ProductionLabelRecord


class LabelResponseDTO(BaseModel):
    """Una fila de la OP (una por filial/lote) con el enlace que va en el QR."""

    order_id: int = Field(..., alias="orderId", description="Número de la OP")
    opened_at: datetime = Field(..., alias="openedAt", description="Fecha de apertura de la OP")
    branch_id: int = Field(..., alias="branchId", description="Filial")
    product_code: str = Field(..., alias="productCode", description="Código alternativo del producto")
    product_description: str = Field(..., alias="productDescription")
    batch_code: str = Field(..., alias="batchCode", description="Lote de fabricación")
    composition: str = Field(..., alias="composition")
    details_url: str = Field(..., alias="detailsUrl", description="Vista de detalle (contenido del QR)")

    class Config:
        """Configuración de Pydantic."""
        populate_by_name = True

    @classmethod
    def from_record(cls, record: ProductionLabelRecord, details_url: str) -> "LabelResponseDTO":
        return cls(
            order_id=record.order_id,
            opened_at=record.opened_at,
            branch_id=record.branch_id,
            product_code=record.product_code,
            product_description=record.product_description,
            batch_code=record.batch_code,
            composition=record.composition,
            details_url=details_url,
        )


class LabelQrResponseDTO(BaseModel):
    order_id: int = Field(..., alias="orderId")
    details_url: str = Field(..., alias="detailsUrl")
    qr_code: str = Field(..., alias="qrCode", description="PNG como data URI")

    class Config:
        populate_by_name = True
