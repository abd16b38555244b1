"""
Casos de uso de consulta de etiquetas de producción.
"""
from loguru import logger

from etiquetas.application.dto.label_dto import LabelQrResponseDTO, LabelResponseDTO
from etiquetas.application.services.label_links import build_details_url, build_qr_data_uri
from etiquetas.infrastructure.repositories.label_repository import LabelRepository
from etiquetas.shared.exceptions.domain import EntityNotFoundException


class LabelUseCases:
    """
    Búsqueda de una OP para imprimir sus etiquetas.

    `public_base_url` es la base de la vista de detalle que se codifica en el QR.
    """

    def __init__(self, repository: LabelRepository, public_base_url: str):
        self.repository = repository
        self.public_base_url = public_base_url

    async def find_by_order_id(self, order_id: int) -> list[LabelResponseDTO]:
        """
        Retorna una etiqueta por cada fila de la OP; lista vacía si no existe.
        """
        records = await self.repository.find_by_order_id(order_id)
        if not records:
            logger.info(f"OP {order_id} no encontrada")
            return []

        details_url = build_details_url(self.public_base_url, order_id)
        logger.info(f"OP {order_id}: {len(records)} etiqueta(s)")
        return [LabelResponseDTO.from_record(r, details_url) for r in records]

    async def get_qr(self, order_id: int) -> LabelQrResponseDTO:
        records = await self.repository.find_by_order_id(order_id)
        if not records:
            raise EntityNotFoundException("Orden de produccion", order_id)

        details_url = build_details_url(self.public_base_url, order_id)
        return LabelQrResponseDTO(
            order_id=order_id,
            details_url=details_url,
            qr_code=build_qr_data_uri(details_url),
        )
