"""
Endpoints de consulta de etiquetas de producción.
"""
from fastapi import APIRouter, Depends, status

from etiquetas.api.v1.dependencies.use_case_deps import get_label_use_cases
from etiquetas.application.dto.label_dto import LabelQrResponseDTO, LabelResponseDTO
from etiquetas.application.use_cases.label_use_cases import LabelUseCases


router = APIRouter(prefix="/labels", tags=["Labels"])


@router.get(
    "/{order_id}",
    response_model=list[LabelResponseDTO],
    status_code=status.HTTP_200_OK,
    summary="Buscar etiquetas por número de OP"
)
async def get_labels(
    order_id: int,
    use_cases: LabelUseCases = Depends(get_label_use_cases)
) -> list[LabelResponseDTO]:
    """
    Retorna una etiqueta por cada fila de la OP (filial/lote).

    Una OP inexistente retorna una lista vacía, no 404.
    """
    return await use_cases.find_by_order_id(order_id)


@router.get(
    "/{order_id}/qr",
    response_model=LabelQrResponseDTO,
    status_code=status.HTTP_200_OK,
    summary="QR con el enlace de detalle de la OP"
)
async def get_label_qr(
    order_id: int,
    use_cases: LabelUseCases = Depends(get_label_use_cases)
) -> LabelQrResponseDTO:
    return await use_cases.get_qr(order_id)
