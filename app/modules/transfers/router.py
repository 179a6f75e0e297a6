# app/modules/transfers/router.py
from fastapi import APIRouter, Depends, HTTPException, Path, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.config.database import get_db
from app.shared.exceptions import NotFoundError, ValidationError, OperationFailure
from app.shared.schemas.common import ErrorResponse
from .service import TransfersService
from .schemas import (
    TransferInvoiceCreate, TransferInvoiceResponse, TransferInvoiceDetail, TransferResumeRequest
)

logger = logging.getLogger(__name__)

router = APIRouter()

def _failure_response(failure: OperationFailure) -> JSONResponse:
    """409 con la etapa y la posición del item que falló"""
    error = ErrorResponse(
        message=str(failure),
        error_code="OPERATION_FAILURE",
        details={
            **failure.to_dict(),
            "per_item_results": [result.model_dump() for result in failure.results]
        }
    )
    return JSONResponse(status_code=409, content=error.model_dump(mode="json"))

@router.post("", response_model=TransferInvoiceResponse)
async def create_transfer(
    transfer_data: TransferInvoiceCreate,
    db: Session = Depends(get_db)
):
    """
    Crear una factura de transferencia y mover el stock

    **Proceso:**
    - Valida el carrito (no vacío, cantidades positivas, origen ≠ destino)
    - Garantiza el registro de transferencias y archiva ahí la factura
    - Procesa cada item en orden: crea el item y mueve el stock
    - Sucursal → sucursal usa la transferencia atómica; con bodega solo
      se ajusta el lado de la sucursal

    **Errores:**
    - 422: entrada inválida, nada se escribió
    - 409: un item falló; los anteriores quedan aplicados y la factura
      queda abortada en esa posición (se puede reanudar)
    """
    service = TransfersService(db)
    try:
        return await service.create_transfer(transfer_data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except OperationFailure as failure:
        return _failure_response(failure)

@router.post("/{invoice_id}/resume", response_model=TransferInvoiceResponse)
async def resume_transfer(
    invoice_id: int = Path(..., gt=0, description="ID de la factura de transferencia"),
    resume_data: Optional[TransferResumeRequest] = None,
    db: Session = Depends(get_db)
):
    """
    Reanudar una transferencia abortada

    Salta las posiciones que ya tienen item de factura y continúa con el
    resto del carrito original.
    """
    service = TransfersService(db)
    try:
        return await service.resume_transfer(
            invoice_id, resume_data.actor_id if resume_data else None
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except OperationFailure as failure:
        return _failure_response(failure)

@router.get("/{invoice_id}", response_model=TransferInvoiceDetail)
async def get_transfer(
    invoice_id: int = Path(..., gt=0),
    db: Session = Depends(get_db)
):
    """Detalle de una factura de transferencia con sus items y estado"""
    service = TransfersService(db)
    try:
        return await service.get_transfer(invoice_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.get("", response_model=List[TransferInvoiceDetail])
async def list_transfers(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Facturas de transferencia, más recientes primero"""
    service = TransfersService(db)
    return await service.list_transfers(limit, offset)
