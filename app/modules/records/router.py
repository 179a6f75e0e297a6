# app/modules/records/router.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.shared.exceptions import NotFoundError
from .service import TransferRecordManager
from .schemas import RecordResponse, LinkOrphansResponse

router = APIRouter()

@router.post("/transfer/ensure", response_model=RecordResponse)
async def ensure_transfer_record(db: Session = Depends(get_db)):
    """
    Garantizar el registro de transferencias

    - Lo crea marcado como principal (no eliminable) si aún no existe
    - Llamadas repetidas devuelven siempre el mismo registro
    """
    manager = TransferRecordManager(db)
    return manager.ensure_exists()

@router.get("/transfer", response_model=RecordResponse)
async def get_transfer_record(db: Session = Depends(get_db)):
    """Obtener el registro de transferencias (404 si nunca fue creado)"""
    manager = TransferRecordManager(db)
    try:
        return manager.get_record()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.post("/transfer/link-orphans", response_model=LinkOrphansResponse)
async def link_orphan_transfer_invoices(db: Session = Depends(get_db)):
    """
    Barrido de mantenimiento

    Vincula al registro de transferencias las facturas marcadas como
    transferencia que quedaron sin registro. Seguro de ejecutar en cada carga.
    """
    manager = TransferRecordManager(db)
    record = manager.ensure_exists()
    linked = manager.link_orphans()
    return LinkOrphansResponse(
        success=True,
        message=f"{linked} facturas vinculadas al registro de transferencias",
        record_id=record.id,
        linked_invoices=linked
    )
