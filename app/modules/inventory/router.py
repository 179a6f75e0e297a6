from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.shared.exceptions import NotFoundError
from .service import LocationInventoryService
from .schemas import InventoryRecordResponse, LocationInventoryResponse, InventoryUpdate

router = APIRouter()

@router.get("/{kind}/{location_id}", response_model=LocationInventoryResponse)
async def get_location_inventory(
    kind: str = Path(..., description="branch | warehouse"),
    location_id: int = Path(..., gt=0),
    db: Session = Depends(get_db)
):
    """Registros de inventario de una sucursal o bodega, por producto"""
    service = LocationInventoryService(db)
    try:
        return await service.get_location_inventory(kind, location_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.get("/{kind}/{location_id}/products/{product_id}", response_model=InventoryRecordResponse)
async def get_product_stock(
    kind: str = Path(..., description="branch | warehouse"),
    location_id: int = Path(..., gt=0),
    product_id: int = Path(..., gt=0),
    db: Session = Depends(get_db)
):
    """Existencia de un producto en una ubicación"""
    service = LocationInventoryService(db)
    try:
        return await service.get_product_stock(kind, location_id, product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

@router.put("/{kind}/{location_id}/products/{product_id}", response_model=InventoryRecordResponse)
async def set_product_stock(
    update: InventoryUpdate,
    kind: str = Path(..., description="branch | warehouse"),
    location_id: int = Path(..., gt=0),
    product_id: int = Path(..., gt=0),
    db: Session = Depends(get_db)
):
    """
    Ajuste manual de existencia

    - Llegada de stock o corrección de conteo físico
    - Crea el registro si no existe; la cantidad no puede ser negativa
    """
    service = LocationInventoryService(db)
    try:
        return await service.set_product_stock(kind, location_id, product_id, update.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
