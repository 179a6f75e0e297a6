from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from app.shared.schemas.common import BaseResponse, LocationInfo

class InventoryRecordResponse(BaseModel):
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    min_stock: int = 0
    last_updated: Optional[datetime] = None

class LocationInventoryResponse(BaseResponse):
    location: LocationInfo
    records: List[InventoryRecordResponse]
    total_products: int
    total_units: int

class InventoryUpdate(BaseModel):
    """Llegada de stock o corrección de conteo: fija la cantidad absoluta"""
    quantity: int = Field(..., ge=0, description="Cantidad en existencia")

    class Config:
        json_schema_extra = {
            "example": {"quantity": 25}
        }
