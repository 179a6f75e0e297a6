# app/modules/transfers/schemas.py
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from app.shared.schemas.common import BaseResponse, LocationInfo
from app.shared.schemas.locations import Location

class TransferItem(BaseModel):
    """
    Item del carrito a transferir.

    Las reglas de negocio (cantidad positiva, carrito no vacío) las valida
    TransferInvoiceBuilder, para que se apliquen igual desde HTTP o desde código.
    """
    product_id: int = Field(..., description="ID del producto")
    quantity: int = Field(..., description="Cantidad a transferir (entero positivo)")
    product_name: Optional[str] = Field(None, max_length=255, description="Nombre legible del producto")

class TransferInvoiceCreate(BaseModel):
    items: List[TransferItem] = Field(..., description="Items en orden de carrito")
    source: Location = Field(..., description="Ubicación origen")
    destination: Location = Field(..., description="Ubicación destino")
    record_id: Optional[int] = Field(
        None,
        description="Ignorado: las transferencias siempre se archivan en el registro de transferencias"
    )
    actor_id: Optional[int] = Field(None, description="Usuario que ejecuta la transferencia")

    class Config:
        json_schema_extra = {
            "example": {
                "items": [{"product_id": 10, "quantity": 4}],
                "source": {"kind": "branch", "id": 1, "name": "Centro"},
                "destination": {"kind": "warehouse", "id": 5, "name": "Bodega Norte"}
            }
        }

class TransferResumeRequest(BaseModel):
    actor_id: Optional[int] = None

class ItemResult(BaseModel):
    product_id: int
    position: int
    quantity: int
    applied: bool
    stage: Optional[str] = None
    message: Optional[str] = None
    line_item_id: Optional[int] = None
    movement_type: Optional[str] = None

class TransferInvoiceResponse(BaseResponse):
    invoice_id: int
    invoice_number: str
    ledger_id: int
    status: str
    per_item_results: List[ItemResult]
    summary_message: str

class LineItemInfo(BaseModel):
    id: int
    product_id: int
    quantity: int
    position: int
    movement_type: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True

class TransferInvoiceDetail(BaseModel):
    invoice_id: int
    invoice_number: str
    invoice_date: Optional[datetime] = None
    ledger_id: Optional[int] = None
    source: LocationInfo
    destination: LocationInfo
    notes: Optional[str] = None
    status: Optional[str] = None
    failed_position: Optional[int] = None
    failure_stage: Optional[str] = None
    failure_message: Optional[str] = None
    total_amount: float = 0
    items: List[LineItemInfo]
