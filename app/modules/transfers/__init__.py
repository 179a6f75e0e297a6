"""
Módulo Transfers - Motor de transferencias entre ubicaciones

Mueve stock entre sucursales y bodegas dejando una factura de compra de
valor cero como rastro, archivada en el registro de transferencias.

Arquitectura:
- router.py: Endpoints de transferencias
- service.py: Orquestación (registro → factura → movimientos)
- invoice_builder.py: Validación y creación de la factura y sus items
- movement.py: Movimiento de stock item por item
- repository.py: Acceso a datos de facturas
- schemas.py: Modelos de request/response
"""

from .router import router
from .service import TransfersService
from .repository import TransfersRepository
from .invoice_builder import TransferInvoiceBuilder
from .movement import StockMovementCoordinator

__all__ = [
    "router",
    "TransfersService",
    "TransfersRepository",
    "TransferInvoiceBuilder",
    "StockMovementCoordinator"
]
