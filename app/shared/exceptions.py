# app/shared/exceptions.py
"""
Excepciones de dominio del motor de transferencias.

Los routers las traducen a HTTPException; los servicios nunca devuelven
errores silenciosos.
"""
from typing import Optional

# Etapas en las que puede fallar el movimiento de un item
STAGE_ITEM_CREATE = "item-create"
STAGE_DECREMENT = "decrement"
STAGE_INCREMENT = "increment"
STAGE_ATOMIC_TRANSFER = "atomic-transfer"

STAGES = (
    STAGE_ITEM_CREATE,
    STAGE_DECREMENT,
    STAGE_INCREMENT,
    STAGE_ATOMIC_TRANSFER,
)


class TransferError(Exception):
    """Base de los errores del motor de transferencias"""
    pass


class ValidationError(TransferError):
    """Entrada rechazada antes de cualquier escritura"""
    pass


class NotFoundError(TransferError):
    """Entidad requerida inexistente (registro, factura)"""
    pass


class OperationFailure(TransferError):
    """Fallo de persistencia durante el procesamiento de un item"""

    def __init__(
        self,
        product_id: int,
        stage: str,
        message: str,
        position: Optional[int] = None,
        invoice_id: Optional[int] = None
    ):
        if stage not in STAGES:
            raise ValueError(f"Etapa desconocida: {stage}")
        self.product_id = product_id
        self.stage = stage
        self.message = message
        self.position = position
        self.invoice_id = invoice_id
        # Resultados por item hasta el fallo, los completa el coordinador
        self.results = []
        super().__init__(f"[{stage}] producto {product_id}: {message}")

    def to_dict(self):
        return {
            "product_id": self.product_id,
            "stage": self.stage,
            "message": self.message,
            "position": self.position,
            "invoice_id": self.invoice_id,
        }
