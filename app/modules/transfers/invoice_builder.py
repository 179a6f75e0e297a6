# app/modules/transfers/invoice_builder.py
from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional, Tuple
import logging
import time
import uuid

from app.config.settings import settings
from app.shared.database.models import PurchaseInvoice, PurchaseInvoiceItem
from app.shared.exceptions import ValidationError
from app.shared.schemas.locations import (
    BranchLocation, WarehouseLocation, same_location, display_name
)
from app.modules.records.service import TransferRecordManager
from .repository import TransfersRepository
from .schemas import TransferItem

logger = logging.getLogger(__name__)

class TransferInvoiceBuilder:
    """
    Crea la factura de transferencia (valor cero) y sus items.

    Las transferencias se archivan siempre en el registro de transferencias,
    sin importar qué registro pida el llamador.
    """

    def __init__(self, db: Session, record_manager: Optional[TransferRecordManager] = None):
        self.db = db
        self.repository = TransfersRepository(db)
        self.record_manager = record_manager or TransferRecordManager(db)

    # ==================== VALIDACIÓN ====================

    @staticmethod
    def validate(items: List[TransferItem], source, destination) -> None:
        """Rechazar la entrada antes de cualquier escritura"""
        if not items:
            raise ValidationError("No se puede crear una factura de transferencia sin productos")

        for position, item in enumerate(items):
            if item.product_id <= 0:
                raise ValidationError(f"Item #{position + 1}: ID de producto inválido")
            if item.quantity <= 0:
                raise ValidationError(
                    f"Item #{position + 1}: la cantidad debe ser un entero positivo "
                    f"(recibido: {item.quantity})"
                )

        if same_location(source, destination):
            raise ValidationError("El origen y el destino de la transferencia no pueden ser la misma ubicación")

    def resolve_location(self, location):
        """Completar el nombre legible desde la base; ValidationError si no existe"""
        if isinstance(location, BranchLocation):
            row = self.repository.get_branch(location.id)
            label = "Sucursal"
        elif isinstance(location, WarehouseLocation):
            row = self.repository.get_warehouse(location.id)
            label = "Bodega"
        else:
            raise TypeError(f"Ubicación no soportada: {location!r}")

        if row is None:
            raise ValidationError(f"{label} {location.id} no encontrada")

        if location.name:
            return location
        return location.model_copy(update={"name": row.name})

    # ==================== FORMATO ====================

    @staticmethod
    def generate_invoice_number() -> str:
        """Número basado en milisegundos, con sufijo aleatorio contra colisiones"""
        millis = int(time.time() * 1000)
        return f"{settings.transfer_invoice_prefix}-{millis}-{uuid.uuid4().hex[:4].upper()}"

    @staticmethod
    def build_notes(source, destination) -> str:
        return (
            f"{settings.transfer_marker} Transferencia de "
            f"{display_name(source)} → {display_name(destination)}"
        )

    # ==================== CREACIÓN ====================

    def prepare(self, items: List[TransferItem], source, destination) -> Tuple:
        """Validar y devolver (origen, destino) con sus nombres resueltos, sin escribir nada"""
        self.validate(items, source, destination)
        return self.resolve_location(source), self.resolve_location(destination)

    def create(
        self,
        items: List[TransferItem],
        source,
        destination,
        requested_record_id: Optional[int] = None,
        actor_id: Optional[int] = None
    ) -> PurchaseInvoice:
        """Validar, garantizar el registro y escribir la cabecera. Devuelve la factura."""
        source, destination = self.prepare(items, source, destination)
        return self.create_header(items, source, destination, requested_record_id, actor_id)

    def create_header(
        self,
        items: List[TransferItem],
        source,
        destination,
        requested_record_id: Optional[int] = None,
        actor_id: Optional[int] = None
    ) -> PurchaseInvoice:
        """Cabecera para ubicaciones ya preparadas (ver prepare)"""
        record = self.record_manager.ensure_exists()
        if requested_record_id is not None and requested_record_id != record.id:
            logger.info(
                f"ℹ️ Registro solicitado {requested_record_id} ignorado; "
                f"se usa el registro de transferencias {record.id}"
            )

        invoice = self.repository.create_invoice_header({
            'invoice_number': self.generate_invoice_number(),
            'invoice_date': datetime.now(),
            'source_kind': source.kind,
            'source_id': source.id,
            'destination_kind': destination.kind,
            'destination_id': destination.id,
            'record_id': record.id,
            'notes': self.build_notes(source, destination),
            'created_by': actor_id,
            'requested_items': [
                {'product_id': item.product_id, 'quantity': item.quantity, 'product_name': item.product_name}
                for item in items
            ]
        })

        logger.info(f"🧾 Factura de transferencia {invoice.invoice_number} creada (ID: {invoice.id})")
        return invoice

    def add_line_item(
        self,
        invoice: PurchaseInvoice,
        item: TransferItem,
        position: int,
        movement_type: str
    ) -> PurchaseInvoiceItem:
        return self.repository.add_line_item(
            invoice_id=invoice.id,
            product_id=item.product_id,
            quantity=item.quantity,
            position=position,
            notes=invoice.notes,
            movement_type=movement_type
        )
