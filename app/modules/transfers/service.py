# app/modules/transfers/service.py
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.config.settings import settings
from app.shared.database.models import PurchaseInvoice
from app.shared.exceptions import NotFoundError, ValidationError, OperationFailure
from app.shared.schemas.common import LocationInfo
from app.shared.schemas.locations import make_location, display_name, LocationKind
from app.modules.records.service import TransferRecordManager
from .repository import TransfersRepository, STATUS_COMPLETED
from .invoice_builder import TransferInvoiceBuilder
from .movement import StockMovementCoordinator
from .schemas import (
    TransferInvoiceCreate, TransferInvoiceResponse, TransferInvoiceDetail,
    TransferItem, ItemResult, LineItemInfo
)

logger = logging.getLogger(__name__)

class TransfersService:
    """
    Orquesta una transferencia completa:
    registro de transferencias → factura → movimiento item por item.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = TransfersRepository(db)
        self.record_manager = TransferRecordManager(db)
        self.builder = TransferInvoiceBuilder(db, self.record_manager)
        self.coordinator = StockMovementCoordinator(db, self.builder)

    def _actor(self, actor_id: Optional[int]) -> Optional[int]:
        return actor_id if actor_id is not None else settings.system_user_id

    async def create_transfer(self, transfer_data: TransferInvoiceCreate) -> TransferInvoiceResponse:
        """
        Crear la factura de transferencia y mover el stock de cada item.

        Raises:
            ValidationError: entrada rechazada, sin ninguna escritura
            OperationFailure: un item falló; los anteriores quedan aplicados
        """
        actor_id = self._actor(transfer_data.actor_id)
        logger.info(
            f"🚚 Transferencia solicitada: {len(transfer_data.items)} items, "
            f"{transfer_data.source.kind} {transfer_data.source.id} → "
            f"{transfer_data.destination.kind} {transfer_data.destination.id}"
        )

        source, destination = self.builder.prepare(
            transfer_data.items, transfer_data.source, transfer_data.destination
        )
        invoice = self.builder.create_header(
            transfer_data.items,
            source,
            destination,
            requested_record_id=transfer_data.record_id,
            actor_id=actor_id
        )

        results = self.coordinator.run(invoice, transfer_data.items, source, destination, actor_id)

        summary = (
            f"Factura de transferencia {invoice.invoice_number} creada; "
            f"{len(results)} productos transferidos de {display_name(source)} a {display_name(destination)}"
        )
        logger.info(f"✅ {summary}")

        return TransferInvoiceResponse(
            success=True,
            message="Transferencia completada",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            ledger_id=invoice.record_id,
            status=invoice.transfer_status,
            per_item_results=results,
            summary_message=summary
        )

    async def resume_transfer(self, invoice_id: int, actor_id: Optional[int] = None) -> TransferInvoiceResponse:
        """Reanudar una transferencia abortada desde el primer item sin aplicar"""
        invoice = self.repository.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(f"Factura {invoice_id} no encontrada")
        if self.repository.get_transfer_invoice(invoice_id, settings.transfer_marker) is None:
            raise ValidationError(f"La factura {invoice_id} no es una factura de transferencia")
        if invoice.transfer_status == STATUS_COMPLETED:
            raise ValidationError(f"La transferencia {invoice.invoice_number} ya fue completada")
        if not invoice.requested_items or not invoice.source_kind or not invoice.destination_kind:
            raise ValidationError(
                f"La factura {invoice_id} no conserva el carrito ni las ubicaciones de la transferencia"
            )
        actor_id = self._actor(actor_id)
        items = [TransferItem(**raw) for raw in invoice.requested_items]
        try:
            source = make_location(invoice.source_kind, invoice.source_id)
            destination = make_location(invoice.destination_kind, invoice.destination_id)
        except ValueError as e:
            raise ValidationError(f"La factura {invoice_id} tiene ubicaciones inválidas: {e}") from e
        source = self.builder.resolve_location(source)
        destination = self.builder.resolve_location(destination)

        applied = self.repository.get_applied_positions(invoice.id)
        logger.info(
            f"🔁 Reanudando {invoice.invoice_number}: "
            f"{len(applied)}/{len(items)} items ya aplicados"
        )

        # Items de corridas anteriores, presentes en el resultado haya o no fallo
        previous = [
            ItemResult(
                product_id=line.product_id,
                position=line.position,
                quantity=line.quantity,
                applied=True,
                line_item_id=line.id,
                movement_type=line.movement_type
            )
            for line in self.repository.get_line_items(invoice.id)
        ]

        if invoice.record_id is None:
            invoice.record_id = self.record_manager.ensure_exists().id
        self.repository.mark_processing(invoice)
        try:
            new_results = self.coordinator.run(
                invoice, items, source, destination, actor_id, skip_positions=applied
            )
        except OperationFailure as failure:
            failure.results = sorted(previous + failure.results, key=lambda r: r.position)
            raise

        results = sorted(previous + new_results, key=lambda r: r.position)

        summary = (
            f"Factura de transferencia {invoice.invoice_number} reanudada; "
            f"{len(new_results)} productos transferidos de {display_name(source)} a {display_name(destination)}"
        )
        logger.info(f"✅ {summary}")

        return TransferInvoiceResponse(
            success=True,
            message="Transferencia reanudada y completada",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            ledger_id=invoice.record_id,
            status=invoice.transfer_status,
            per_item_results=results,
            summary_message=summary
        )

    # ==================== CONSULTAS ====================

    def _location_info(self, kind: Optional[str], location_id: Optional[int]) -> LocationInfo:
        """Ubicación legible; vacía si la factura no la registró"""
        if kind == LocationKind.BRANCH.value:
            row = self.repository.get_branch(location_id)
        elif kind == LocationKind.WAREHOUSE.value:
            row = self.repository.get_warehouse(location_id)
        else:
            return LocationInfo(location_kind=kind, location_id=location_id)

        return LocationInfo(
            location_kind=kind,
            location_id=location_id,
            location_name=row.name if row else None
        )

    def _build_detail(self, invoice: PurchaseInvoice) -> TransferInvoiceDetail:
        return TransferInvoiceDetail(
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            invoice_date=invoice.invoice_date,
            ledger_id=invoice.record_id,
            source=self._location_info(invoice.source_kind, invoice.source_id),
            destination=self._location_info(invoice.destination_kind, invoice.destination_id),
            notes=invoice.notes,
            status=invoice.transfer_status,
            failed_position=invoice.failed_position,
            failure_stage=invoice.failure_stage,
            failure_message=invoice.failure_message,
            total_amount=float(invoice.total_amount or 0),
            items=[LineItemInfo.model_validate(line) for line in self.repository.get_line_items(invoice.id)]
        )

    async def get_transfer(self, invoice_id: int) -> TransferInvoiceDetail:
        invoice = self.repository.get_transfer_invoice(invoice_id, settings.transfer_marker)
        if invoice is None:
            raise NotFoundError(f"Factura de transferencia {invoice_id} no encontrada")
        return self._build_detail(invoice)

    async def list_transfers(self, limit: int = 50, offset: int = 0) -> List[TransferInvoiceDetail]:
        invoices = self.repository.list_transfer_invoices(settings.transfer_marker, limit, offset)
        return [self._build_detail(invoice) for invoice in invoices]
