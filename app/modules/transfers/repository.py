# app/modules/transfers/repository.py
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import List, Dict, Any, Optional, Set
import logging

from app.shared.database.models import (
    PurchaseInvoice, PurchaseInvoiceItem, Product, Branch, Warehouse
)

logger = logging.getLogger(__name__)

# Estados de procesamiento de una factura de transferencia
STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_ABORTED = "aborted"

class TransfersRepository:
    def __init__(self, db: Session):
        self.db = db

    # ==================== CONSULTAS DE APOYO ====================

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_branch(self, branch_id: int) -> Optional[Branch]:
        return self.db.query(Branch).filter(Branch.id == branch_id).first()

    def get_warehouse(self, warehouse_id: int) -> Optional[Warehouse]:
        return self.db.query(Warehouse).filter(Warehouse.id == warehouse_id).first()

    # ==================== FACTURAS ====================

    def create_invoice_header(self, invoice_data: Dict[str, Any]) -> PurchaseInvoice:
        """Crear y confirmar la cabecera de la factura (montos en cero)"""
        invoice = PurchaseInvoice(
            invoice_number=invoice_data['invoice_number'],
            invoice_date=invoice_data['invoice_date'],
            supplier_id=None,
            source_kind=invoice_data['source_kind'],
            source_id=invoice_data['source_id'],
            destination_kind=invoice_data['destination_kind'],
            destination_id=invoice_data['destination_id'],
            record_id=invoice_data['record_id'],
            total_amount=0,
            discount_amount=0,
            tax_amount=0,
            net_amount=0,
            notes=invoice_data['notes'],
            invoice_type='Purchase Invoice',
            is_active=True,
            created_by=invoice_data.get('created_by'),
            transfer_status=STATUS_PROCESSING,
            requested_items=invoice_data['requested_items']
        )

        self.db.add(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def add_line_item(
        self,
        invoice_id: int,
        product_id: int,
        quantity: int,
        position: int,
        notes: str,
        movement_type: str
    ) -> PurchaseInvoiceItem:
        """Agregar un item sin confirmar; el commit lo hace quien mueve el stock"""
        if self.get_product(product_id) is None:
            raise ValueError(f"El producto {product_id} no existe")

        line_item = PurchaseInvoiceItem(
            purchase_invoice_id=invoice_id,
            product_id=product_id,
            quantity=quantity,
            unit_purchase_price=0,
            total_price=0,
            notes=notes,
            position=position,
            movement_type=movement_type
        )
        self.db.add(line_item)
        self.db.flush()
        return line_item

    def get_invoice(self, invoice_id: int) -> Optional[PurchaseInvoice]:
        return self.db.query(PurchaseInvoice).filter(PurchaseInvoice.id == invoice_id).first()

    @staticmethod
    def transfer_marker_clause(marker: str):
        """Marca de transferencia en las notas, sin distinguir mayúsculas"""
        return PurchaseInvoice.notes.ilike(f"%{marker}%")

    def get_transfer_invoice(self, invoice_id: int, marker: str) -> Optional[PurchaseInvoice]:
        return self.db.query(PurchaseInvoice).filter(
            PurchaseInvoice.id == invoice_id,
            self.transfer_marker_clause(marker)
        ).first()

    def get_line_items(self, invoice_id: int) -> List[PurchaseInvoiceItem]:
        return self.db.query(PurchaseInvoiceItem).filter(
            PurchaseInvoiceItem.purchase_invoice_id == invoice_id
        ).order_by(PurchaseInvoiceItem.position).all()

    def get_applied_positions(self, invoice_id: int) -> Set[int]:
        rows = self.db.query(PurchaseInvoiceItem.position).filter(
            PurchaseInvoiceItem.purchase_invoice_id == invoice_id
        ).all()
        return {row[0] for row in rows}

    def list_transfer_invoices(self, marker: str, limit: int = 50, offset: int = 0) -> List[PurchaseInvoice]:
        return self.db.query(PurchaseInvoice).filter(
            self.transfer_marker_clause(marker)
        ).order_by(desc(PurchaseInvoice.id)).offset(offset).limit(limit).all()

    # ==================== ESTADO ====================

    def mark_processing(self, invoice: PurchaseInvoice) -> None:
        invoice.transfer_status = STATUS_PROCESSING
        invoice.failed_position = None
        invoice.failure_stage = None
        invoice.failure_message = None
        self.db.commit()

    def mark_completed(self, invoice: PurchaseInvoice) -> None:
        invoice.transfer_status = STATUS_COMPLETED
        invoice.failed_position = None
        invoice.failure_stage = None
        invoice.failure_message = None
        self.db.commit()

    def mark_aborted(self, invoice: PurchaseInvoice, position: int, stage: str, message: str) -> None:
        invoice.transfer_status = STATUS_ABORTED
        invoice.failed_position = position
        invoice.failure_stage = stage
        invoice.failure_message = message
        self.db.commit()
