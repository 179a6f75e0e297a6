# app/modules/records/repository.py
from sqlalchemy.orm import Session
from sqlalchemy import and_, update
from typing import Optional
import logging

from app.shared.database.models import Record, PurchaseInvoice

logger = logging.getLogger(__name__)

class RecordsRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_name(self, name: str) -> Optional[Record]:
        return self.db.query(Record).filter(Record.name == name).first()

    def create(self, name: str, is_primary: bool = False) -> Record:
        """Insertar y confirmar un registro; IntegrityError si el nombre ya existe"""
        record = Record(
            name=name,
            is_active=True,
            is_primary=is_primary
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def link_orphan_invoices(self, record_id: int, marker: str) -> int:
        """Asignar el registro a las facturas marcadas que no tienen registro"""
        result = self.db.execute(
            update(PurchaseInvoice)
            .where(
                and_(
                    PurchaseInvoice.notes.ilike(f"%{marker}%"),
                    PurchaseInvoice.record_id.is_(None)
                )
            )
            .values(record_id=record_id)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount or 0
