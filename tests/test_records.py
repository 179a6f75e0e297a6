"""
Registro de transferencias: creación perezosa y vinculación de huérfanas
"""

import pytest
from datetime import datetime
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.shared.database.models import Record, PurchaseInvoice
from app.shared.exceptions import NotFoundError
from app.modules.records.service import TransferRecordManager


def _invoice(db: Session, number: str, notes: str, record_id=None) -> PurchaseInvoice:
    invoice = PurchaseInvoice(
        invoice_number=number,
        invoice_date=datetime.now(),
        notes=notes,
        record_id=record_id
    )
    db.add(invoice)
    db.commit()
    return invoice


class TestTransferRecordManager:
    """Garantía del registro único"""

    def test_ensure_exists_is_idempotent(self, db_session: Session):
        manager = TransferRecordManager(db_session)

        first = manager.ensure_exists()
        second = manager.ensure_exists()

        assert first.id == second.id
        assert first.is_primary is True
        assert db_session.query(Record).count() == 1

    def test_get_id_before_creation_raises(self, db_session: Session):
        manager = TransferRecordManager(db_session)

        with pytest.raises(NotFoundError):
            manager.get_id()

    def test_get_id_after_creation(self, db_session: Session):
        manager = TransferRecordManager(db_session)
        record = manager.ensure_exists()

        assert manager.get_id() == record.id

    def test_concurrent_creation_rereads_winner(self, db_session: Session, monkeypatch):
        winner = TransferRecordManager(db_session).ensure_exists()
        winner_id = winner.id

        manager = TransferRecordManager(db_session)
        real_get_by_name = manager.repository.get_by_name
        calls = []

        def stale_lookup(name):
            # La primera lectura no ve el registro creado por el otro llamador
            calls.append(name)
            if len(calls) == 1:
                return None
            return real_get_by_name(name)

        monkeypatch.setattr(manager.repository, "get_by_name", stale_lookup)

        record = manager.ensure_exists()

        assert record.id == winner_id
        assert len(calls) == 2
        assert db_session.query(Record).count() == 1

    def test_custom_record_name(self, db_session: Session):
        record = TransferRecordManager(db_session, record_name="Libro Alterno").ensure_exists()

        assert record.name == "Libro Alterno"


class TestLinkOrphans:
    """Barrido de facturas de transferencia sin registro"""

    def test_links_only_marked_orphans(self, db_session: Session):
        manager = TransferRecordManager(db_session)
        record = manager.ensure_exists()
        other = Record(name="Compras", is_active=True)
        db_session.add(other)
        db_session.commit()

        orphan = _invoice(db_session, "TR-1", f"{settings.transfer_marker} Transferencia de A → B")
        lowercase = _invoice(db_session, "TR-2", f"{settings.transfer_marker.lower()} Transferencia de B → A")
        purchase = _invoice(db_session, "FC-1", "Compra a proveedor")
        filed = _invoice(db_session, "TR-3", f"{settings.transfer_marker} Transferencia", record_id=other.id)

        linked = manager.link_orphans()

        assert linked == 2
        db_session.expire_all()
        assert db_session.get(PurchaseInvoice, orphan.id).record_id == record.id
        assert db_session.get(PurchaseInvoice, lowercase.id).record_id == record.id
        assert db_session.get(PurchaseInvoice, purchase.id).record_id is None
        assert db_session.get(PurchaseInvoice, filed.id).record_id == other.id

    def test_second_sweep_links_nothing(self, db_session: Session):
        manager = TransferRecordManager(db_session)
        manager.ensure_exists()
        _invoice(db_session, "TR-1", f"{settings.transfer_marker} Transferencia de A → B")

        assert manager.link_orphans() == 1
        assert manager.link_orphans() == 0

    def test_requires_record(self, db_session: Session):
        with pytest.raises(NotFoundError):
            TransferRecordManager(db_session).link_orphans()
