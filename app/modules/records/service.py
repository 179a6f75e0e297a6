# app/modules/records/service.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from app.config.settings import settings
from app.shared.database.models import Record
from app.shared.exceptions import NotFoundError
from .repository import RecordsRepository

logger = logging.getLogger(__name__)

class TransferRecordManager:
    """
    Garantiza que exista exactamente un registro de transferencias.

    El registro se busca por su nombre fijo (configurable). Si dos llamadas
    concurrentes lo crean a la vez, la restricción UNIQUE rechaza la segunda
    inserción y esta relee el registro ganador.
    """

    def __init__(self, db: Session, record_name: str = None):
        self.db = db
        self.repository = RecordsRepository(db)
        self.record_name = record_name or settings.transfer_record_name

    def ensure_exists(self) -> Record:
        record = self.repository.get_by_name(self.record_name)
        if record:
            return record

        logger.info(f"📒 Creando registro de transferencias '{self.record_name}'")
        try:
            return self.repository.create(self.record_name, is_primary=True)
        except IntegrityError:
            self.db.rollback()
            logger.warning("⚠️ Registro de transferencias creado por otra operación, releyendo")
            record = self.repository.get_by_name(self.record_name)
            if record is None:
                raise
            return record

    def get_record(self) -> Record:
        record = self.repository.get_by_name(self.record_name)
        if record is None:
            logger.error("❌ Registro de transferencias no encontrado")
            raise NotFoundError(
                f"El registro '{self.record_name}' no existe; llame a ensure_exists() primero"
            )
        return record

    def get_id(self) -> int:
        return self.get_record().id

    def link_orphans(self) -> int:
        """Vincular al registro las facturas de transferencia sin registro. Idempotente."""
        record_id = self.get_id()
        linked = self.repository.link_orphan_invoices(record_id, settings.transfer_marker)
        if linked:
            logger.info(f"🔗 {linked} facturas de transferencia vinculadas al registro {record_id}")
        return linked
