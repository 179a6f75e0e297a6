from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from app.shared.exceptions import NotFoundError
from app.shared.schemas.common import LocationInfo
from app.shared.schemas.locations import make_location, display_name
from app.shared.services.inventory_service import InventoryService
from .repository import InventoryRepository
from .schemas import InventoryRecordResponse, LocationInventoryResponse

logger = logging.getLogger(__name__)

class LocationInventoryService:
    """Consulta y ajuste manual del inventario de una ubicación"""

    def __init__(self, db: Session):
        self.db = db
        self.repository = InventoryRepository(db)

    def _resolve(self, kind: str, location_id: int):
        try:
            location = make_location(kind, location_id)
        except ValueError as e:
            raise NotFoundError(str(e)) from e

        row = self.repository.get_location_row(location)
        if row is None:
            raise NotFoundError(f"{display_name(location)} no encontrada")
        return location.model_copy(update={"name": row.name})

    def _record_response(self, record, product_name=None) -> InventoryRecordResponse:
        return InventoryRecordResponse(
            product_id=record.product_id,
            product_name=product_name,
            quantity=record.quantity,
            min_stock=record.min_stock or 0,
            last_updated=record.last_updated
        )

    async def get_location_inventory(self, kind: str, location_id: int) -> LocationInventoryResponse:
        location = self._resolve(kind, location_id)
        records = InventoryService.list_by_location(self.db, location)
        names = self.repository.get_product_names([r.product_id for r in records])

        return LocationInventoryResponse(
            success=True,
            message=f"Inventario de {display_name(location)}",
            location=LocationInfo(
                location_kind=location.kind,
                location_id=location.id,
                location_name=location.name
            ),
            records=[self._record_response(r, names.get(r.product_id)) for r in records],
            total_products=len(records),
            total_units=sum(r.quantity for r in records)
        )

    async def get_product_stock(self, kind: str, location_id: int, product_id: int) -> InventoryRecordResponse:
        location = self._resolve(kind, location_id)
        record = InventoryService.get(self.db, product_id, location)
        if record is None:
            raise NotFoundError(
                f"Sin inventario del producto {product_id} en {display_name(location)}"
            )
        product = self.repository.get_product(product_id)
        return self._record_response(record, product.name if product else None)

    async def set_product_stock(
        self, kind: str, location_id: int, product_id: int, quantity: int
    ) -> InventoryRecordResponse:
        """Fijar la cantidad (upsert) y confirmar"""
        location = self._resolve(kind, location_id)
        product = self.repository.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Producto {product_id} no encontrado")

        try:
            record = InventoryService.upsert(self.db, product_id, location, quantity)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"❌ Error ajustando inventario de producto {product_id}")
            raise

        logger.info(
            f"📦 Inventario ajustado: producto {product_id} en {display_name(location)} = {quantity}"
        )
        return self._record_response(record, product.name)
