from typing import List, Dict, Any, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, update
from datetime import datetime
import logging

from app.shared.database.models import Inventory, InventoryChange
from app.shared.schemas.locations import BranchLocation, WarehouseLocation

logger = logging.getLogger(__name__)


class InventoryService:
    """
    Almacén de registros de inventario por (producto, ubicación).

    Ninguna operación hace commit: la transacción pertenece al llamador,
    que decide cuándo un movimiento queda confirmado.
    """

    @staticmethod
    def _location_clause(location):
        if isinstance(location, BranchLocation):
            return Inventory.branch_id == location.id
        if isinstance(location, WarehouseLocation):
            return Inventory.warehouse_id == location.id
        raise TypeError(f"Ubicación no soportada: {location!r}")

    @staticmethod
    def get(
        db: Session,
        product_id: int,
        location,
        for_update: bool = False
    ) -> Optional[Inventory]:
        """Lectura puntual; con for_update bloquea la fila (SELECT FOR UPDATE)"""
        query = db.query(Inventory).filter(
            and_(
                Inventory.product_id == product_id,
                InventoryService._location_clause(location)
            )
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def get_quantity(db: Session, product_id: int, location) -> Optional[int]:
        record = InventoryService.get(db, product_id, location)
        return record.quantity if record else None

    @staticmethod
    def upsert(db: Session, product_id: int, location, quantity: int) -> Inventory:
        """Fijar la cantidad absoluta, creando el registro si no existe"""
        if quantity < 0:
            raise ValueError(f"La cantidad no puede ser negativa: {quantity}")

        record = InventoryService.get(db, product_id, location, for_update=True)
        if record is None:
            record = Inventory(
                product_id=product_id,
                branch_id=location.id if isinstance(location, BranchLocation) else None,
                warehouse_id=location.id if isinstance(location, WarehouseLocation) else None,
                quantity=quantity,
                min_stock=0,
                last_updated=datetime.now()
            )
            db.add(record)
        else:
            record.quantity = quantity
            record.last_updated = datetime.now()

        db.flush()
        return record

    @staticmethod
    def list_by_location(db: Session, location) -> List[Inventory]:
        return db.query(Inventory).filter(
            InventoryService._location_clause(location)
        ).order_by(Inventory.product_id).all()

    # ==================== MOVIMIENTOS ====================

    @staticmethod
    def _log_change(
        db: Session,
        product_id: int,
        change_type: str,
        location,
        quantity_before: int,
        quantity_after: int,
        actor_id: Optional[int],
        reference_id: Optional[int],
        notes: str
    ) -> None:
        db.add(InventoryChange(
            product_id=product_id,
            change_type=change_type,
            location_kind=location.kind,
            location_id=location.id,
            quantity_before=quantity_before,
            quantity_after=quantity_after,
            user_id=actor_id,
            reference_id=reference_id,
            notes=notes[:255],
            created_at=datetime.now()
        ))

    @staticmethod
    def decrement_branch(
        db: Session,
        product_id: int,
        branch_id: int,
        quantity: int,
        actor_id: Optional[int] = None,
        reference_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Restar stock de una sucursal con piso en cero.

        Raises:
            ValueError: si no existe registro de inventario en la sucursal
        """
        location = BranchLocation(id=branch_id)
        record = InventoryService.get(db, product_id, location, for_update=True)

        if record is None:
            logger.error(f"❌ Sin inventario del producto {product_id} en sucursal {branch_id}")
            raise ValueError(
                f"No existe inventario del producto {product_id} en la sucursal {branch_id}"
            )

        quantity_before = record.quantity
        record.quantity = max(0, quantity_before - quantity)
        record.last_updated = datetime.now()

        if quantity_before < quantity:
            logger.warning(
                f"⚠️ Stock insuficiente en sucursal {branch_id} para producto {product_id}: "
                f"disponible={quantity_before}, solicitado={quantity}; queda en 0"
            )

        InventoryService._log_change(
            db, product_id, 'transfer_out', location,
            quantity_before, record.quantity, actor_id, reference_id,
            f"Salida por transferencia #{reference_id}"
        )
        db.flush()

        return {"quantity_before": quantity_before, "quantity_after": record.quantity}

    @staticmethod
    def increment_branch(
        db: Session,
        product_id: int,
        branch_id: int,
        quantity: int,
        actor_id: Optional[int] = None,
        reference_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """Sumar stock a una sucursal, creando el registro en cero si no existe"""
        location = BranchLocation(id=branch_id)
        record = InventoryService.get(db, product_id, location, for_update=True)

        if record is None:
            logger.info(f"📦 Creando registro de inventario: producto {product_id} en sucursal {branch_id}")
            record = InventoryService.upsert(db, product_id, location, 0)

        quantity_before = record.quantity
        record.quantity = quantity_before + quantity
        record.last_updated = datetime.now()

        InventoryService._log_change(
            db, product_id, 'transfer_in', location,
            quantity_before, record.quantity, actor_id, reference_id,
            f"Entrada por transferencia #{reference_id}"
        )
        db.flush()

        return {"quantity_before": quantity_before, "quantity_after": record.quantity}

    @staticmethod
    def transfer_between_branches(
        db: Session,
        product_id: int,
        source_branch_id: int,
        destination_branch_id: int,
        quantity: int,
        actor_id: Optional[int] = None,
        reference_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Transferencia atómica entre dos sucursales.

        El descuento es un UPDATE condicional (quantity >= :qty); si no afecta
        filas, otra operación cambió el stock y no se aplica nada. El origen
        pierde exactamente `quantity` y el destino gana exactamente `quantity`.

        Raises:
            ValueError: registro de origen inexistente o stock insuficiente
        """
        source = BranchLocation(id=source_branch_id)
        record = InventoryService.get(db, product_id, source, for_update=True)

        if record is None:
            logger.error(f"❌ Sin inventario del producto {product_id} en sucursal {source_branch_id}")
            raise ValueError(
                f"No existe inventario del producto {product_id} en la sucursal {source_branch_id}"
            )

        if record.quantity < quantity:
            logger.error(
                f"❌ Stock insuficiente: disponible={record.quantity}, solicitado={quantity}"
            )
            raise ValueError(
                f"Stock insuficiente en la sucursal {source_branch_id}. "
                f"Disponible: {record.quantity}, Solicitado: {quantity}"
            )

        quantity_before = record.quantity

        result = db.execute(
            update(Inventory)
            .where(
                and_(
                    Inventory.id == record.id,
                    Inventory.quantity >= quantity
                )
            )
            .values(
                quantity=Inventory.quantity - quantity,
                last_updated=datetime.now()
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            logger.error("❌ Race condition detectada: stock modificado por otra transacción")
            raise ValueError(
                "El stock fue modificado por otra operación. "
                "Por favor, intenta nuevamente."
            )

        db.expire(record)

        InventoryService._log_change(
            db, product_id, 'transfer_out', source,
            quantity_before, quantity_before - quantity, actor_id, reference_id,
            f"Transferencia a sucursal {destination_branch_id} #{reference_id}"
        )

        destination = InventoryService.increment_branch(
            db, product_id, destination_branch_id, quantity, actor_id, reference_id
        )

        logger.info(
            f"✅ Producto {product_id}: sucursal {source_branch_id} "
            f"{quantity_before} → {quantity_before - quantity}, "
            f"sucursal {destination_branch_id} "
            f"{destination['quantity_before']} → {destination['quantity_after']}"
        )

        return {
            "source_before": quantity_before,
            "source_after": quantity_before - quantity,
            "destination_before": destination["quantity_before"],
            "destination_after": destination["quantity_after"],
        }
