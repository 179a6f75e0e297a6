# app/modules/transfers/movement.py
"""
Coordinador de movimientos de stock.

Por cada item del carrito, en orden y sin paralelismo:
1. Clasifica el par (origen, destino):
   - sucursal → sucursal: primitiva atómica del almacén de inventario
   - cualquier par con bodega: descuento en la sucursal origen (piso en 0)
     y/o incremento en la sucursal destino; la bodega no lleva contador
2. Inserta el item de factura y aplica el movimiento en UNA transacción,
   que se confirma solo si todo el item tuvo éxito.
3. Ante el primer fallo revierte el item actual, marca la factura como
   abortada en esa posición y propaga OperationFailure. Los items
   anteriores quedan aplicados; no hay compensación.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Iterable, List, Optional
import logging

from app.shared.database.models import PurchaseInvoice
from app.shared.exceptions import (
    OperationFailure,
    STAGE_ITEM_CREATE, STAGE_DECREMENT, STAGE_INCREMENT, STAGE_ATOMIC_TRANSFER
)
from app.shared.schemas.locations import BranchLocation, WarehouseLocation
from app.shared.services.inventory_service import InventoryService
from .invoice_builder import TransferInvoiceBuilder
from .schemas import TransferItem, ItemResult

logger = logging.getLogger(__name__)

MOVEMENT_ATOMIC = "atomic"
MOVEMENT_MANUAL = "manual"

class StockMovementCoordinator:

    def __init__(self, db: Session, builder: TransferInvoiceBuilder, store=InventoryService):
        self.db = db
        self.builder = builder
        self.store = store

    @staticmethod
    def classify(source, destination) -> str:
        for location in (source, destination):
            if not isinstance(location, (BranchLocation, WarehouseLocation)):
                raise TypeError(f"Ubicación no soportada: {location!r}")

        if isinstance(source, BranchLocation) and isinstance(destination, BranchLocation):
            return MOVEMENT_ATOMIC
        return MOVEMENT_MANUAL

    @staticmethod
    def final_stage(movement_type: str, source, destination) -> str:
        """Última etapa que escribe para este tipo de movimiento"""
        if movement_type == MOVEMENT_ATOMIC:
            return STAGE_ATOMIC_TRANSFER
        if isinstance(destination, BranchLocation):
            return STAGE_INCREMENT
        if isinstance(source, BranchLocation):
            return STAGE_DECREMENT
        return STAGE_ITEM_CREATE

    def _step(self, stage: str, item: TransferItem, position: int, invoice_id: int, operation, *args):
        try:
            return operation(self.db, *args)
        except (ValueError, SQLAlchemyError) as e:
            raise OperationFailure(item.product_id, stage, str(e), position, invoice_id) from e

    def move(
        self,
        invoice: PurchaseInvoice,
        item: TransferItem,
        position: int,
        source,
        destination,
        actor_id: Optional[int] = None
    ) -> ItemResult:
        """Crear el item y mover el stock, sin confirmar la transacción"""
        movement_type = self.classify(source, destination)
        invoice_id = invoice.id

        try:
            line_item = self.builder.add_line_item(invoice, item, position, movement_type)
        except (ValueError, SQLAlchemyError) as e:
            raise OperationFailure(item.product_id, STAGE_ITEM_CREATE, str(e), position, invoice_id) from e

        if movement_type == MOVEMENT_ATOMIC:
            self._step(
                STAGE_ATOMIC_TRANSFER, item, position, invoice_id,
                self.store.transfer_between_branches,
                item.product_id, source.id, destination.id, item.quantity, actor_id, invoice_id
            )
        else:
            if isinstance(source, BranchLocation):
                self._step(
                    STAGE_DECREMENT, item, position, invoice_id,
                    self.store.decrement_branch,
                    item.product_id, source.id, item.quantity, actor_id, invoice_id
                )
            if isinstance(destination, BranchLocation):
                self._step(
                    STAGE_INCREMENT, item, position, invoice_id,
                    self.store.increment_branch,
                    item.product_id, destination.id, item.quantity, actor_id, invoice_id
                )

        return ItemResult(
            product_id=item.product_id,
            position=position,
            quantity=item.quantity,
            applied=True,
            line_item_id=line_item.id,
            movement_type=movement_type
        )

    def run(
        self,
        invoice: PurchaseInvoice,
        items: List[TransferItem],
        source,
        destination,
        actor_id: Optional[int] = None,
        skip_positions: Iterable[int] = ()
    ) -> List[ItemResult]:
        """
        Procesar los items en orden, confirmando cada uno por separado.

        `skip_positions` son posiciones ya aplicadas (reanudación); no se
        vuelven a tocar ni aparecen en el resultado.

        Raises:
            OperationFailure: en el primer item que falla; `results` lleva lo
                aplicado, el item fallido y los pendientes
        """
        skip = set(skip_positions)
        pending = [(position, item) for position, item in enumerate(items) if position not in skip]
        results: List[ItemResult] = []
        movement_type = self.classify(source, destination)
        invoice_id = invoice.id

        for index, (position, item) in enumerate(pending):
            logger.info(
                f"📦 Item {position + 1}/{len(items)}: producto {item.product_id}, "
                f"cantidad {item.quantity} ({movement_type})"
            )
            try:
                result = self.move(invoice, item, position, source, destination, actor_id)
                try:
                    self.db.commit()
                except SQLAlchemyError as e:
                    raise OperationFailure(
                        item.product_id,
                        self.final_stage(movement_type, source, destination),
                        str(e), position, invoice_id
                    ) from e
            except OperationFailure as failure:
                self.db.rollback()
                logger.error(
                    f"❌ Transferencia abortada en item {position + 1} "
                    f"(producto {failure.product_id}, etapa {failure.stage}): {failure.message}"
                )
                self.builder.repository.mark_aborted(invoice, position, failure.stage, failure.message)

                results.append(ItemResult(
                    product_id=item.product_id,
                    position=position,
                    quantity=item.quantity,
                    applied=False,
                    stage=failure.stage,
                    message=failure.message,
                    movement_type=movement_type
                ))
                results.extend(
                    ItemResult(
                        product_id=rest.product_id,
                        position=rest_position,
                        quantity=rest.quantity,
                        applied=False
                    )
                    for rest_position, rest in pending[index + 1:]
                )
                failure.results = results
                raise

            results.append(result)

        self.builder.repository.mark_completed(invoice)
        return results
