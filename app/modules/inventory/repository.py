from sqlalchemy.orm import Session
from typing import Dict, List, Optional

from app.shared.database.models import Product, Branch, Warehouse
from app.shared.schemas.locations import BranchLocation, WarehouseLocation

class InventoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_location_row(self, location):
        """Sucursal o bodega según la variante; None si no existe"""
        if isinstance(location, BranchLocation):
            return self.db.query(Branch).filter(Branch.id == location.id).first()
        if isinstance(location, WarehouseLocation):
            return self.db.query(Warehouse).filter(Warehouse.id == location.id).first()
        raise TypeError(f"Ubicación no soportada: {location!r}")

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_product_names(self, product_ids: List[int]) -> Dict[int, str]:
        if not product_ids:
            return {}
        rows = self.db.query(Product.id, Product.name).filter(Product.id.in_(product_ids)).all()
        return {row.id: row.name for row in rows}
