"""
Configuración de pruebas y fixtures compartidas
"""

import asyncio
import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.main import app
from app.config.database import get_db
from app.shared.database.models import (
    Base, Branch, Warehouse, Product, Inventory
)

# Base de datos de pruebas: SQLite en memoria compartida por la conexión
TEST_DATABASE_URL = "sqlite://"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Sesión nueva con tablas recién creadas para cada prueba"""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Cliente de pruebas con la dependencia de base de datos reemplazada"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

@pytest.fixture
def run_async():
    """Ejecutar una corrutina de servicio de forma síncrona"""
    return asyncio.run

# ==================== DATOS DE PRUEBA ====================

@pytest.fixture
def make_branch(db_session: Session):
    def _make(name: str = "Sucursal Centro") -> Branch:
        branch = Branch(name=name, is_active=True)
        db_session.add(branch)
        db_session.commit()
        db_session.refresh(branch)
        return branch
    return _make

@pytest.fixture
def make_warehouse(db_session: Session):
    def _make(name: str = "Bodega Norte") -> Warehouse:
        warehouse = Warehouse(name=name, is_active=True)
        db_session.add(warehouse)
        db_session.commit()
        db_session.refresh(warehouse)
        return warehouse
    return _make

@pytest.fixture
def make_product(db_session: Session):
    def _make(name: str = "Producto", barcode: str = None) -> Product:
        product = Product(name=name, barcode=barcode, is_active=True)
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product
    return _make

@pytest.fixture
def stock(db_session: Session):
    """Fijar existencia inicial en una sucursal o bodega"""
    def _stock(product: Product, quantity: int, branch: Branch = None, warehouse: Warehouse = None) -> Inventory:
        record = Inventory(
            product_id=product.id,
            branch_id=branch.id if branch else None,
            warehouse_id=warehouse.id if warehouse else None,
            quantity=quantity,
            min_stock=0
        )
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record
    return _stock

@pytest.fixture
def branch_quantity(db_session: Session):
    """Existencia actual de un producto en una sucursal (None si no hay registro)"""
    def _quantity(product: Product, branch: Branch):
        db_session.expire_all()
        record = db_session.query(Inventory).filter(
            Inventory.product_id == product.id,
            Inventory.branch_id == branch.id
        ).first()
        return record.quantity if record else None
    return _quantity
