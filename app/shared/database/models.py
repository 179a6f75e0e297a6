# app/shared/database/models.py
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, JSON,
    Numeric, ForeignKey, UniqueConstraint, CheckConstraint,
    func
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# =====================================================
# MIXIN PARA TIMESTAMPS
# =====================================================
class TimestampMixin:
    """Mixin que agrega campos created_at y updated_at"""
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, server_default=func.current_timestamp(), onupdate=func.current_timestamp())


# =====================================================
# UBICACIONES
# =====================================================

class Branch(Base, TimestampMixin):
    """Modelo de Sucursal (inventario vendible y rastreado)"""
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(Text)
    phone = Column(String(50))
    is_active = Column(Boolean, default=True)

    inventory = relationship("Inventory", back_populates="branch")


class Warehouse(Base, TimestampMixin):
    """Modelo de Bodega (almacenamiento a granel)"""
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    address = Column(Text)
    phone = Column(String(50))
    is_active = Column(Boolean, default=True)

    inventory = relationship("Inventory", back_populates="warehouse")


# =====================================================
# PRODUCTOS
# =====================================================

class Product(Base, TimestampMixin):
    """Modelo de Producto (solo lo que el motor necesita para nombrarlo)"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    barcode = Column(String(100), index=True)
    is_active = Column(Boolean, default=True)

    inventory = relationship("Inventory", back_populates="product")


# =====================================================
# REGISTROS (LIBROS)
# =====================================================

class Record(Base, TimestampMixin):
    """
    Modelo de Registro.

    El registro de transferencias es una fila única identificada por su
    nombre; la restricción UNIQUE sobre `name` impide que dos primeros
    usuarios concurrentes creen dos registros.
    """
    __tablename__ = "records"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True)
    is_active = Column(Boolean, default=True)
    is_primary = Column(Boolean, default=False)

    invoices = relationship("PurchaseInvoice", back_populates="record")


# =====================================================
# FACTURAS (COMPRAS Y TRANSFERENCIAS)
# =====================================================

class PurchaseInvoice(Base, TimestampMixin):
    """Modelo de Factura de Compra; las transferencias se marcan en `notes`"""
    __tablename__ = "purchase_invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(50), unique=True, nullable=False)
    invoice_date = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    supplier_id = Column(Integer)

    # Origen y destino: 'branch' | 'warehouse'
    source_kind = Column(String(20))
    source_id = Column(Integer)
    destination_kind = Column(String(20))
    destination_id = Column(Integer)

    record_id = Column(Integer, ForeignKey("records.id"), nullable=True, index=True)

    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(12, 2), nullable=False, default=0)
    net_amount = Column(Numeric(12, 2), nullable=False, default=0)

    notes = Column(Text)
    invoice_type = Column(String(50), default='Purchase Invoice')
    is_active = Column(Boolean, default=True)
    created_by = Column(Integer)

    # Estado del procesamiento: 'processing' | 'completed' | 'aborted'
    transfer_status = Column(String(20))
    failed_position = Column(Integer)
    failure_stage = Column(String(30))
    failure_message = Column(Text)
    requested_items = Column(JSON)

    # Relationships
    record = relationship("Record", back_populates="invoices")
    items = relationship(
        "PurchaseInvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="PurchaseInvoiceItem.position"
    )


class PurchaseInvoiceItem(Base):
    """Modelo de Item de Factura de Compra"""
    __tablename__ = "purchase_invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    purchase_invoice_id = Column(Integer, ForeignKey("purchase_invoices.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_purchase_price = Column(Numeric(12, 2), nullable=False, default=0)
    total_price = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(Text)
    position = Column(Integer, nullable=False)
    # 'atomic' | 'manual'
    movement_type = Column(String(20))
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())

    __table_args__ = (
        UniqueConstraint('purchase_invoice_id', 'position', name='purchase_invoice_items_position_key'),
        CheckConstraint('quantity > 0', name='purchase_invoice_items_quantity_positive'),
    )

    # Relationships
    invoice = relationship("PurchaseInvoice", back_populates="items")
    product = relationship("Product")


# =====================================================
# INVENTARIO
# =====================================================

class Inventory(Base):
    """Modelo de Inventario por (producto, ubicación)"""
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=True, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=True, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, default=0)
    last_updated = Column(DateTime, server_default=func.current_timestamp())

    __table_args__ = (
        UniqueConstraint('product_id', 'branch_id', name='inventory_product_branch_key'),
        UniqueConstraint('product_id', 'warehouse_id', name='inventory_product_warehouse_key'),
        CheckConstraint('quantity >= 0', name='inventory_quantity_non_negative'),
        CheckConstraint(
            '(branch_id IS NULL) <> (warehouse_id IS NULL)',
            name='inventory_single_location'
        ),
    )

    # Relationships
    product = relationship("Product", back_populates="inventory")
    branch = relationship("Branch", back_populates="inventory")
    warehouse = relationship("Warehouse", back_populates="inventory")


class InventoryChange(Base):
    """Modelo de Cambios de Inventario"""
    __tablename__ = "inventory_changes"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    change_type = Column(String(50), nullable=False)
    location_kind = Column(String(20), nullable=False)
    location_id = Column(Integer, nullable=False)
    quantity_before = Column(Integer)
    quantity_after = Column(Integer)
    reference_id = Column(Integer)
    user_id = Column(Integer)
    notes = Column(String(255))
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())

    # Relationships
    product = relationship("Product")
