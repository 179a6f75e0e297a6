# scripts/setup_database.py
"""
Script de setup inicial: tablas, registro de transferencias y barrido
de facturas de transferencia huérfanas. Seguro de ejecutar en cada despliegue.
"""
import sys
import logging

from app.config.database import engine, SessionLocal
from app.shared.database.models import Base, Branch, Warehouse
from app.modules.records.service import TransferRecordManager

logger = logging.getLogger(__name__)

def setup_database(seed_locations: bool = False) -> bool:
    """Setup inicial de la base de datos"""
    print("🔧 Configurando base de datos...")

    Base.metadata.create_all(bind=engine)
    print("✅ Tablas verificadas")

    db = SessionLocal()
    try:
        if seed_locations and db.query(Branch).count() == 0:
            print("📍 Creando ubicaciones iniciales...")
            db.add(Branch(name="Sucursal Principal", address="Ubicación Principal", is_active=True))
            db.add(Warehouse(name="Bodega Principal", address="Ubicación Principal", is_active=True))
            db.commit()

        manager = TransferRecordManager(db)
        record = manager.ensure_exists()
        print(f"📒 Registro de transferencias: {record.name} (ID: {record.id})")

        linked = manager.link_orphans()
        print(f"🔗 Facturas huérfanas vinculadas: {linked}")

        print("🎉 Setup completado exitosamente")
        return True

    except Exception as e:
        db.rollback()
        logger.exception("❌ Error en setup")
        print(f"❌ Error en setup: {e}")
        return False
    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    ok = setup_database(seed_locations="--seed" in sys.argv)
    sys.exit(0 if ok else 1)
