# app/api/v1/router.py
from fastapi import APIRouter
from app.modules.transfers.router import router as transfers_router
from app.modules.records.router import router as records_router
from app.modules.inventory.router import router as inventory_router

from app.config.settings import settings

# Crear router principal de la API v1
api_router = APIRouter()

# ==================== MÓDULOS ====================

api_router.include_router(
    transfers_router,
    prefix="/transfers",
    tags=["Transfers"]
)

api_router.include_router(
    records_router,
    prefix="/records",
    tags=["Records"]
)

api_router.include_router(
    inventory_router,
    prefix="/inventory",
    tags=["Inventory Management"]
)

# ==================== ENDPOINTS RAÍZ ====================

@api_router.get("/")
async def api_root():
    """Root endpoint de la API"""
    return {
        "message": f"{settings.app_name} v1",
        "version": settings.version,
        "status": "active",
        "docs": "/docs",
        "available_endpoints": {
            "transfers": "/api/v1/transfers",
            "records": "/api/v1/records",
            "inventory": "/api/v1/inventory"
        }
    }

@api_router.get("/modules")
async def list_modules():
    """
    Listado de módulos disponibles
    """
    return {
        "success": True,
        "modules": [
            {
                "name": "transfers",
                "prefix": "/transfers",
                "description": "Transferencias de stock entre sucursales y bodegas",
                "features": [
                    "Factura de transferencia de valor cero",
                    "Transferencia atómica entre sucursales",
                    "Reanudación de transferencias abortadas"
                ]
            },
            {
                "name": "records",
                "prefix": "/records",
                "description": "Registro único de transferencias",
                "features": [
                    "Creación perezosa e idempotente",
                    "Vinculación de facturas huérfanas"
                ]
            },
            {
                "name": "inventory",
                "prefix": "/inventory",
                "description": "Existencias por producto y ubicación",
                "features": [
                    "Consulta por sucursal o bodega",
                    "Ajuste manual de existencias"
                ]
            }
        ]
    }
