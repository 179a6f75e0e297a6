# app/modules/records/__init__.py
"""
Módulo de Registros - Registro único de transferencias

- router.py: Endpoints del registro de transferencias
- service.py: TransferRecordManager (creación perezosa, barrido de huérfanas)
- repository.py: Acceso a datos de registros
- schemas.py: Modelos de request/response
"""

from .router import router
from .service import TransferRecordManager
from .repository import RecordsRepository

__all__ = [
    "router",
    "TransferRecordManager",
    "RecordsRepository"
]
