# app/shared/schemas/locations.py

"""
Ubicaciones como unión etiquetada: sucursal o bodega.

El campo `kind` discrimina la variante; el resto del código despacha con
isinstance y nunca compara cadenas sueltas.
"""

from pydantic import BaseModel, Field
from typing import Annotated, Literal, Optional, Union
from enum import Enum


class LocationKind(str, Enum):
    """Tipos de ubicación soportados"""
    BRANCH = "branch"
    WAREHOUSE = "warehouse"


class BranchLocation(BaseModel):
    """Sucursal: mantiene inventario vendible por producto"""
    kind: Literal["branch"] = "branch"
    id: int = Field(..., gt=0, description="ID de la sucursal")
    name: Optional[str] = Field(None, max_length=255, description="Nombre legible")

    class Config:
        frozen = True


class WarehouseLocation(BaseModel):
    """Bodega: solo participa como el otro extremo del movimiento"""
    kind: Literal["warehouse"] = "warehouse"
    id: int = Field(..., gt=0, description="ID de la bodega")
    name: Optional[str] = Field(None, max_length=255, description="Nombre legible")

    class Config:
        frozen = True


Location = Annotated[
    Union[BranchLocation, WarehouseLocation],
    Field(discriminator="kind")
]


def make_location(kind: str, location_id: int, name: Optional[str] = None):
    """Construir la variante correcta a partir de su tipo en texto"""
    if kind == LocationKind.BRANCH.value:
        return BranchLocation(id=location_id, name=name)
    if kind == LocationKind.WAREHOUSE.value:
        return WarehouseLocation(id=location_id, name=name)
    raise ValueError(f"Tipo de ubicación desconocido: {kind}")


def same_location(a, b) -> bool:
    """Dos ubicaciones son la misma si coinciden variante e ID"""
    return a.kind == b.kind and a.id == b.id


def display_name(location) -> str:
    if location.name:
        return location.name
    label = "Sucursal" if isinstance(location, BranchLocation) else "Bodega"
    return f"{label} #{location.id}"
