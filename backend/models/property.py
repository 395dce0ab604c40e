"""
Modelo de dados para Imóveis
Coexistem duas origens: o catálogo seed (constante, nunca gravado) e documentos na BD.
Um documento com o mesmo id de um seed é um override desse seed.
"""
from typing import Optional, List
from enum import Enum

from pydantic import Field, field_validator

from models.common import CamelModel, reject_null


class PropertyStatus(str, Enum):
    """Estados possíveis de um imóvel"""
    ACTIVE = "active"
    NEGOTIATING = "negotiating"
    SOLD = "sold"


class GeoPoint(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class PropertyCreate(CamelModel):
    """Dados do formulário de registo de imóvel"""
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    price: float = Field(ge=1)
    layout: str = Field(min_length=1)  # ex: 3LDK
    size: float = Field(ge=1)  # m²
    built_year: int = Field(ge=1900, le=2100)
    status: PropertyStatus = PropertyStatus.ACTIVE
    memo: Optional[str] = None
    images: List[str] = []
    location: Optional[GeoPoint] = None


class PropertyUpdate(CamelModel):
    """Dados para actualizar um imóvel (ou promover um seed a documento real)"""
    name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=1)
    layout: Optional[str] = Field(default=None, min_length=1)
    size: Optional[float] = Field(default=None, ge=1)
    built_year: Optional[int] = Field(default=None, ge=1900, le=2100)
    status: Optional[PropertyStatus] = None
    memo: Optional[str] = None
    images: Optional[List[str]] = None
    location: Optional[GeoPoint] = None

    @field_validator(
        "name", "address", "price", "layout", "size", "built_year", "status", "images",
        mode="before",
    )
    @classmethod
    def required_not_null(cls, v):
        return reject_null(v)


class Property(CamelModel):
    """Imóvel efectivo (seed, override ou criado)"""
    id: str
    name: str
    address: str
    price: float
    layout: str
    size: float
    built_year: int
    status: PropertyStatus
    images: List[str] = []
    memo: Optional[str] = None
    location: Optional[GeoPoint] = None
    deleted: Optional[bool] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
