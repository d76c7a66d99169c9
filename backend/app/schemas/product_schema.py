from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductImageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    image_url: str = Field(serialization_alias="imageUrl")


class ReviewImageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    url: str


class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int = Field(serialization_alias="usuarioId")
    product_id: int = Field(serialization_alias="productoId")
    comment: str
    rating: int
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")
    images: List[ReviewImageOut] = []


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal = Field(serialization_alias="precio")
    flavor: Optional[str] = Field(default=None, serialization_alias="sabor")
    size_ml: int = Field(serialization_alias="tamano")
    stock: int
    active: bool
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")
    images: List[ProductImageOut] = Field(default=[], serialization_alias="imagenes")


class ProductDetailOut(ProductOut):
    reviews: List[ReviewOut] = []


class PromotionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int = Field(serialization_alias="productoId")
    title: str = Field(serialization_alias="titulo")
    description: str = Field(serialization_alias="descripcion")
    starts_at: datetime = Field(serialization_alias="fechaInicio")
    ends_at: Optional[datetime] = Field(default=None, serialization_alias="fechaFin")
    discount: Decimal = Field(serialization_alias="descuento")
    active: bool = Field(serialization_alias="activo")


class PromotionIn(BaseModel):
    titulo: str = Field(..., min_length=1)
    descripcion: Optional[str] = None
    fechaInicio: datetime
    fechaFin: Optional[datetime] = None
    descuento: float = Field(0, ge=0, le=100)
    productoId: int
    activo: bool = True


def product_dict(p, detail: bool = False) -> dict:
    schema = ProductDetailOut if detail else ProductOut
    return schema.model_validate(p).model_dump(by_alias=True)
