from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.services.pricing import CartLineItem, to_decimal


class OrderItemIn(BaseModel):
    id: int
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    size_ml: Optional[int] = Field(None, ge=0)

    def to_line_item(self) -> CartLineItem:
        return CartLineItem(
            product_id=self.id,
            name=self.name,
            unit_price=to_decimal(self.price, "price"),
            quantity=self.quantity,
            volume_ml=self.size_ml,
        )


class CreatePaymentOrderIn(BaseModel):
    items: List[OrderItemIn]
    total: float


class CapturePaymentOrderIn(BaseModel):
    orderId: str = Field(..., min_length=1)


class ShippingQuoteIn(BaseModel):
    items: List[OrderItemIn]


class OrderStatusIn(BaseModel):
    status: str


class OrderLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    product_id: int = Field(serialization_alias="productoId")
    quantity: int = Field(serialization_alias="cantidad")
    unit_price: Decimal = Field(serialization_alias="precioUnitario")


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    user_id: int = Field(serialization_alias="usuarioId")
    gateway_order_id: Optional[str] = Field(default=None, serialization_alias="orderId")
    status: str = Field(serialization_alias="estado")
    total: Decimal
    created_at: datetime = Field(serialization_alias="fechaPedido")
    lines: List[OrderLineOut] = Field(default=[], serialization_alias="detallePedido")


def order_dict(order) -> dict:
    return OrderOut.model_validate(order).model_dump(by_alias=True)
