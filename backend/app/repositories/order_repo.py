from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from app.models.order import Order, OrderLine, OrderStatus
from app.models.product import Product
from app.models.sale import SalesRecord


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, order_id: int) -> Optional[Order]:
        return (
            self.db.query(Order)
            .options(selectinload(Order.lines))
            .filter(Order.id == order_id)
            .first()
        )

    def get_by_gateway_id(self, gateway_order_id: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.gateway_order_id == gateway_order_id).first()

    def list_for_user(self, user_id: int) -> List[Order]:
        return (
            self.db.query(Order)
            .options(selectinload(Order.lines))
            .filter(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def received_orders(self, user_id: int) -> List[Order]:
        """Orders the user has received, oldest first, with products and images loaded."""
        return (
            self.db.query(Order)
            .options(
                selectinload(Order.lines)
                .selectinload(OrderLine.product)
                .selectinload(Product.images)
            )
            .filter(
                Order.user_id == user_id,
                Order.status == OrderStatus.RECEIVED_BY_CUSTOMER.value,
            )
            .order_by(Order.created_at, Order.id)
            .all()
        )

    def add(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()
        return order

    def add_sale(self, sale: SalesRecord) -> SalesRecord:
        self.db.add(sale)
        self.db.flush()
        return sale
