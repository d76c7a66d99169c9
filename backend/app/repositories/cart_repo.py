from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models.cart_item import CartItem


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def items_for_user(self, user_id: int) -> List[CartItem]:
        return (
            self.db.query(CartItem)
            .options(joinedload(CartItem.product))
            .filter(CartItem.user_id == user_id)
            .order_by(CartItem.id)
            .all()
        )

    def get_item(self, user_id: int, product_id: int) -> Optional[CartItem]:
        return (
            self.db.query(CartItem)
            .filter(CartItem.user_id == user_id, CartItem.product_id == product_id)
            .first()
        )

    def set_quantity(self, user_id: int, product_id: int, qty: int) -> CartItem:
        item = self.get_item(user_id, product_id)
        if item:
            item.quantity = qty
        else:
            item = CartItem(user_id=user_id, product_id=product_id, quantity=qty)
            self.db.add(item)
        self.db.flush()
        return item

    def remove_item(self, user_id: int, product_id: int) -> bool:
        it = self.get_item(user_id, product_id)
        if not it:
            return False
        self.db.delete(it)
        self.db.flush()
        return True

    def clear(self, user_id: int) -> int:
        deleted = (
            self.db.query(CartItem)
            .filter(CartItem.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return deleted
