from typing import Dict

from sqlalchemy.orm import Session

from app.errors import InvalidInput, NotFound
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.services.pricing import round2
from app.utils.transactions import unit_of_work


class CartService:
    def __init__(self, db: Session):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.product_repo = ProductRepository(db)

    def view(self, user_id: int) -> Dict:
        items = []
        subtotal = 0
        for it in self.cart_repo.items_for_user(user_id):
            p = it.product
            items.append(
                {
                    "id": p.id,
                    "name": p.name,
                    "price": round2(p.price),
                    "quantity": it.quantity,
                    "size_ml": p.size_ml or None,
                    "stock": p.stock,
                }
            )
            subtotal += p.price * it.quantity
        return {"items": items, "subtotal": round2(subtotal)}

    def set_item(self, user_id: int, product_id: int, qty: int):
        if qty <= 0:
            raise InvalidInput("La cantidad debe ser positiva")
        product = self.product_repo.get(product_id)
        if not product or not product.active:
            raise NotFound("Producto no encontrado")
        with unit_of_work(self.db, "cart update"):
            item = self.cart_repo.set_quantity(user_id, product_id, qty)
        return item

    def remove_item(self, user_id: int, product_id: int):
        with unit_of_work(self.db, "cart removal"):
            removed = self.cart_repo.remove_item(user_id, product_id)
        if not removed:
            raise NotFound("El producto no está en el carrito")
