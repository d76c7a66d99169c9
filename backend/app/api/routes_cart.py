from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id
from app.db import get_db
from app.services.cart_service import CartService

router = APIRouter(tags=["cart"])


class SetItemIn(BaseModel):
    productId: int
    quantity: int = Field(..., gt=0)


@router.get("", summary="Get the current user's cart")
def get_cart(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return CartService(db).view(user_id)


@router.post("/items", summary="Add a product to the cart or change its quantity")
def set_item(
    payload: SetItemIn,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    svc.set_item(user_id, payload.productId, payload.quantity)
    return svc.view(user_id)


@router.delete("/items/{product_id}", summary="Remove a product from the cart")
def remove_item(
    product_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = CartService(db)
    svc.remove_item(user_id, product_id)
    return svc.view(user_id)
