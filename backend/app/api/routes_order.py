from fastapi import APIRouter, Depends

from app.api.deps import get_current_user_id, get_order_service
from app.errors import Internal, StoreError
from app.schemas.order_schema import (
    CapturePaymentOrderIn,
    CreatePaymentOrderIn,
    OrderStatusIn,
    order_dict,
)
from app.services.order_service import OrderService
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["orders"])


@router.post("/paypal/create", summary="Validate the cart total and open a PayPal order")
def create_paypal_order(
    payload: CreatePaymentOrderIn,
    user_id: int = Depends(get_current_user_id),
    svc: OrderService = Depends(get_order_service),
):
    try:
        resp = svc.create_payment_order(
            user_id, [it.to_line_item() for it in payload.items], payload.total
        )
    except StoreError:
        raise
    except Exception:
        logger.exception("Error al crear orden PayPal")
        raise Internal("Error creando orden PayPal")
    return {"success": True, "orderId": resp["orderId"]}


@router.post("/paypal/capture", summary="Capture a PayPal order and turn the cart into an order")
def capture_paypal_order(
    payload: CapturePaymentOrderIn,
    user_id: int = Depends(get_current_user_id),
    svc: OrderService = Depends(get_order_service),
):
    try:
        resp = svc.capture_payment_order(user_id, payload.orderId)
    except StoreError:
        raise
    except Exception:
        logger.exception("Error al capturar orden PayPal")
        raise Internal("Error al procesar pago")
    return {
        "success": True,
        "pedidoId": resp["internalOrderId"],
        "orderId": resp["orderId"],
        "total": resp["capturedAmount"],
    }


@router.get("/mine", summary="Orders of the current user")
def my_orders(
    user_id: int = Depends(get_current_user_id),
    svc: OrderService = Depends(get_order_service),
):
    return {"pedidos": [order_dict(o) for o in svc.list_orders(user_id)]}


# admin role is enforced by the gateway in front of this service
@router.patch(
    "/{order_id}/status",
    summary="Move an order to another status",
    dependencies=[Depends(get_current_user_id)],
)
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    svc: OrderService = Depends(get_order_service),
):
    order = svc.update_status(order_id, payload.status)
    return {"success": True, "pedido": order_dict(order)}
