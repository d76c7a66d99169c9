from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.adapters.mock_payment import PaymentGateway
from app.config import settings
from app.errors import (
    EmptyCart,
    EstimatorUnavailable,
    Internal,
    InvalidCaptureAmount,
    InvalidInput,
    NotFound,
    OutOfStock,
    TotalMismatch,
)
from app.models.order import Order, OrderLine, OrderStatus
from app.models.sale import SalesRecord
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.services.pricing import (
    CartLineItem,
    PricingBreakdown,
    PricingCalculator,
    ShippingService,
    round2,
    to_decimal,
)
from app.utils.logging import get_logger
from app.utils.transactions import unit_of_work

logger = get_logger(__name__)


def _money(value: Decimal) -> str:
    return f"{round2(value):.2f}"


def extract_captured_amount(capture_result: Dict) -> Decimal:
    """
    Amount actually collected by the gateway: the first capture's amount,
    falling back to the purchase unit's amount, then to "0".
    """
    try:
        pu = (capture_result.get("purchase_units") or [None])[0] or {}
        captures = (pu.get("payments") or {}).get("captures") or [{}]
        raw = (captures[0].get("amount") or {}).get("value") or (pu.get("amount") or {}).get("value") or "0"
        value = Decimal(str(raw))
    except (AttributeError, TypeError, IndexError, InvalidOperation, ValueError):
        raise InvalidCaptureAmount()
    if not value.is_finite() or value < 0:
        raise InvalidCaptureAmount()
    return round2(value)


class OrderService:
    """
    Two-phase checkout against the payment gateway.

    create_payment_order re-prices the submitted cart, checks the client's
    total and opens a gateway order. capture_payment_order collects the
    payment and turns the user's cart into an order in one transaction.
    """

    def __init__(
        self,
        db: Session,
        gateway: PaymentGateway,
        shipping: ShippingService,
        calculator: Optional[PricingCalculator] = None,
    ):
        self.db = db
        self.gateway = gateway
        self.shipping = shipping
        self.calculator = calculator or PricingCalculator()
        self.orders = OrderRepository(db)
        self.carts = CartRepository(db)
        self.products = ProductRepository(db)

    # -- create ---------------------------------------------------------

    def create_payment_order(
        self, user_id: int, items: Sequence[CartLineItem], submitted_total
    ) -> Dict:
        submitted_total = to_decimal(submitted_total, "total")
        breakdown = self.calculator.compute(items)
        quote = self.shipping.quote(breakdown)
        if not quote.available:
            raise EstimatorUnavailable("Error al obtener el costo de envío")

        expected_total = round2(breakdown.subtotal + quote.estimated_cost)
        if abs(expected_total - submitted_total) > settings.TOTAL_TOLERANCE:
            logger.info(
                "Total mismatch for user %s: expected %s, submitted %s",
                user_id,
                expected_total,
                submitted_total,
            )
            raise TotalMismatch()

        request_body = self._gateway_request(items, breakdown, quote.estimated_cost, expected_total)
        gateway_order_id = self.gateway.create_order(request_body)
        logger.info(
            "Gateway order %s created for user %s (subtotal=%s shipping=%s total=%s)",
            gateway_order_id,
            user_id,
            breakdown.subtotal,
            quote.estimated_cost,
            expected_total,
        )
        return {
            "orderId": gateway_order_id,
            "subtotal": breakdown.subtotal,
            "shipping": quote.estimated_cost,
            "total": expected_total,
        }

    def _gateway_request(
        self,
        items: Sequence[CartLineItem],
        breakdown: PricingBreakdown,
        shipping: Decimal,
        total: Decimal,
    ) -> Dict:
        currency = settings.CURRENCY
        return {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "amount": {
                        "currency_code": currency,
                        "value": _money(total),
                        "breakdown": {
                            "item_total": {"currency_code": currency, "value": _money(breakdown.subtotal)},
                            "shipping": {"currency_code": currency, "value": _money(shipping)},
                        },
                    },
                    "items": [
                        {
                            "name": it.name,
                            "unit_amount": {"currency_code": currency, "value": _money(it.unit_price)},
                            "quantity": str(it.quantity),
                            "sku": str(it.product_id),
                        }
                        for it in items
                    ],
                }
            ],
            "application_context": {
                "shipping_preference": "NO_SHIPPING",
                "user_action": "PAY_NOW",
                "return_url": f"{settings.FRONTEND_URL}/pago-exitoso",
                "cancel_url": f"{settings.FRONTEND_URL}/carrito",
            },
        }

    # -- capture --------------------------------------------------------

    def _capture_result(self, order: Order) -> Dict:
        return {
            "orderId": order.gateway_order_id,
            "internalOrderId": order.id,
            "capturedAmount": round2(order.total),
        }

    def capture_payment_order(self, user_id: int, gateway_order_id: str) -> Dict:
        if not gateway_order_id:
            raise InvalidInput("orderId es requerido")

        existing = self.orders.get_by_gateway_id(gateway_order_id)
        if existing is not None:
            if existing.user_id != user_id:
                raise NotFound("Orden no encontrada")
            logger.info("Capture replay for gateway order %s", gateway_order_id)
            return self._capture_result(existing)

        result = self.gateway.capture_order(gateway_order_id)
        captured = extract_captured_amount(result)

        cart = self.carts.items_for_user(user_id)
        if not cart:
            logger.error(
                "Gateway order %s captured %s but user %s has an empty cart",
                gateway_order_id,
                captured,
                user_id,
            )
            raise EmptyCart()

        try:
            with unit_of_work(self.db, f"capture {gateway_order_id}"):
                order = self._persist_purchase(user_id, gateway_order_id, captured, cart)
        except OutOfStock:
            logger.error(
                "Gateway order %s captured %s but stock ran out; nothing persisted",
                gateway_order_id,
                captured,
            )
            raise
        except IntegrityError:
            # a concurrent capture of the same gateway order won the insert
            existing = self.orders.get_by_gateway_id(gateway_order_id)
            if existing is not None and existing.user_id == user_id:
                return self._capture_result(existing)
            logger.exception("Capture of %s failed on a constraint", gateway_order_id)
            raise Internal("Error al procesar pago")
        except SQLAlchemyError:
            logger.exception("Capture of %s failed while persisting", gateway_order_id)
            raise Internal("Error al procesar pago")

        logger.info(
            "Order %s created from gateway order %s for user %s, total %s",
            order.id,
            gateway_order_id,
            user_id,
            captured,
        )
        return self._capture_result(order)

    def _persist_purchase(self, user_id: int, gateway_order_id: str, captured: Decimal, cart) -> Order:
        order = Order(
            user_id=user_id,
            gateway_order_id=gateway_order_id,
            created_at=datetime.now(timezone.utc),
            status=OrderStatus.IN_PROGRESS.value,
            total=captured,
        )
        for ci in cart:
            order.lines.append(
                OrderLine(product_id=ci.product_id, quantity=ci.quantity, unit_price=ci.product.price)
            )
        self.orders.add(order)

        for ci in cart:
            price = Decimal(ci.product.price)
            self.orders.add_sale(
                SalesRecord(
                    product_id=ci.product_id,
                    user_id=user_id,
                    quantity=ci.quantity,
                    unit_price=price,
                    line_total=round2(price * ci.quantity),
                )
            )

        for ci in cart:
            if not self.products.decrement_stock(ci.product_id, ci.quantity):
                raise OutOfStock(f"Stock insuficiente para {ci.product.name}")

        self.carts.clear(user_id)
        return order

    # -- queries / admin ------------------------------------------------

    def list_orders(self, user_id: int) -> List[Order]:
        return self.orders.list_for_user(user_id)

    def update_status(self, order_id: int, status: str) -> Order:
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise InvalidInput(f"Estado inválido: {status}")
        order = self.orders.get(order_id)
        if not order:
            raise NotFound("Pedido no encontrado")
        with unit_of_work(self.db, f"status of order {order_id}"):
            order.status = new_status.value
        self.db.refresh(order)
        return order
