import threading
import time
from typing import Dict, Optional
from uuid import uuid4

from app.errors import PaymentGatewayError


class PaymentGateway:
    """
    The two calls the checkout needs from a payment gateway.

    create_order takes a gateway order request body and returns the gateway's
    order id. capture_order collects the payment for that id and returns the
    gateway's capture result (a dict with ``purchase_units``).
    """

    name = "abstract"

    def create_order(self, request_body: Dict) -> str:
        raise NotImplementedError

    def capture_order(self, order_id: str) -> Dict:
        raise NotImplementedError

    def health_check(self) -> bool:
        return True


class MockPaymentGateway(PaymentGateway):
    """
    In-memory stand-in for PayPal used in development and tests.
    Captures return the amount that was sent on create, in PayPal's result shape.
    """

    name = "mock"

    def __init__(self, delay_ms: int = 0):
        self.delay_seconds = delay_ms / 1000.0
        self._orders: Dict[str, Dict] = {}
        self._lock = threading.Lock()

    def create_order(self, request_body: Dict) -> str:
        time.sleep(self.delay_seconds)
        order_id = f"MOCK-{uuid4().hex[:17].upper()}"
        with self._lock:
            self._orders[order_id] = {"request": request_body, "status": "CREATED"}
        return order_id

    def capture_order(self, order_id: str) -> Dict:
        time.sleep(self.delay_seconds)
        with self._lock:
            entry: Optional[Dict] = self._orders.get(order_id)
            if entry is None:
                raise PaymentGatewayError(f"Unknown order {order_id}")
            if entry["status"] == "COMPLETED":
                raise PaymentGatewayError(f"Order {order_id} already captured")
            entry["status"] = "COMPLETED"

        amount = entry["request"]["purchase_units"][0]["amount"]
        return {
            "id": order_id,
            "status": "COMPLETED",
            "purchase_units": [
                {
                    "amount": amount,
                    "payments": {
                        "captures": [
                            {
                                "id": f"CAP-{uuid4().hex[:12].upper()}",
                                "status": "COMPLETED",
                                "amount": {
                                    "currency_code": amount["currency_code"],
                                    "value": amount["value"],
                                },
                            }
                        ]
                    },
                }
            ],
        }
