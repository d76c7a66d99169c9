"""
PayPal Orders v2 adapter.

Talks to the REST API directly over httpx: an OAuth2 client-credentials token
is fetched on first use and cached until shortly before it expires.
"""

import time
from typing import Dict, Optional

import httpx

from app.adapters.mock_payment import MockPaymentGateway, PaymentGateway
from app.config import settings
from app.errors import PaymentGatewayError
from app.utils.logging import get_logger

logger = get_logger(__name__)

# refresh the token this many seconds before PayPal says it expires
TOKEN_EXPIRY_MARGIN = 60


class PayPalGateway(PaymentGateway):
    name = "paypal"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        self.client_id = client_id or settings.PAYPAL_CLIENT_ID
        self.client_secret = client_secret or settings.PAYPAL_CLIENT_SECRET
        self.base_url = (base_url or settings.PAYPAL_BASE_URL).rstrip("/")
        self._http = client or httpx.Client(timeout=timeout or settings.HTTP_TIMEOUT_SECONDS * 3)
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def _access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token
        try:
            resp = self._http.post(
                f"{self.base_url}/v1/oauth2/token",
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret),
                headers={"Accept": "application/json"},
            )
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("PayPal authentication failed: %s", e)
            raise PaymentGatewayError("No se pudo autenticar con PayPal")

        self._token = body["access_token"]
        ttl = int(body.get("expires_in", 0))
        self._token_expires_at = time.monotonic() + max(0, ttl - TOKEN_EXPIRY_MARGIN)
        return self._token

    def _post(self, path: str, payload: Dict, what: str) -> Dict:
        headers = {
            "Authorization": f"Bearer {self._access_token()}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        try:
            resp = self._http.post(f"{self.base_url}{path}", json=payload, headers=headers)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "PayPal %s failed with HTTP %s: %s",
                what,
                e.response.status_code,
                e.response.text[:500],
            )
            raise PaymentGatewayError(f"PayPal rechazó la operación ({what})")
        except (httpx.HTTPError, ValueError) as e:
            logger.error("PayPal %s failed: %s", what, e)
            raise PaymentGatewayError(f"Error al comunicarse con PayPal ({what})")

    def create_order(self, request_body: Dict) -> str:
        result = self._post("/v2/checkout/orders", request_body, "create")
        order_id = result.get("id")
        if not order_id:
            raise PaymentGatewayError("PayPal no devolvió un id de orden")
        return order_id

    def capture_order(self, order_id: str) -> Dict:
        return self._post(f"/v2/checkout/orders/{order_id}/capture", {}, "capture")

    def health_check(self) -> bool:
        return bool(self.client_id and self.client_secret)


def build_payment_gateway(kind: Optional[str] = None) -> PaymentGateway:
    kind = (kind or settings.PAYMENT_GATEWAY).lower()
    if kind == "paypal":
        return PayPalGateway()
    if kind == "mock":
        return MockPaymentGateway()
    raise ValueError(f"Unknown PAYMENT_GATEWAY {kind!r}")
