import json

import httpx
import pytest

from app.adapters.mock_payment import MockPaymentGateway
from app.adapters.paypal import PayPalGateway, build_payment_gateway
from app.errors import PaymentGatewayError


class FakePayPal:
    def __init__(self, capture_status=201):
        self.requests = []
        self.capture_status = capture_status

    def __call__(self, request):
        self.requests.append(request)
        path = request.url.path
        if path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "tok-1", "expires_in": 3600})
        if path == "/v2/checkout/orders":
            return httpx.Response(201, json={"id": "PP-123", "status": "CREATED"})
        if path.endswith("/capture"):
            if self.capture_status >= 400:
                return httpx.Response(self.capture_status, json={"name": "UNPROCESSABLE_ENTITY"})
            return httpx.Response(
                self.capture_status,
                json={"id": "PP-123", "status": "COMPLETED", "purchase_units": []},
            )
        return httpx.Response(404)


def _gateway(fake):
    http = httpx.Client(transport=httpx.MockTransport(fake))
    return PayPalGateway(client_id="id", client_secret="secret", base_url="https://pp.test", client=http)


def test_create_order_posts_body_with_bearer_token():
    fake = FakePayPal()
    gw = _gateway(fake)
    body = {"intent": "CAPTURE", "purchase_units": [{"amount": {"currency_code": "USD", "value": "10.00"}}]}

    assert gw.create_order(body) == "PP-123"

    token_req, create_req = fake.requests
    assert token_req.url.path == "/v1/oauth2/token"
    assert token_req.headers["Authorization"].startswith("Basic ")
    assert create_req.headers["Authorization"] == "Bearer tok-1"
    assert json.loads(create_req.content) == body


def test_token_is_reused_between_calls():
    fake = FakePayPal()
    gw = _gateway(fake)
    gw.create_order({"intent": "CAPTURE"})
    gw.capture_order("PP-123")

    paths = [r.url.path for r in fake.requests]
    assert paths.count("/v1/oauth2/token") == 1
    assert paths[-1] == "/v2/checkout/orders/PP-123/capture"


def test_rejected_capture_raises_gateway_error():
    gw = _gateway(FakePayPal(capture_status=422))
    with pytest.raises(PaymentGatewayError):
        gw.capture_order("PP-123")


def test_failed_authentication_raises_gateway_error():
    gw = _gateway(lambda request: httpx.Response(401, json={"error": "invalid_client"}))
    with pytest.raises(PaymentGatewayError):
        gw.create_order({})


def test_build_payment_gateway():
    assert isinstance(build_payment_gateway("mock"), MockPaymentGateway)
    assert isinstance(build_payment_gateway("PayPal"), PayPalGateway)
    with pytest.raises(ValueError):
        build_payment_gateway("stripe")


def test_mock_gateway_captures_once():
    gw = MockPaymentGateway()
    order_id = gw.create_order(
        {"purchase_units": [{"amount": {"currency_code": "USD", "value": "42.00"}}]}
    )
    result = gw.capture_order(order_id)
    capture = result["purchase_units"][0]["payments"]["captures"][0]
    assert capture["amount"]["value"] == "42.00"
    with pytest.raises(PaymentGatewayError):
        gw.capture_order(order_id)
    with pytest.raises(PaymentGatewayError):
        gw.capture_order("MOCK-UNKNOWN")
