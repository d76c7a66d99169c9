from decimal import Decimal

import httpx
import pytest

from app.adapters.rating_predictor import RatingPredictorClient
from app.adapters.recommender import RecommenderClient
from app.adapters.shipping_estimator import ShippingEstimatorClient
from app.errors import EstimatorUnavailable

FEATURES = {
    "num_productos": 2,
    "num_items_total": 3,
    "tamano_total_ml": 2250,
    "precio_unitario_prom": Decimal("120.50"),
}


def _client(cls, handler, attempts=1):
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return cls(base_url="http://svc.test", retry_attempts=attempts, client=http)


def test_estimate_sends_features_as_query_params():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"costo_envio_estimado": 89.5})

    est = _client(ShippingEstimatorClient, handler)
    assert est.estimate(FEATURES) == Decimal("89.5")
    assert seen["path"] == "/predecir-envio"
    assert seen["params"] == {
        "num_productos": "2",
        "num_items_total": "3",
        "tamano_total_ml": "2250",
        "precio_unitario_prom": "120.50",
    }


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"otra_cosa": 1}),
        httpx.Response(200, json={"costo_envio_estimado": "caro"}),
        httpx.Response(200, json={"costo_envio_estimado": -3}),
        httpx.Response(200, json={"costo_envio_estimado": None}),
    ],
)
def test_estimate_failures_return_none(response):
    est = _client(ShippingEstimatorClient, lambda request: response)
    assert est.estimate(FEATURES) is None


def test_estimate_retries_transport_errors_then_gives_up():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("refused", request=request)

    est = _client(ShippingEstimatorClient, handler, attempts=2)
    assert est.estimate(FEATURES) is None
    assert len(calls) == 2


def test_estimate_does_not_retry_http_errors():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    est = _client(ShippingEstimatorClient, handler, attempts=3)
    assert est.estimate(FEATURES) is None
    assert len(calls) == 1


def test_rating_prediction_rounds_the_answer():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"redondeado": 4.4})

    rp = _client(RatingPredictorClient, handler)
    answers = {"sabor": "5", "empaque": "4", "precio": "3", "recomendacion": "si", "entrega": None}
    assert rp.predict(answers) == 4
    assert seen["params"]["recomendacion"] == "si"
    assert seen["params"]["entrega"] == ""


def test_rating_prediction_timeout_returns_none():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    rp = _client(RatingPredictorClient, handler)
    assert rp.predict({"sabor": "5"}) is None


def test_rating_prediction_without_value_returns_none():
    rp = _client(RatingPredictorClient, lambda request: httpx.Response(200, json={}))
    assert rp.predict({"sabor": "5"}) is None


@pytest.mark.parametrize("body", [b'{"redondeado": Infinity}', b'{"redondeado": "1e999"}', b'{"redondeado": NaN}'])
def test_rating_prediction_non_finite_returns_none(body):
    rp = _client(RatingPredictorClient, lambda request: httpx.Response(200, content=body))
    assert rp.predict({"sabor": "5"}) is None


@pytest.mark.parametrize("value, expected", [(2.5, 3), (3.5, 4), (4.49, 4), ("1.5", 2)])
def test_rating_prediction_rounds_half_up(value, expected):
    rp = _client(RatingPredictorClient, lambda request: httpx.Response(200, json={"redondeado": value}))
    assert rp.predict({"sabor": "5"}) == expected


def test_recommendations_parse_ids():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"ids_recomendados": [3, "5", 8]})

    rec = _client(RecommenderClient, handler)
    assert rec.recommend(12) == [3, 5, 8]
    assert seen["params"] == {"ids": "12"}


def test_recommendation_failure_raises():
    rec = _client(RecommenderClient, lambda request: httpx.Response(502))
    with pytest.raises(EstimatorUnavailable):
        rec.recommend(1)
