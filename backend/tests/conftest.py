import os
import tempfile
from decimal import Decimal

_TMP = tempfile.mkdtemp(prefix="vinateria-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["PAYMENT_GATEWAY"] = "mock"
os.environ["MEDIA_DIR"] = os.path.join(_TMP, "media")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.adapters.media_storage import LocalMediaStorage  # noqa: E402
from app.adapters.mock_payment import MockPaymentGateway  # noqa: E402
from app.api import deps  # noqa: E402
from app.db import SessionLocal, init_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.cart_item import CartItem  # noqa: E402
from app.models.order import Order, OrderLine, OrderStatus  # noqa: E402
from app.models.product import Product, ProductImage  # noqa: E402


class FakeEstimator:
    def __init__(self, cost=Decimal("89.50")):
        self.cost = cost
        self.calls = []

    def estimate(self, features):
        self.calls.append(features)
        return self.cost


class FakeRatingPredictor:
    def __init__(self, rating=None):
        self.rating = rating
        self.calls = []

    def predict(self, answers):
        self.calls.append(answers)
        return self.rating


class FakeRecommender:
    def __init__(self, ids=()):
        self.ids = list(ids)

    def recommend(self, product_id):
        return self.ids


@pytest.fixture(autouse=True)
def reset_db():
    init_db(reset=True)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def estimator():
    return FakeEstimator()


@pytest.fixture
def gateway():
    return MockPaymentGateway()


@pytest.fixture
def predictor():
    return FakeRatingPredictor(rating=4)


@pytest.fixture
def recommender():
    return FakeRecommender()


@pytest.fixture
def storage(tmp_path):
    return LocalMediaStorage(root=str(tmp_path / "media"), base_url="/media")


@pytest.fixture
def client(estimator, gateway, predictor, recommender, storage):
    app.dependency_overrides[deps.get_shipping_estimator] = lambda: estimator
    app.dependency_overrides[deps.get_payment_gateway] = lambda: gateway
    app.dependency_overrides[deps.get_rating_predictor] = lambda: predictor
    app.dependency_overrides[deps.get_recommender] = lambda: recommender
    app.dependency_overrides[deps.get_media_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_product(db):
    def _make(name="Malbec", price="250.00", stock=10, size_ml=750, image=None):
        p = Product(name=name, price=Decimal(price), stock=stock, size_ml=size_ml)
        if image:
            p.images.append(ProductImage(image_url=image))
        db.add(p)
        db.commit()
        db.refresh(p)
        return p

    return _make


@pytest.fixture
def fill_cart(db):
    def _fill(user_id, *pairs):
        for product, qty in pairs:
            db.add(CartItem(user_id=user_id, product_id=product.id, quantity=qty))
        db.commit()

    return _fill


@pytest.fixture
def make_order(db):
    def _make(user_id, products, status=OrderStatus.RECEIVED_BY_CUSTOMER.value):
        order = Order(user_id=user_id, status=status, total=Decimal("0"))
        for p in products:
            order.lines.append(OrderLine(product_id=p.id, quantity=1, unit_price=p.price))
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return _make
