"""
FastAPI dependencies: the authenticated user and the services, wired from
one set of long-lived adapters. Tests swap any of these through
``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.adapters.media_storage import LocalMediaStorage
from app.adapters.mock_payment import PaymentGateway
from app.adapters.paypal import build_payment_gateway
from app.adapters.rating_predictor import RatingPredictorClient
from app.adapters.recommender import RecommenderClient
from app.adapters.shipping_estimator import ShippingEstimatorClient
from app.db import get_db
from app.errors import Unauthorized
from app.services.catalogue_service import CatalogueService
from app.services.order_service import OrderService
from app.services.pricing import ShippingService
from app.services.review_service import ReviewService


def get_current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> int:
    """The user identity is established upstream and forwarded in X-User-Id."""
    try:
        user_id = int(x_user_id)
    except (TypeError, ValueError):
        raise Unauthorized()
    if user_id <= 0:
        raise Unauthorized()
    return user_id


@lru_cache()
def get_payment_gateway() -> PaymentGateway:
    return build_payment_gateway()


@lru_cache()
def get_shipping_estimator() -> ShippingEstimatorClient:
    return ShippingEstimatorClient()


@lru_cache()
def get_rating_predictor() -> RatingPredictorClient:
    return RatingPredictorClient()


@lru_cache()
def get_recommender() -> RecommenderClient:
    return RecommenderClient()


@lru_cache()
def get_media_storage() -> LocalMediaStorage:
    return LocalMediaStorage()


def get_shipping_service(
    estimator: ShippingEstimatorClient = Depends(get_shipping_estimator),
) -> ShippingService:
    return ShippingService(estimator)


def get_order_service(
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    shipping: ShippingService = Depends(get_shipping_service),
) -> OrderService:
    return OrderService(db, gateway, shipping)


def get_review_service(
    db: Session = Depends(get_db),
    predictor: RatingPredictorClient = Depends(get_rating_predictor),
) -> ReviewService:
    return ReviewService(db, predictor)


def get_catalogue_service(
    db: Session = Depends(get_db),
    recommender: RecommenderClient = Depends(get_recommender),
) -> CatalogueService:
    return CatalogueService(db, recommender)
