from datetime import datetime
from typing import List, Tuple

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from app.models.product import Product
from app.models.promotion import Promotion


def _active_at(now: datetime):
    return and_(
        Promotion.active == True,  # noqa: E712
        Promotion.starts_at <= now,
        or_(Promotion.ends_at.is_(None), Promotion.ends_at >= now),
    )


class PromotionRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields) -> Promotion:
        promo = Promotion(**fields)
        self.db.add(promo)
        self.db.flush()
        return promo

    def split_products_by_promotion(
        self, now: datetime
    ) -> Tuple[List[Tuple[Product, Promotion]], List[Product]]:
        """
        Returns (products with their first active promotion, products without one).
        """
        active = _active_at(now)
        discounted = (
            self.db.query(Product)
            .filter(Product.promotions.any(active))
            .order_by(Product.id)
            .all()
        )
        with_promo = []
        for p in discounted:
            promo = (
                self.db.query(Promotion)
                .filter(Promotion.product_id == p.id, active)
                .order_by(Promotion.id)
                .first()
            )
            with_promo.append((p, promo))

        without = (
            self.db.query(Product)
            .filter(~Product.promotions.any(active))
            .order_by(Product.id)
            .all()
        )
        return with_promo, without
