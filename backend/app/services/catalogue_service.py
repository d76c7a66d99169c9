from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.adapters.recommender import RecommenderClient
from app.config import settings
from app.errors import InvalidInput, NotFound
from app.models.product import Product
from app.models.promotion import Promotion
from app.repositories.product_repo import ProductRepository
from app.repositories.promotion_repo import PromotionRepository
from app.services.pricing import to_decimal
from app.utils.logging import get_logger
from app.utils.transactions import unit_of_work

logger = get_logger(__name__)


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Promotion dates are stored as naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _optional_int(value, field: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} debe ser un entero")


class CatalogueService:
    def __init__(self, db: Session, recommender: Optional[RecommenderClient] = None):
        self.db = db
        self.recommender = recommender
        self.products = ProductRepository(db)
        self.promotions = PromotionRepository(db)

    def get(self, product_id: int, with_reviews: bool = False) -> Product:
        p = self.products.get(product_id, with_reviews=with_reviews)
        if not p:
            raise NotFound("Producto no encontrado.")
        return p

    def search(self, q: Optional[str], page: int, size: int) -> Tuple[List[Product], int]:
        return self.products.list(q=q, page=page, size=size)

    def list_admin(self) -> List[Product]:
        return self.products.list_newest_first()

    def low_stock(self) -> List[Product]:
        return self.products.list_low_stock(settings.LOW_STOCK_THRESHOLD)

    def recommended(self, product_id: int) -> List[Product]:
        ids = self.recommender.recommend(product_id)
        if not ids:
            return []
        return self.products.list_newest_first(ids)

    def create(self, fields: Dict, image_urls: Iterable[str] = ()) -> Product:
        name = (fields.get("name") or "").strip()
        if not name:
            raise InvalidInput("name es requerido")
        price = fields.get("price")
        with unit_of_work(self.db, "product create"):
            p = self.products.create(
                image_urls=image_urls,
                name=name,
                description=fields.get("description") or "",
                price=to_decimal(price, "precio") if price not in (None, "") else 0,
                flavor=fields.get("flavor"),
                size_ml=_optional_int(fields.get("size_ml"), "tamano") or 0,
                stock=_optional_int(fields.get("stock"), "stock") or 0,
            )
        logger.info("Product %s created", p.id)
        return self.get(p.id)

    def update(
        self,
        product_id: int,
        fields: Dict,
        image_urls: Iterable[str] = (),
        remove_old_images: bool = False,
    ) -> Product:
        p = self.get(product_id)
        price = fields.get("price")
        with unit_of_work(self.db, f"product {product_id} update"):
            self.products.update(
                p,
                name=fields.get("name") or None,
                description=fields.get("description"),
                price=to_decimal(price, "precio") if price not in (None, "") else None,
                flavor=fields.get("flavor"),
                size_ml=_optional_int(fields.get("size_ml"), "tamano"),
                stock=_optional_int(fields.get("stock"), "stock"),
            )
            image_urls = list(image_urls)
            if remove_old_images or image_urls:
                self.products.replace_images(p, image_urls, keep_old=not remove_old_images)
        self.db.expire_all()
        return self.get(product_id)

    def delete(self, product_id: int):
        p = self.get(product_id)
        with unit_of_work(self.db, f"product {product_id} delete"):
            self.products.delete(p)
        logger.info("Product %s deleted", product_id)

    def create_promotion(self, fields: Dict) -> Promotion:
        product_id = fields["product_id"]
        fields = {
            **fields,
            "starts_at": _naive_utc(fields.get("starts_at")),
            "ends_at": _naive_utc(fields.get("ends_at")),
        }
        if not self.products.get(product_id):
            raise NotFound("Producto no encontrado.")
        with unit_of_work(self.db, "promotion create"):
            promo = self.promotions.create(**fields)
        self.db.refresh(promo)
        return promo

    def split_by_discount(self):
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        return self.promotions.split_products_by_promotion(now)
