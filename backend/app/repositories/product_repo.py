from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.orm import Session, selectinload

from app.models.product import Product, ProductImage
from app.models.review import Review


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int, with_reviews: bool = False) -> Optional[Product]:
        qry = self.db.query(Product).options(selectinload(Product.images))
        if with_reviews:
            qry = qry.options(selectinload(Product.reviews).selectinload(Review.images))
        return qry.filter(Product.id == product_id).first()

    def list(
        self, q: Optional[str] = None, page: int = 1, size: int = 20
    ) -> Tuple[List[Product], int]:
        query = self.db.query(Product).filter(Product.active == True)  # noqa: E712
        if q:
            like = f"%{q}%"
            query = query.filter(
                (Product.name.ilike(like)) | (Product.description.ilike(like))
            )
        total = query.with_entities(func.count()).scalar() or 0
        items = (
            query.options(selectinload(Product.images))
            .order_by(Product.name)
            .offset((page - 1) * size)
            .limit(size)
            .all()
        )
        return items, total

    def list_newest_first(self, ids: Optional[Iterable[int]] = None) -> List[Product]:
        query = self.db.query(Product).options(
            selectinload(Product.images), selectinload(Product.reviews)
        )
        if ids is not None:
            query = query.filter(Product.id.in_(list(ids)))
        return query.order_by(Product.created_at.desc(), Product.id.desc()).all()

    def list_low_stock(self, threshold: int) -> List[Product]:
        return (
            self.db.query(Product)
            .options(selectinload(Product.images))
            .filter(Product.stock <= threshold)
            .order_by(Product.stock.asc(), Product.id)
            .all()
        )

    def create(self, image_urls: Iterable[str] = (), **fields) -> Product:
        p = Product(**fields)
        for url in image_urls:
            p.images.append(ProductImage(image_url=url))
        self.db.add(p)
        self.db.flush()
        return p

    def update(self, product: Product, **fields) -> Product:
        for k, v in fields.items():
            if v is not None:
                setattr(product, k, v)
        self.db.flush()
        return product

    def replace_images(self, product: Product, image_urls: Iterable[str], keep_old: bool = True):
        if not keep_old:
            product.images.clear()
        for url in image_urls:
            product.images.append(ProductImage(image_url=url))
        self.db.flush()

    def delete(self, product: Product):
        self.db.delete(product)
        self.db.flush()

    def decrement_stock(self, product_id: int, qty: int) -> bool:
        """
        Take ``qty`` units off the product's stock in a single conditional UPDATE.
        Returns False (and changes nothing) when fewer than ``qty`` units remain.
        """
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= qty)
            .values(stock=Product.stock - qty)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
