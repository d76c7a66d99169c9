from typing import Iterable, Optional, Set

from sqlalchemy.orm import Session, selectinload

from app.models.review import Review, ReviewImage


class ReviewRepository:
    def __init__(self, db: Session):
        self.db = db

    def reviewed_product_ids(self, user_id: int) -> Set[int]:
        rows = self.db.query(Review.product_id).filter(Review.user_id == user_id).all()
        return {r[0] for r in rows}

    def find(self, user_id: int, product_id: int) -> Optional[Review]:
        return (
            self.db.query(Review)
            .filter(Review.user_id == user_id, Review.product_id == product_id)
            .first()
        )

    def get(self, review_id: int) -> Optional[Review]:
        return (
            self.db.query(Review)
            .options(selectinload(Review.images))
            .filter(Review.id == review_id)
            .first()
        )

    def add(self, review: Review, image_urls: Iterable[str] = ()) -> Review:
        self.db.add(review)
        self.db.flush()
        for url in image_urls:
            self.db.add(ReviewImage(review_id=review.id, url=url))
        self.db.flush()
        return review
