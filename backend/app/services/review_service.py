from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.adapters.rating_predictor import RatingPredictorClient
from app.config import settings
from app.errors import DuplicateReview, InvalidInput, NotEligibleForReview, NotFound
from app.models.review import Review
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.utils.logging import get_logger
from app.utils.transactions import unit_of_work

logger = get_logger(__name__)

# Survey answers forwarded to the rating predictor, in its parameter names.
SURVEY_FIELDS = ("sabor", "empaque", "precio", "recomendacion", "entrega")


class ReviewService:
    def __init__(self, db: Session, predictor: Optional[RatingPredictorClient] = None):
        self.db = db
        self.predictor = predictor
        self.reviews = ReviewRepository(db)
        self.orders = OrderRepository(db)
        self.products = ProductRepository(db)

    def eligible_products(self, user_id: int) -> List[Dict]:
        """
        Products from the user's received orders that the user has not reviewed,
        one entry per product in order of first appearance.
        """
        reviewed = self.reviews.reviewed_product_ids(user_id)
        eligible: Dict[int, Dict] = {}
        for order in self.orders.received_orders(user_id):
            for line in order.lines:
                prod = line.product
                if prod is None or prod.id in reviewed or prod.id in eligible:
                    continue
                eligible[prod.id] = {
                    "productoId": prod.id,
                    "name": prod.name,
                    "imageUrl": prod.images[0].image_url if prod.images else None,
                }
        return list(eligible.values())

    def _has_received(self, user_id: int, product_id: int) -> bool:
        return any(
            line.product_id == product_id
            for order in self.orders.received_orders(user_id)
            for line in order.lines
        )

    def check_can_review(self, user_id: int, product_id: int):
        if not self.products.get(product_id):
            raise NotFound("Producto no encontrado.")
        if self.reviews.find(user_id, product_id):
            raise DuplicateReview()
        if not self._has_received(user_id, product_id):
            raise NotEligibleForReview()

    def predict_rating(self, answers: Dict[str, object]) -> int:
        rating = None
        if self.predictor is not None:
            rating = self.predictor.predict({k: answers.get(k) for k in SURVEY_FIELDS})
        if rating is None:
            logger.info("Using default rating %s", settings.DEFAULT_REVIEW_RATING)
            return settings.DEFAULT_REVIEW_RATING
        return min(5, max(1, rating))

    def submit(
        self,
        user_id: int,
        product_id: int,
        comment: str,
        answers: Dict[str, object],
        image_urls: Iterable[str] = (),
        rating: Optional[int] = None,
    ) -> Review:
        """
        Record a review. Callers that store uploads should run check_can_review
        first so nothing is written for a rejected review.
        """
        self.check_can_review(user_id, product_id)

        if rating is not None:
            if not 1 <= rating <= 5:
                raise InvalidInput("rating debe estar entre 1 y 5")
        else:
            rating = self.predict_rating(answers)

        try:
            with unit_of_work(self.db, "review create"):
                review = self.reviews.add(
                    Review(user_id=user_id, product_id=product_id, comment=comment or "", rating=rating),
                    image_urls=image_urls,
                )
        except IntegrityError:
            # lost the race against another submission for the same product
            raise DuplicateReview()

        logger.info("Review %s by user %s for product %s (rating %s)", review.id, user_id, product_id, rating)
        return self.reviews.get(review.id)
