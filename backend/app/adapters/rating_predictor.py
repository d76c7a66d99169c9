from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Optional

import httpx

from app.adapters.http import ServiceClient
from app.config import settings
from app.utils.logging import get_logger

logger = get_logger(__name__)


class RatingPredictorClient(ServiceClient):
    """
    Client for the star-rating prediction service.

    GET /predecir?sabor&empaque&precio&recomendacion&entrega -> {"redondeado": number}
    """

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        super().__init__(base_url or settings.RATING_SERVICE_URL, **kwargs)

    def predict(self, answers: Dict[str, object]) -> Optional[int]:
        params = {k: "" if v is None else str(v) for k, v in answers.items()}
        try:
            data = self.get_json("/predecir", params)
            value = data.get("redondeado")
            if value is None or isinstance(value, bool):
                logger.warning("Rating predictor response has no usable 'redondeado': %r", data)
                return None
            rating = Decimal(str(value))
            if not rating.is_finite():
                raise ValueError(f"non-finite redondeado={value!r}")
            return int(rating.quantize(Decimal(1), rounding=ROUND_HALF_UP))
        except httpx.HTTPError as e:
            logger.warning("Rating predictor failed: %s", e)
        except (ValueError, TypeError, AttributeError, InvalidOperation) as e:
            logger.warning("Rating predictor sent a malformed response: %s", e)
        return None
