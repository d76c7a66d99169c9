from typing import List, Optional

import httpx

from app.adapters.http import ServiceClient
from app.config import settings
from app.errors import EstimatorUnavailable
from app.utils.logging import get_logger

logger = get_logger(__name__)


class RecommenderClient(ServiceClient):
    """GET /recomendar?ids=<id> -> {"ids_recomendados": [id, ...]}"""

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        super().__init__(base_url or settings.RECOMMENDATION_SERVICE_URL, **kwargs)

    def recommend(self, product_id: int) -> List[int]:
        try:
            data = self.get_json("/recomendar", {"ids": str(product_id)})
            ids = data.get("ids_recomendados") or []
            return [int(i) for i in ids]
        except httpx.HTTPError as e:
            logger.warning("Recommendation service failed for product %s: %s", product_id, e)
            raise EstimatorUnavailable("Error al llamar al servicio de recomendaciones")
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Recommendation service sent a malformed response: %s", e)
            raise EstimatorUnavailable("Error al llamar al servicio de recomendaciones")
