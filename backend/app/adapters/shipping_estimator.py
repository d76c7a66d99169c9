from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

import httpx

from app.adapters.http import ServiceClient
from app.config import settings
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ShippingEstimatorClient(ServiceClient):
    """
    Client for the shipping-cost prediction service.

    GET /predecir-envio?num_productos&num_items_total&tamano_total_ml&precio_unitario_prom
    -> {"costo_envio_estimado": number}
    """

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        super().__init__(base_url or settings.SHIPPING_SERVICE_URL, **kwargs)

    def estimate(self, features: Dict[str, object]) -> Optional[Decimal]:
        """Returns the estimated cost, or None when the service fails or answers garbage."""
        params = {k: str(v) for k, v in features.items()}
        try:
            data = self.get_json("/predecir-envio", params)
            raw = data["costo_envio_estimado"]
            if isinstance(raw, bool) or raw is None:
                raise ValueError(f"unexpected costo_envio_estimado={raw!r}")
            cost = Decimal(str(raw))
            if not cost.is_finite() or cost < 0:
                raise ValueError(f"unexpected costo_envio_estimado={raw!r}")
            return cost
        except httpx.HTTPStatusError as e:
            logger.error("Shipping estimator returned HTTP %s", e.response.status_code)
        except httpx.HTTPError as e:
            logger.error("Shipping estimator unreachable: %s", e)
        except (ValueError, KeyError, TypeError, InvalidOperation) as e:
            logger.error("Shipping estimator sent a malformed response: %s", e)
        return None
