from fastapi import APIRouter, Depends

from app.api.deps import get_shipping_service
from app.errors import EstimatorUnavailable, Internal, StoreError
from app.schemas.order_schema import ShippingQuoteIn
from app.services.pricing import PricingCalculator, ShippingService, round2
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["shipping"])


@router.post("/calcular", summary="Quote shipping for a list of items")
def calcular_costo_envio(
    payload: ShippingQuoteIn,
    shipping: ShippingService = Depends(get_shipping_service),
):
    try:
        breakdown = PricingCalculator().compute([it.to_line_item() for it in payload.items])
        quote = shipping.quote(breakdown)
    except StoreError:
        raise
    except Exception:
        logger.exception("Error en calcular costo de envío")
        raise Internal("Error interno al calcular el costo de envío")

    if not quote.available:
        raise EstimatorUnavailable("Error al calcular costo de envío")

    return {
        "success": True,
        "resumen": breakdown.features(),
        "calculo": {
            "subtotal": breakdown.subtotal,
            "costo_envio": quote.estimated_cost,
            "total": round2(breakdown.subtotal + quote.estimated_cost),
        },
    }
