from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Optional, Sequence

from app.adapters.shipping_estimator import ShippingEstimatorClient
from app.config import settings
from app.errors import InvalidInput
from app.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")


def round2(value) -> Decimal:
    """Round half-up to two decimal places."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value, field: str = "value") -> Decimal:
    if isinstance(value, bool) or value is None:
        raise InvalidInput(f"{field} debe ser numérico")
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidInput(f"{field} debe ser numérico")
    if not d.is_finite():
        raise InvalidInput(f"{field} debe ser numérico")
    return d


@dataclass(frozen=True)
class CartLineItem:
    product_id: int
    name: str
    unit_price: Decimal
    quantity: int
    # DEFAULT_BOTTLE_ML (750) when the client does not say
    volume_ml: Optional[int] = None


@dataclass(frozen=True)
class PricingBreakdown:
    item_count: int
    total_units: int
    total_volume_ml: int
    average_unit_price: Decimal
    subtotal: Decimal

    def features(self) -> Dict[str, object]:
        """Query parameters understood by the cost and rating predictors."""
        return {
            "num_productos": self.item_count,
            "num_items_total": self.total_units,
            "tamano_total_ml": self.total_volume_ml,
            "precio_unitario_prom": self.average_unit_price,
        }


@dataclass(frozen=True)
class ShippingQuote:
    # None means the estimator could not produce a figure
    estimated_cost: Optional[Decimal]

    @property
    def available(self) -> bool:
        return self.estimated_cost is not None


class PricingCalculator:
    """Derives the subtotal and shipment features of a cart. Side-effect free."""

    def compute(self, items: Sequence[CartLineItem]) -> PricingBreakdown:
        if not items:
            raise InvalidInput("Se requiere un array de items")

        subtotal = Decimal("0")
        units = 0
        volume = 0
        for it in items:
            price = to_decimal(it.unit_price, "price")
            if price < 0:
                raise InvalidInput("price no puede ser negativo")
            qty = it.quantity
            if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
                raise InvalidInput("quantity debe ser un entero positivo")
            size = settings.DEFAULT_BOTTLE_ML if it.volume_ml is None else it.volume_ml
            if isinstance(size, bool) or not isinstance(size, int) or size < 0:
                raise InvalidInput("size_ml debe ser un entero no negativo")
            subtotal += price * qty
            units += qty
            volume += size * qty

        subtotal = round2(subtotal)
        return PricingBreakdown(
            item_count=len(items),
            total_units=units,
            total_volume_ml=volume,
            average_unit_price=round2(subtotal / units),
            subtotal=subtotal,
        )


class ShippingService:
    """
    Shipping cost for a priced cart. Shared by order creation and the
    standalone quote endpoint.
    """

    def __init__(
        self,
        estimator: ShippingEstimatorClient,
        free_shipping_threshold: Optional[Decimal] = None,
    ):
        self.estimator = estimator
        if free_shipping_threshold is None:
            free_shipping_threshold = settings.FREE_SHIPPING_THRESHOLD
        self.free_shipping_threshold = Decimal(free_shipping_threshold)

    def quote(self, breakdown: PricingBreakdown) -> ShippingQuote:
        if breakdown.subtotal >= self.free_shipping_threshold:
            return ShippingQuote(estimated_cost=round2(0))
        cost = self.estimator.estimate(breakdown.features())
        if cost is None:
            logger.error("No shipping estimate for features %s", breakdown.features())
            return ShippingQuote(estimated_cost=None)
        return ShippingQuote(estimated_cost=round2(cost))
