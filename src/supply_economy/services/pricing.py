"""
Pricing engine: sale price from list price and current supply.

Composite (artisan) goods are priced from their ingredient:

    modifier = composite_list_price / ingredient_list_price
    price    = floor(price(ingredient) * modifier)

so a jar that sells for 2.5x its raw fruit keeps that ratio while the fruit's
supply moves.
"""

import logging
import math
from typing import Callable, Optional, Protocol

from supply_economy.config import EconomyConfig
from supply_economy.models.item import CompositeKind, ItemRef

from .economy_store.state import EconomyState

logger = logging.getLogger(__name__)


class PriceCurve(Protocol):
    def __call__(self, base_price: int, supply: int) -> int:
        ...


class LinearPriceCurve:
    """
    Multiplier falls linearly from max_percentage at zero supply to
    min_percentage at max_supply; supply beyond max_supply is treated as max.
    """

    def __init__(self, config: EconomyConfig):
        self.max_supply = config.max_supply
        self.min_percentage = config.min_percentage
        self.max_percentage = config.max_percentage

    def multiplier(self, supply: int) -> float:
        bounded = max(0, min(supply, self.max_supply))
        ratio = 1 - bounded / self.max_supply
        return ratio * (self.max_percentage - self.min_percentage) + self.min_percentage

    def __call__(self, base_price: int, supply: int) -> int:
        return int(base_price * self.multiplier(supply))


CURVES = {"linear": LinearPriceCurve}


def build_price_curve(config: EconomyConfig) -> PriceCurve:
    return CURVES[config.price_curve](config)


class PricingEngine:
    """
    Pure price derivation over the current EconomyState.

    state_provider returns the live state or None while none is loaded;
    resolve_item turns an ingredient id into an ItemRef (None if unknown).
    """

    def __init__(
        self,
        state_provider: Callable[[], Optional[EconomyState]],
        resolve_item: Callable[[str], Optional[ItemRef]],
        curve: PriceCurve,
    ):
        self._state_provider = state_provider
        self._resolve_item = resolve_item
        self._curve = curve

    def price(self, item: ItemRef, base_price: int) -> int:
        state = self._state_provider()
        if state is None:
            logger.error(f"Economy not generated to determine item model for {item.label}")
            return base_price

        if isinstance(item.kind, CompositeKind):
            price = self._composite_price(item, base_price)
            if price is not None:
                return price

        record = state.get_item(item.item_id)
        if record is None:
            logger.debug(f"Could not find item model for {item.label}")
            return base_price

        adjusted = self._curve(base_price, record.supply)
        logger.debug(f"Altered {item.label} from {base_price} to {adjusted}")
        return adjusted

    def resolve_ingredient(self, item: ItemRef) -> Optional[ItemRef]:
        """Ingredient of a composite good, or None."""
        if not isinstance(item.kind, CompositeKind) or not item.kind.ingredient_id:
            return None
        return self._resolve_item(item.kind.ingredient_id)

    def _composite_price(self, item: ItemRef, base_price: int) -> Optional[int]:
        ingredient = self.resolve_ingredient(item)
        if ingredient is None or ingredient.list_price < 1:
            return None

        ingredient_price = self.price(ingredient, ingredient.list_price)
        modifier = base_price / ingredient.list_price
        adjusted = math.floor(ingredient_price * modifier)
        logger.debug(
            f"Altered composite {item.label} from {base_price} to {adjusted} "
            f"via {ingredient.label} ({ingredient.list_price} -> {ingredient_price})"
        )
        return adjusted
