"""
Randomization engine: draws supply and daily delta from normal distributions.
"""

import logging

from supply_economy.config import EconomyConfig
from supply_economy.reproducibility.deterministic_rng import DeterministicRNG

from .advancement import clamp_supply
from .economy_store.state import EconomyState

logger = logging.getLogger(__name__)


def round_half_even(value: float) -> int:
    # Python's round() on floats is banker's rounding
    return int(round(value))


class Randomizer:
    """
    Redraws supply and/or delta for every item of an economy.

    Supply ~ N((min_supply + max_supply) / 2, std_dev_supply), clamped to the
    item's bounds. Delta ~ N((min_delta + max_delta) / 2, std_dev_delta). Draws
    are independent per item and per call.
    """

    def __init__(self, config: EconomyConfig, rng: DeterministicRNG):
        self.config = config
        self.rng = rng

    def randomize(self, state: EconomyState, update_supply: bool, update_delta: bool) -> None:
        config = self.config
        for category, items in state.ledger.categories().items():
            for record in items.values():
                if update_supply:
                    drawn = round_half_even(self.rng.normal(config.mean_supply, config.std_dev_supply))
                    record.supply = clamp_supply(drawn, config, category)
                if update_delta:
                    record.daily_delta = round_half_even(
                        self.rng.normal(config.mean_delta, config.std_dev_delta)
                    )

        logger.info(
            "Randomized economy (supply=%s, delta=%s) for %d items",
            update_supply,
            update_delta,
            len(state.ledger),
        )
