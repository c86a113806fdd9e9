"""
Advancement engine: one simulated day of supply drift.
"""

import logging
from typing import Dict, Optional

from supply_economy.config import EconomyConfig
from supply_economy.models.item import ItemRecord

from .economy_store.state import EconomyState

logger = logging.getLogger(__name__)


def clamp_supply(value: int, config: EconomyConfig, category: Optional[int] = None) -> int:
    """Bound a supply value to [min_supply, ceiling of the category]."""
    return max(config.min_supply, min(config.supply_ceiling(category), value))


def apply_supply_change(
    record: ItemRecord, amount: int, config: EconomyConfig, category: Optional[int] = None
) -> int:
    """Add a signed amount to a record's supply, clamped. Returns the previous supply."""
    previous = record.supply
    record.supply = clamp_supply(record.supply + amount, config, category)
    return previous


def cap_supply(state: EconomyState, config: EconomyConfig) -> None:
    """Clamp every supply into its bounds without applying any delta."""
    for category, items in state.ledger.categories().items():
        for record in items.values():
            record.supply = clamp_supply(record.supply, config, category)


def advance_one_day(state: EconomyState, config: EconomyConfig) -> None:
    """
    supply += daily_delta for every item, clamped.

    Not idempotent: every call is a new day. New supplies are computed first and
    committed together, so a failure leaves the previous day intact.
    """
    updates: Dict[int, Dict[str, int]] = {}
    for category, items in state.ledger.categories().items():
        updates[category] = {
            item_id: clamp_supply(record.supply + record.daily_delta, config, category)
            for item_id, record in items.items()
        }

    for category, new_supplies in updates.items():
        items = state.ledger.categories()[category]
        for item_id, supply in new_supplies.items():
            items[item_id].supply = supply

    logger.debug("Advanced economy one day across %d items", len(state.ledger))
