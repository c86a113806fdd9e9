"""
EconomyState: the category ledger of one session plus its derived indices.

Serialized form (used for persistence and for Snapshot messages):

    {
        "version": 12,
        "categories": {
            "-75": {"24": {"item_id": "24", "supply": 480, "daily_delta": -3}},
            ...
        }
    }

Indices (seed -> crop, crop -> seed, fish) and the category alias map are not
serialized; they are rebuilt from the local catalog on every load or receive.
"""

import logging
from typing import Any, Dict, Optional

from supply_economy.models.catalog import Catalog, FishEntry, SeedEntry
from supply_economy.models.item import ItemRecord

from .ledger import CategoryLedger

logger = logging.getLogger(__name__)


class EconomyState:
    """Per-session economic state, authoritative or replicated."""

    def __init__(self, ledger: Optional[CategoryLedger] = None, version: int = 0):
        self.ledger = ledger or CategoryLedger()
        self.version = version
        self._seed_to_item: Dict[str, str] = {}
        self._item_to_seed: Dict[str, SeedEntry] = {}
        self._item_to_fish: Dict[str, FishEntry] = {}

    @classmethod
    def generate_blank(cls, catalog: Catalog, valid_categories) -> "EconomyState":
        """One zeroed record per valid, non-ignored catalog item."""
        categories: Dict[int, Dict[str, ItemRecord]] = {}
        for entry in catalog.valid_entries(valid_categories):
            categories.setdefault(entry.category, {})[entry.item_id] = ItemRecord(entry.item_id)
        state = cls(CategoryLedger(categories))
        logger.debug(
            "Generated blank economy: %d items in %d categories", len(state.ledger), len(categories)
        )
        return state

    # Versioning

    def bump_version(self) -> int:
        self.version += 1
        return self.version

    # Whole-state helpers

    def has_same_items(self, other: "EconomyState") -> bool:
        return self.ledger.item_ids() == other.ledger.item_ids()

    def get_item(self, item_id: str) -> Optional[ItemRecord]:
        return self.ledger.lookup(item_id)

    # Derived indices

    def rebuild_indices(self, catalog: Catalog) -> None:
        """Rebuild alias map and seed/fish lookups against the local catalog."""
        self.ledger.consolidate(catalog.category_names)
        known = self.ledger.item_ids()
        self._seed_to_item = {}
        self._item_to_seed = {}
        for seed in catalog.seeds:
            if seed.crop_item_id not in known:
                continue
            self._seed_to_item[seed.seed_id] = seed.crop_item_id
            self._item_to_seed.setdefault(seed.crop_item_id, seed)
        self._item_to_fish = {fish.item_id: fish for fish in catalog.fish if fish.item_id in known}

    def get_item_from_seed(self, seed_id: str) -> Optional[ItemRecord]:
        item_id = self._seed_to_item.get(str(seed_id))
        return self.ledger.lookup(item_id) if item_id else None

    def get_seed_for_item(self, item_id: str) -> Optional[SeedEntry]:
        return self._item_to_seed.get(item_id)

    def get_fish_for_item(self, item_id: str) -> Optional[FishEntry]:
        return self._item_to_fish.get(item_id)

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "categories": {
                str(category): {item_id: record.to_dict() for item_id, record in items.items()}
                for category, items in self.ledger.categories().items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EconomyState":
        categories: Dict[int, Dict[str, ItemRecord]] = {}
        for category, items in (data.get("categories") or {}).items():
            categories[int(category)] = {
                str(item_id): ItemRecord.from_dict(item) for item_id, item in items.items()
            }
        return cls(CategoryLedger(categories), version=int(data.get("version", 0)))

    def __repr__(self) -> str:
        return f"EconomyState(items={len(self.ledger)}, version={self.version})"
