"""
Category ledger: category id -> item id -> ItemRecord, plus the alias map that
merges categories sharing a display name.
"""

import logging
from typing import Dict, Iterator, List, Mapping, Optional, Set

from supply_economy.models.item import ItemRecord

logger = logging.getLogger(__name__)

CategoryAliasMap = Dict[int, List[int]]


def build_alias_map(display_names: Mapping[int, str]) -> CategoryAliasMap:
    """
    Group categories with identical display names.

    The first category met in iteration order becomes the primary; the rest are
    its aliases, in order. Categories with a unique name are left out.
    """
    groups: Dict[str, List[int]] = {}
    for category, name in display_names.items():
        groups.setdefault(name, []).append(category)

    alias_map: CategoryAliasMap = {}
    for categories in groups.values():
        if len(categories) > 1:
            alias_map.setdefault(categories[0], categories[1:])
    return alias_map


class CategoryLedger:
    """
    Owns every ItemRecord of an economy, grouped by category.

    Categories are disjoint: an item id appears under exactly one category.
    """

    def __init__(self, categories: Optional[Dict[int, Dict[str, ItemRecord]]] = None):
        self._categories: Dict[int, Dict[str, ItemRecord]] = categories or {}
        self._aliases: CategoryAliasMap = {}

    # Query interface

    def get(self, category: int) -> List[ItemRecord]:
        """Items of one category; empty when the category is unknown."""
        return list(self._categories.get(category, {}).values())

    def get_expanded(self, category: int) -> List[ItemRecord]:
        """Items of a primary category followed by the items of its aliases."""
        items = self.get(category)
        for alias in self._aliases.get(category, []):
            items.extend(self.get(alias))
        return items

    def lookup(self, item_id: str) -> Optional[ItemRecord]:
        """Find an item's record in any category; None when absent."""
        for items in self._categories.values():
            record = items.get(item_id)
            if record is not None:
                return record
        return None

    def category_of(self, item_id: str) -> Optional[int]:
        for category, items in self._categories.items():
            if item_id in items:
                return category
        return None

    def categories(self) -> Dict[int, Dict[str, ItemRecord]]:
        """Underlying mapping (live, not a copy)."""
        return self._categories

    def non_empty_categories(self) -> List[int]:
        return [category for category, items in self._categories.items() if items]

    def item_ids(self) -> Set[str]:
        return {item_id for items in self._categories.values() for item_id in items}

    def __iter__(self) -> Iterator[ItemRecord]:
        for items in self._categories.values():
            yield from items.values()

    def __len__(self) -> int:
        return sum(len(items) for items in self._categories.values())

    # Alias consolidation

    @property
    def aliases(self) -> CategoryAliasMap:
        return self._aliases

    def consolidate(self, display_names: Mapping[int, str]) -> CategoryAliasMap:
        """
        Rebuild the alias map from the display names of the non-empty categories.

        Names for categories without items are ignored.
        """
        present = {
            category: display_names.get(category, str(category))
            for category in self.non_empty_categories()
        }
        self._aliases = build_alias_map(present)
        if self._aliases:
            logger.debug("Consolidated categories: %s", self._aliases)
        return self._aliases
