"""
Per-item economic state and item identity types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Flag
from typing import Any, Dict, Optional, Union


class Seasons(Flag):
    NONE = 0
    SPRING = 1
    SUMMER = 2
    FALL = 4
    WINTER = 8
    ALL = SPRING | SUMMER | FALL | WINTER

    @classmethod
    def parse(cls, value: Any) -> "Seasons":
        """Accept a Seasons, an int bitmask, a season name or a list of names."""
        if isinstance(value, Seasons):
            return value
        if value is None:
            return cls.NONE
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            return cls[value.strip().upper()]
        result = cls.NONE
        for part in value:
            result |= cls.parse(part)
        return result


@dataclass
class ItemRecord:
    """
    Canonical economic state of one item.

    Mutated only by the advancement and randomization engines and by supply
    adjustment signals; clamping is the caller's responsibility.
    """

    item_id: str
    supply: int = 0
    daily_delta: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"item_id": self.item_id, "supply": self.supply, "daily_delta": self.daily_delta}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ItemRecord":
        return cls(
            item_id=str(data["item_id"]),
            supply=int(data.get("supply", 0)),
            daily_delta=int(data.get("daily_delta", 0)),
        )


@dataclass(frozen=True)
class SimpleKind:
    """Item priced from its own supply curve."""


@dataclass(frozen=True)
class CompositeKind:
    """
    Item priced relative to a base ingredient (artisan goods).

    ingredient_id is None when the concrete instance carries no ingredient; such
    items fall back to their own supply curve.
    """

    ingredient_id: Optional[str] = None


ItemKind = Union[SimpleKind, CompositeKind]

SIMPLE = SimpleKind()


@dataclass(frozen=True)
class ItemRef:
    """A concrete item as seen by the host: identity, category, list price and kind."""

    item_id: str
    category: int
    list_price: int
    name: str = ""
    kind: ItemKind = field(default=SIMPLE)

    @property
    def is_composite(self) -> bool:
        return isinstance(self.kind, CompositeKind)

    @property
    def label(self) -> str:
        return self.name or self.item_id
