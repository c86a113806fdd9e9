from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from .item import SIMPLE, CompositeKind, ItemRef, Seasons

ARTISAN_GOODS_CATEGORY = -26


def _coerce_seasons(v: Any) -> Seasons:
    return Seasons.parse(v)


class CatalogEntry(BaseModel):
    """One tradable object known to the host."""

    item_id: str
    category: int
    list_price: int = Field(default=0, ge=0)
    name: str = ""
    seasons: Seasons = Seasons.NONE

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator("item_id", mode="before")
    def _stringify_id(cls, v):
        return str(v)

    @field_validator("seasons", mode="before")
    def _parse_seasons(cls, v):
        return _coerce_seasons(v)


class SeedEntry(BaseModel):
    seed_id: str
    crop_item_id: str
    seasons: Seasons = Seasons.NONE
    days_to_grow: int = 0

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator("seed_id", "crop_item_id", mode="before")
    def _stringify_id(cls, v):
        return str(v)

    @field_validator("seasons", mode="before")
    def _parse_seasons(cls, v):
        return _coerce_seasons(v)


class FishEntry(BaseModel):
    item_id: str
    seasons: Seasons = Seasons.NONE

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator("item_id", mode="before")
    def _stringify_id(cls, v):
        return str(v)

    @field_validator("seasons", mode="before")
    def _parse_seasons(cls, v):
        return _coerce_seasons(v)


class Catalog(BaseModel):
    """
    Read-only view of the host's object catalog.

    Whether an item is a composite good is decided from composite_categories
    when the catalog is built; item_ref() only attaches the per-instance
    ingredient.
    """

    entries: List[CatalogEntry] = Field(default_factory=list)
    ignore_list: Set[str] = Field(default_factory=set)
    category_names: Dict[int, str] = Field(default_factory=dict)
    composite_categories: Set[int] = Field(default_factory=lambda: {ARTISAN_GOODS_CATEGORY})
    seeds: List[SeedEntry] = Field(default_factory=list)
    fish: List[FishEntry] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    _by_id: Dict[str, CatalogEntry] = PrivateAttr(default_factory=dict)
    _composite_ids: Set[str] = PrivateAttr(default_factory=set)

    @field_validator("ignore_list", mode="before")
    def _stringify_ignored(cls, v):
        return {str(x) for x in (v or [])}

    def model_post_init(self, __context: Any) -> None:
        self._by_id = {entry.item_id: entry for entry in self.entries}
        self._composite_ids = {
            entry.item_id for entry in self.entries if entry.category in self.composite_categories
        }

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Catalog":
        """Load a catalog from a YAML or JSON document."""
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    def get(self, item_id: str) -> Optional[CatalogEntry]:
        return self._by_id.get(str(item_id))

    def valid_entries(self, valid_categories: Iterable[int]) -> List[CatalogEntry]:
        """Entries that are neither ignored nor outside the valid category set."""
        allowed = set(valid_categories)
        return [
            entry
            for entry in self.entries
            if entry.item_id not in self.ignore_list and entry.category in allowed
        ]

    def category_name(self, category: int) -> str:
        return self.category_names.get(category, str(category))

    def item_ref(self, item_id: str, ingredient_id: Optional[str] = None) -> Optional[ItemRef]:
        """Resolve a concrete item, or None when the id is not in the catalog."""
        entry = self.get(item_id)
        if entry is None:
            return None
        kind = CompositeKind(ingredient_id) if entry.item_id in self._composite_ids else SIMPLE
        return ItemRef(
            item_id=entry.item_id,
            category=entry.category,
            list_price=entry.list_price,
            name=entry.name,
            kind=kind,
        )
