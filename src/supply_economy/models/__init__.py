from .catalog import Catalog, CatalogEntry, FishEntry, SeedEntry
from .item import CompositeKind, ItemKind, ItemRecord, ItemRef, Seasons, SimpleKind

__all__ = [
    "Catalog",
    "CatalogEntry",
    "CompositeKind",
    "FishEntry",
    "ItemKind",
    "ItemRecord",
    "ItemRef",
    "Seasons",
    "SeedEntry",
    "SimpleKind",
]
