"""
Per-item supply/demand economy simulator.

Items carry a supply level and a daily drift; prices fall as supply rises. One
authoritative peer owns and persists the state, replicas follow it through
snapshot and supply-delta messages.
"""

from supply_economy.config import EconomyConfig, LoggingSettings, load_config
from supply_economy.core.outcome import Outcome, OutcomeStatus
from supply_economy.handlers import EconomyHooks
from supply_economy.models.catalog import Catalog, CatalogEntry, FishEntry, SeedEntry
from supply_economy.models.item import CompositeKind, ItemRecord, ItemRef, Seasons, SimpleKind
from supply_economy.services.economy_service import EconomyService
from supply_economy.services.economy_store.state import EconomyState

__version__ = "0.1.0"

__all__ = [
    "Catalog",
    "CatalogEntry",
    "CompositeKind",
    "EconomyConfig",
    "EconomyHooks",
    "EconomyService",
    "EconomyState",
    "FishEntry",
    "ItemRecord",
    "ItemRef",
    "LoggingSettings",
    "Outcome",
    "OutcomeStatus",
    "Seasons",
    "SeedEntry",
    "SimpleKind",
    "load_config",
]
