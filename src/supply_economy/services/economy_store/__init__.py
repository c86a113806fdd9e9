"""
Economy store: canonical per-item state, its persistence and reconciliation.
"""

from .gate import PersistenceGate
from .ledger import CategoryLedger, build_alias_map
from .persistence import InMemoryStorageBackend, JsonFileStorageBackend, PersistenceBackend
from .state import EconomyState

__all__ = [
    "CategoryLedger",
    "EconomyState",
    "InMemoryStorageBackend",
    "JsonFileStorageBackend",
    "PersistenceBackend",
    "PersistenceGate",
    "build_alias_map",
]
