import logging

import pytest

from supply_economy.config import EconomyConfig
from supply_economy.event_bus import InMemoryEventBus
from supply_economy.models.catalog import Catalog
from supply_economy.services.economy_service import EconomyService
from supply_economy.services.economy_store.persistence import InMemoryStorageBackend
from supply_economy.services.replication.transport import EventBusTransport

VALID_CATEGORIES = {-4, -26, -75, -79, -80, -81}

CATALOG_DATA = {
    "entries": [
        {"item_id": 24, "category": -75, "list_price": 35, "name": "Parsnip", "seasons": "spring"},
        {"item_id": 190, "category": -75, "list_price": 175, "name": "Cauliflower", "seasons": "spring"},
        {"item_id": 613, "category": -79, "list_price": 100, "name": "Apple", "seasons": "fall"},
        {"item_id": 344, "category": -26, "list_price": 250, "name": "Jelly"},
        {"item_id": 128, "category": -4, "list_price": 200, "name": "Pufferfish"},
        {"item_id": 16, "category": -81, "list_price": 50, "name": "Wild Horseradish", "seasons": "spring"},
        {"item_id": 18, "category": -80, "list_price": 30, "name": "Daffodil", "seasons": ["spring", "summer"]},
        {"item_id": 999, "category": -75, "list_price": 10, "name": "Test Turnip"},
        {"item_id": 500, "category": -999, "list_price": 10, "name": "Quest Scroll"},
    ],
    "ignore_list": [999],
    "category_names": {
        -75: "Vegetable",
        -79: "Fruit",
        -26: "Artisan Goods",
        -4: "Fish",
        -81: "Forage",
        -80: "Forage",
    },
    "seeds": [
        {"seed_id": 472, "crop_item_id": 24, "seasons": "spring", "days_to_grow": 4},
        {"seed_id": 474, "crop_item_id": 190, "seasons": "spring", "days_to_grow": 12},
        {"seed_id": 9999, "crop_item_id": 77777, "seasons": "summer", "days_to_grow": 3},
    ],
    "fish": [{"item_id": 128, "seasons": "summer"}],
}

MANAGED_ITEMS = {"24", "190", "613", "344", "128", "16", "18"}


@pytest.fixture
def catalog() -> Catalog:
    return Catalog.model_validate(CATALOG_DATA)


@pytest.fixture
def managed_items():
    return set(MANAGED_ITEMS)


@pytest.fixture
def catalog_data():
    return CATALOG_DATA


@pytest.fixture
def config() -> EconomyConfig:
    return EconomyConfig(seed=1234, valid_categories=VALID_CATEGORIES)


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def make_service(config, catalog, bus):
    """Factory for peers sharing one in-process bus."""

    def _make(is_authority=True, peer_id=None, backend=None, cfg=None, cat=None):
        return EconomyService(
            config=cfg or config,
            catalog=cat or catalog,
            backend=backend if backend is not None else InMemoryStorageBackend(),
            transport=EventBusTransport(bus),
            is_authority=is_authority,
            peer_id=peer_id or ("host" if is_authority else "farmhand"),
        )

    return _make


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
