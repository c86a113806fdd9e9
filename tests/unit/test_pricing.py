import pytest

from supply_economy.config import EconomyConfig
from supply_economy.models.item import CompositeKind, ItemRecord, ItemRef
from supply_economy.services.economy_store.ledger import CategoryLedger
from supply_economy.services.economy_store.state import EconomyState
from supply_economy.services.pricing import LinearPriceCurve, PricingEngine, build_price_curve


@pytest.fixture
def unit_config():
    # Multiplier runs from 1.0 at zero supply to 0.0 at max supply
    return EconomyConfig(min_percentage=0.0, max_percentage=1.0)


@pytest.fixture
def state():
    return EconomyState(
        CategoryLedger(
            {
                -79: {"613": ItemRecord("613", supply=200)},
                -26: {"344": ItemRecord("344", supply=500)},
            }
        )
    )


def _engine(state, catalog, config):
    return PricingEngine(lambda: state, catalog.item_ref, build_price_curve(config))


class TestLinearPriceCurve:
    def test_endpoints(self):
        curve = LinearPriceCurve(EconomyConfig())
        assert curve(100, 0) == 130
        assert curve(100, 1000) == 20

    def test_supply_above_max_is_treated_as_max(self):
        curve = LinearPriceCurve(EconomyConfig())
        assert curve(100, 5000) == curve(100, 1000)

    def test_prices_fall_as_supply_rises(self):
        curve = LinearPriceCurve(EconomyConfig())
        prices = [curve(500, supply) for supply in range(0, 1001, 50)]
        assert prices == sorted(prices, reverse=True)
        assert prices[0] > prices[-1]


class TestPricingEngine:
    def test_simple_item_uses_own_supply(self, state, catalog, unit_config):
        apple = catalog.item_ref("613")
        assert _engine(state, catalog, unit_config).price(apple, apple.list_price) == 80

    def test_composite_follows_ingredient(self, state, catalog, unit_config):
        jelly = catalog.item_ref("344", ingredient_id="613")
        assert jelly.kind == CompositeKind("613")

        assert _engine(state, catalog, unit_config).price(jelly, jelly.list_price) == 200

    def test_composite_without_ingredient_uses_own_curve(self, state, catalog, unit_config):
        jelly = catalog.item_ref("344")
        # own supply 500 -> multiplier 0.5
        assert _engine(state, catalog, unit_config).price(jelly, 250) == 125

    def test_composite_with_worthless_ingredient_uses_own_curve(self, state, unit_config):
        free = ItemRef("613", -79, 0, "Free Apple")
        engine = PricingEngine(lambda: state, lambda _id: free, build_price_curve(unit_config))
        jelly = ItemRef("344", -26, 250, "Jelly", CompositeKind("613"))

        assert engine.price(jelly, 250) == 125

    def test_unknown_item_keeps_base_price(self, state, catalog, unit_config):
        stranger = ItemRef("nope", -75, 123)
        assert _engine(state, catalog, unit_config).price(stranger, 123) == 123

    def test_no_state_keeps_base_price(self, catalog, unit_config):
        engine = PricingEngine(lambda: None, catalog.item_ref, build_price_curve(unit_config))
        assert engine.price(catalog.item_ref("613"), 100) == 100

    def test_resolve_ingredient(self, state, catalog, unit_config):
        engine = _engine(state, catalog, unit_config)
        assert engine.resolve_ingredient(catalog.item_ref("344", "613")).item_id == "613"
        assert engine.resolve_ingredient(catalog.item_ref("344")) is None
        assert engine.resolve_ingredient(catalog.item_ref("613")) is None


def test_negative_supply_floor_prices_like_empty_stock():
    curve = LinearPriceCurve(EconomyConfig(min_supply=-100, max_supply=10))
    assert curve(100, -50) == curve(100, 0) == 130
