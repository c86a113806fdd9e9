from supply_economy.config import EconomyConfig
from supply_economy.models.item import ItemRecord
from supply_economy.services.advancement import (
    advance_one_day,
    apply_supply_change,
    cap_supply,
    clamp_supply,
)
from supply_economy.services.economy_store.ledger import CategoryLedger
from supply_economy.services.economy_store.state import EconomyState


def _state():
    return EconomyState(
        CategoryLedger(
            {
                -75: {
                    "up": ItemRecord("up", supply=990, daily_delta=30),
                    "down": ItemRecord("down", supply=10, daily_delta=-30),
                    "flat": ItemRecord("flat", supply=400, daily_delta=0),
                },
                -4: {"fish": ItemRecord("fish", supply=90, daily_delta=25)},
            }
        )
    )


def test_clamp_supply_respects_category_ceiling():
    config = EconomyConfig(category_max_supply={-4: 100})
    assert clamp_supply(-5, config) == 0
    assert clamp_supply(5000, config) == 1000
    assert clamp_supply(5000, config, -4) == 100
    assert clamp_supply(5000, config, -75) == 1000


def test_advance_one_day_adds_delta_and_clamps():
    config = EconomyConfig(category_max_supply={-4: 100})
    state = _state()

    advance_one_day(state, config)

    assert state.get_item("up").supply == 1000
    assert state.get_item("down").supply == 0
    assert state.get_item("flat").supply == 400
    assert state.get_item("fish").supply == 100


def test_many_days_stay_within_bounds():
    config = EconomyConfig(category_max_supply={-4: 100})
    state = _state()

    for _ in range(100):
        advance_one_day(state, config)
        for category, items in state.ledger.categories().items():
            for record in items.values():
                assert config.min_supply <= record.supply <= config.supply_ceiling(category)


def test_advance_is_not_idempotent():
    config = EconomyConfig()
    state = EconomyState(CategoryLedger({-75: {"a": ItemRecord("a", 100, 5)}}))

    advance_one_day(state, config)
    advance_one_day(state, config)

    assert state.get_item("a").supply == 110


def test_apply_supply_change_returns_previous_value():
    config = EconomyConfig()
    record = ItemRecord("a", supply=995)

    previous = apply_supply_change(record, 20, config)

    assert previous == 995
    assert record.supply == 1000


def test_cap_supply_only_clamps():
    config = EconomyConfig(category_max_supply={-4: 50})
    state = _state()

    cap_supply(state, config)

    assert state.get_item("fish").supply == 50
    assert state.get_item("up").supply == 990
    assert state.get_item("up").daily_delta == 30
