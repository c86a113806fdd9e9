import pytest

from supply_economy.config import EconomyConfig
from supply_economy.reproducibility.deterministic_rng import DeterministicRNG
from supply_economy.services.economy_store.state import EconomyState
from supply_economy.services.randomizer import Randomizer, round_half_even


def _randomizer(config: EconomyConfig, seed: int = 7) -> Randomizer:
    return Randomizer(config, DeterministicRNG.for_component("randomizer", seed))


@pytest.mark.parametrize(
    "value, expected",
    [(2.5, 2), (3.5, 4), (-2.5, -2), (0.5, 0), (1.49, 1), (1.51, 2)],
)
def test_round_half_even(value, expected):
    assert round_half_even(value) == expected


def test_supply_is_bounded_even_with_wide_spread(catalog):
    config = EconomyConfig(std_dev_supply=5000, valid_categories={-75, -79, -4})
    state = EconomyState.generate_blank(catalog, config.valid_categories)

    randomizer = _randomizer(config)
    for _ in range(20):
        randomizer.randomize(state, update_supply=True, update_delta=True)
        for record in state.ledger:
            assert config.min_supply <= record.supply <= config.max_supply


def test_zero_spread_draws_the_mean(catalog):
    config = EconomyConfig(
        std_dev_supply=0, std_dev_delta=0, min_delta=-3, max_delta=4, valid_categories={-75, -79}
    )
    state = EconomyState.generate_blank(catalog, config.valid_categories)

    _randomizer(config).randomize(state, update_supply=True, update_delta=True)

    for record in state.ledger:
        assert record.supply == 500
        # mean delta 0.5 rounds half to even
        assert record.daily_delta == 0


def test_category_ceiling_applies_to_drawn_supply(catalog):
    config = EconomyConfig(
        std_dev_supply=0, category_max_supply={-4: 100}, valid_categories={-4, -75}
    )
    state = EconomyState.generate_blank(catalog, config.valid_categories)

    _randomizer(config).randomize(state, update_supply=True, update_delta=False)

    assert state.get_item("128").supply == 100
    assert state.get_item("24").supply == 500


def test_same_seed_same_economy(catalog, config):
    first = EconomyState.generate_blank(catalog, config.valid_categories)
    second = EconomyState.generate_blank(catalog, config.valid_categories)

    _randomizer(config, seed=99).randomize(first, True, True)
    _randomizer(config, seed=99).randomize(second, True, True)

    assert first.to_dict() == second.to_dict()


def test_delta_only_keeps_supply(catalog, config):
    state = EconomyState.generate_blank(catalog, config.valid_categories)
    for record in state.ledger:
        record.supply = 321

    _randomizer(config).randomize(state, update_supply=False, update_delta=True)

    assert all(record.supply == 321 for record in state.ledger)
