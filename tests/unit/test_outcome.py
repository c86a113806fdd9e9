import logging

import pytest

from supply_economy.core.outcome import Outcome, OutcomeStatus, run_safely, run_safely_async

logger = logging.getLogger("tests.outcome")


def test_run_safely_wraps_plain_results():
    outcome = run_safely(lambda: 5, logger, "five")
    assert outcome.ok
    assert outcome.value == 5


def test_run_safely_passes_outcomes_through():
    skipped = Outcome.skipped("nothing to do")
    assert run_safely(lambda: skipped, logger, "skip") is skipped


def test_run_safely_turns_faults_into_failures(caplog):
    def explode():
        raise KeyError("missing")

    with caplog.at_level(logging.ERROR):
        outcome = run_safely(explode, logger, "explode")

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.error.startswith("explode")
    assert "explode failed" in caplog.text


@pytest.mark.asyncio
async def test_run_safely_async():
    async def ok():
        return "done"

    async def bad():
        raise RuntimeError("nope")

    assert (await run_safely_async(ok, logger, "ok")).value == "done"
    assert (await run_safely_async(bad, logger, "bad")).status is OutcomeStatus.FAILED
