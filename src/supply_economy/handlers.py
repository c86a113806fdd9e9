"""
Host lifecycle adapter.

The host calls these hooks from its own events (save loaded, day ending/started,
season and year start, message received, save unloaded, console command). Each
hook runs the matching EconomyService operation behind run_safely_async, so a
failing callback is logged and discarded and never reaches the host.
"""

import logging
from typing import Any, Dict, Iterable, Tuple, Union

from supply_economy.core.outcome import Outcome, OutcomeStatus, run_safely_async
from supply_economy.models.item import ItemRef
from supply_economy.services.economy_service import EconomyService
from supply_economy.services.replication.messages import EconomyMessage, parse_message

logger = logging.getLogger(__name__)


class EconomyHooks:
    def __init__(self, service: EconomyService):
        self.service = service

    async def on_save_loaded(self) -> Outcome:
        return await self._run(self.service.on_loaded, "on_save_loaded")

    async def on_save_unloaded(self) -> Outcome:
        return await self._run(self.service.unload, "on_save_unloaded")

    async def on_day_ending(self, shipped: Iterable[Tuple[ItemRef, int]]) -> Outcome:
        """Every shipped stack raises its item's supply by the stack size."""

        async def _ship() -> Outcome[int]:
            adjusted = 0
            for item, quantity in shipped:
                outcome = await self.service.adjust_supply(item, quantity)
                if outcome.ok:
                    adjusted += 1
            return Outcome.success(adjusted)

        return await self._run(_ship, "on_day_ending")

    async def on_day_started(self) -> Outcome:
        return await self._run(self.service.advance_one_day, "on_day_started")

    async def on_season_started(self) -> Outcome:
        return await self._run(self.service.setup_for_new_season, "on_season_started")

    async def on_year_started(self) -> Outcome:
        return await self._run(self.service.setup_for_new_year, "on_year_started")

    async def on_console_reset(self) -> Outcome:
        return await self._run(self.service.full_reset, "on_console_reset")

    async def on_message_received(
        self, message: Union[EconomyMessage, str, bytes, Dict[str, Any]]
    ) -> Outcome:
        async def _dispatch() -> Outcome:
            parsed = message if isinstance(message, EconomyMessage) else parse_message(message)
            return await self.service.handle_message(parsed)

        return await self._run(_dispatch, "on_message_received")

    async def _run(self, action, name: str) -> Outcome:
        outcome = await run_safely_async(action, logger, name)
        if outcome.status is OutcomeStatus.SKIPPED:
            logger.debug(f"{name} skipped: {outcome.error}")
        elif outcome.status is OutcomeStatus.FAILED:
            logger.error(f"{name} did not complete: {outcome.error}")
        return outcome
