"""
EconomyService: the host-facing facade of the supply economy.

Composes the persistence gate, randomizer, pricing engine and replication
protocol around one EconomyState per session. Every mutating entry point
returns an Outcome; queries degrade to host defaults while no state is loaded.
"""

import logging
from typing import Any, Dict, List, Optional

from supply_economy.config import EconomyConfig
from supply_economy.core.outcome import Outcome
from supply_economy.models.catalog import Catalog
from supply_economy.models.item import CompositeKind, ItemRecord, ItemRef, Seasons
from supply_economy.reproducibility.deterministic_rng import DeterministicRNG

from .advancement import advance_one_day, apply_supply_change, cap_supply
from .economy_store.gate import PersistenceGate
from .economy_store.persistence import PersistenceBackend
from .economy_store.state import EconomyState
from .pricing import PricingEngine, build_price_curve
from .randomizer import Randomizer
from .replication.messages import EconomyMessage
from .replication.protocol import PeerPhase, ReplicationProtocol
from .replication.transport import MessageTransport

logger = logging.getLogger(__name__)


class EconomyService:
    """
    One instance per peer and session.

    is_authority is resolved once by the host (e.g. "this peer hosts the
    session") and never re-queried.
    """

    def __init__(
        self,
        config: EconomyConfig,
        catalog: Catalog,
        backend: PersistenceBackend,
        transport: MessageTransport,
        is_authority: bool,
        peer_id: str = "host",
        rng: Optional[DeterministicRNG] = None,
    ):
        self.config = config
        self.catalog = catalog
        self.is_authority = is_authority
        self.peer_id = peer_id

        self.randomizer = Randomizer(
            config, rng or DeterministicRNG.for_component("randomizer", config.seed)
        )
        self.gate = PersistenceGate(backend, config.state_key, is_authority)
        self.protocol = ReplicationProtocol(
            peer_id, is_authority, transport, config, on_state_received=self._prepare_state
        )
        self.pricing = PricingEngine(
            lambda: self.protocol.state, catalog.item_ref, build_price_curve(config)
        )

    @property
    def state(self) -> Optional[EconomyState]:
        return self.protocol.state

    @property
    def loaded(self) -> bool:
        return self.protocol.state is not None

    # Lifecycle

    async def on_loaded(self) -> Outcome[EconomyState]:
        """
        Session start. The authority loads or regenerates the economy; a replica
        asks the authority for a snapshot and waits.
        """
        await self.protocol.start()
        if not self.is_authority:
            return Outcome.skipped("awaiting snapshot from authority")

        persisted = await self.gate.load()
        fresh = EconomyState.generate_blank(self.catalog, self.config.valid_categories)
        state, needs_save = PersistenceGate.load_or_reconcile(persisted, fresh, self.randomizer)
        self._prepare_state(state)
        self.protocol.install_authoritative(state)

        if needs_save:
            await self.gate.maybe_save(state)
        return Outcome.success(state)

    async def unload(self) -> Outcome[None]:
        self.protocol.reset()
        logger.info(f"Economy session of peer {self.peer_id} unloaded")
        return Outcome.success()

    async def handle_message(self, message: EconomyMessage) -> Outcome:
        return await self.protocol.handle_message(message)

    # Authority mutations

    async def advance_one_day(self) -> Outcome[int]:
        blocked = self._authority_guard("advance_one_day")
        if blocked is not None:
            return blocked

        advance_one_day(self.state, self.config)
        version = self.state.bump_version()
        await self.protocol.broadcast_snapshot()
        await self.gate.maybe_save(self.state)
        return Outcome.success(version)

    async def setup_for_new_season(self) -> Outcome[int]:
        blocked = self._authority_guard("setup_for_new_season")
        if blocked is not None:
            return blocked

        self.randomizer.randomize(self.state, update_supply=False, update_delta=True)
        cap_supply(self.state, self.config)
        return await self._publish_reset()

    async def setup_for_new_year(self) -> Outcome[int]:
        blocked = self._authority_guard("setup_for_new_year")
        if blocked is not None:
            return blocked

        self.randomizer.randomize(self.state, update_supply=True, update_delta=True)
        return await self._publish_reset()

    async def full_reset(self) -> Outcome[int]:
        """Operator recovery: new-year randomization followed by one day."""
        outcome = await self.setup_for_new_year()
        if not outcome.ok:
            return outcome
        return await self.advance_one_day()

    async def adjust_supply(self, item: ItemRef, amount: int) -> Outcome[int]:
        """
        Apply a produced/sold signal. Composite goods move their ingredient's
        supply. Returns the new supply.
        """
        if self.state is None:
            logger.error(f"Economy not generated to determine item model for {item.label}")
            return Outcome.skipped("economy not loaded")
        if not self.is_authority:
            logger.debug(f"Replica ignored supply signal for {item.label}")
            return Outcome.skipped("replicas do not originate supply changes")

        target = self.pricing.resolve_ingredient(item) or item
        category = self.state.ledger.category_of(target.item_id)
        if category is None:
            logger.debug(f"Could not find item model for {target.label}")
            return Outcome.skipped(f"unknown item {target.item_id}")

        record = self.state.ledger.categories()[category][target.item_id]
        previous = apply_supply_change(record, amount, self.config, category)
        version = self.state.bump_version()
        logger.debug(f"Adjusted {target.label} supply from {previous} to {record.supply}")

        await self.gate.maybe_save(self.state)
        await self.protocol.broadcast_delta(target.item_id, amount, version)
        return Outcome.success(record.supply)

    # Queries

    def get_price(self, item: ItemRef, base_price: int) -> int:
        return self.pricing.price(item, base_price)

    def get_categories(self) -> Dict[int, str]:
        if self.state is None:
            return {}
        return {
            category: self.catalog.category_name(category)
            for category in self.state.ledger.non_empty_categories()
        }

    def get_items_for_category(self, category: int) -> List[ItemRecord]:
        if self.state is None:
            return []
        return self.state.ledger.get_expanded(category)

    def get_item_from_seed(self, seed_id: str) -> Optional[ItemRecord]:
        if self.state is None:
            return None
        return self.state.get_item_from_seed(seed_id)

    def item_valid_for_season(self, record: ItemRecord, seasons: Seasons) -> bool:
        """Seasons from the item's seed, else its fish data, else its catalog entry."""
        if self.state is not None:
            seed = self.state.get_seed_for_item(record.item_id)
            if seed is not None:
                return bool(seed.seasons & seasons)
            fish = self.state.get_fish_for_item(record.item_id)
            if fish is not None:
                return bool(fish.seasons & seasons)
        entry = self.catalog.get(record.item_id)
        return bool(entry is not None and entry.seasons & seasons)

    def price_per_day(self, record: ItemRecord) -> Optional[int]:
        """Current sale price divided by growth days; None for items without a seed."""
        if self.state is None:
            return None
        seed = self.state.get_seed_for_item(record.item_id)
        if seed is None or seed.days_to_grow < 1:
            return None
        item = self.catalog.item_ref(record.item_id)
        if item is None:
            return None
        return self.get_price(item, item.list_price) // seed.days_to_grow

    def get_statistics(self) -> Dict[str, Any]:
        return {
            "peer_id": self.peer_id,
            "phase": self.protocol.phase.value,
            "items_managed": len(self.state.ledger) if self.state else 0,
            "version": self.state.version if self.state else None,
            "saves": self.gate.saves,
            "messages_applied": self.protocol.messages_applied,
            "messages_discarded": self.protocol.messages_discarded,
            # Seed plus draw count is enough to replay a randomization
            "rng_seed": self.randomizer.rng.seed,
            "rng_draws": self.randomizer.rng.call_count,
            "transport": self.protocol.transport.stats(),
        }

    # Internals

    def _prepare_state(self, state: EconomyState) -> None:
        state.rebuild_indices(self.catalog)

    def _authority_guard(self, operation: str) -> Optional[Outcome]:
        if not self.is_authority:
            logger.debug(f"{operation} skipped on replica {self.peer_id}")
            return Outcome.skipped("only the authority mutates the economy")
        if self.state is None or self.protocol.phase is not PeerPhase.AUTHORITATIVE:
            logger.error(f"{operation} called before the economy was generated")
            return Outcome.skipped("economy not loaded")
        return None

    async def _publish_reset(self) -> Outcome[int]:
        version = self.state.bump_version()
        await self.protocol.broadcast_snapshot()
        await self.gate.maybe_save(self.state)
        return Outcome.success(version)
