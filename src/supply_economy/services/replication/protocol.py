"""
Authority / replica state machine.

    UNINITIALIZED --start()--> GENERATING --install_authoritative()--> AUTHORITATIVE
                  \\--start()--> AWAITING_SNAPSHOT --Snapshot--> REPLICA

The authority owns the only writable EconomyState and broadcasts Snapshot and
SupplyDelta messages stamped with the state version. Replicas replace their
state wholesale on a newer Snapshot and add SupplyDelta amounts on top of it.

Duplicate and stale delivery is gated by version:
- a Snapshot at or below the last applied snapshot version is discarded;
- a SupplyDelta at or below the snapshot version is already part of the
  snapshot and is discarded, as is a second copy of a buffered delta;
- deltas newer than the snapshot are kept and replayed in version order on top
  of every newer snapshot until a snapshot covers them;
- a delta older than one already applied rebuilds the state from the last
  snapshot with every kept delta replayed in version order.
"""

import logging
from collections import OrderedDict
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from supply_economy.config import EconomyConfig
from supply_economy.core.outcome import Outcome
from supply_economy.services.advancement import apply_supply_change
from supply_economy.services.economy_store.state import EconomyState

from .messages import EconomyMessage, RequestSnapshot, Snapshot, SupplyDelta
from .transport import MessageTransport

logger = logging.getLogger(__name__)


class PeerPhase(Enum):
    UNINITIALIZED = "uninitialized"
    GENERATING = "generating"
    AWAITING_SNAPSHOT = "awaiting_snapshot"
    AUTHORITATIVE = "authoritative"
    REPLICA = "replica"


class ReplicationProtocol:
    def __init__(
        self,
        peer_id: str,
        is_authority: bool,
        transport: MessageTransport,
        config: EconomyConfig,
        on_state_received: Optional[Callable[[EconomyState], None]] = None,
    ):
        self.peer_id = peer_id
        self.is_authority = is_authority
        self.transport = transport
        self.config = config
        self._on_state_received = on_state_received

        self.phase = PeerPhase.UNINITIALIZED
        self.state: Optional[EconomyState] = None
        self.snapshot_version: Optional[int] = None
        self._snapshot_data: Optional[Dict[str, Any]] = None
        self._pending: "OrderedDict[int, SupplyDelta]" = OrderedDict()

        self.messages_applied = 0
        self.messages_discarded = 0

    # Lifecycle

    async def start(self) -> None:
        await self.transport.register(self.handle_message)
        if self.is_authority:
            self.phase = PeerPhase.GENERATING
            logger.info(f"Peer {self.peer_id} is the economy authority; generating state")
            return
        self.phase = PeerPhase.AWAITING_SNAPSHOT
        logger.info(f"Peer {self.peer_id} is a replica; requesting economy snapshot")
        await self.transport.broadcast(RequestSnapshot(sender_id=self.peer_id))

    def install_authoritative(self, state: EconomyState) -> None:
        if not self.is_authority:
            raise RuntimeError("Only the authority can install a canonical economy state")
        self.state = state
        self.phase = PeerPhase.AUTHORITATIVE

    def reset(self) -> None:
        """Drop all session state (save unloaded)."""
        self.phase = PeerPhase.UNINITIALIZED
        self.state = None
        self.snapshot_version = None
        self._snapshot_data = None
        self._pending.clear()

    # Outbound

    async def broadcast_snapshot(self) -> Outcome[int]:
        if self.phase is not PeerPhase.AUTHORITATIVE or self.state is None:
            return Outcome.skipped("only an initialized authority broadcasts snapshots")
        await self.transport.broadcast(
            Snapshot(sender_id=self.peer_id, version=self.state.version, state=self.state.to_dict())
        )
        logger.debug(f"Broadcast economy snapshot version {self.state.version}")
        return Outcome.success(self.state.version)

    async def broadcast_delta(self, item_id: str, amount: int, version: int) -> Outcome[int]:
        if self.phase is not PeerPhase.AUTHORITATIVE:
            return Outcome.skipped("only the authority broadcasts supply deltas")
        await self.transport.broadcast(
            SupplyDelta(sender_id=self.peer_id, item_id=item_id, amount=amount, version=version)
        )
        return Outcome.success(version)

    # Inbound

    async def handle_message(self, message: EconomyMessage) -> Outcome:
        if message.sender_id == self.peer_id:
            return Outcome.skipped("own message")
        if isinstance(message, RequestSnapshot):
            return await self._on_request_snapshot(message)
        if isinstance(message, Snapshot):
            return self._on_snapshot(message)
        if isinstance(message, SupplyDelta):
            return self._on_supply_delta(message)
        logger.warning(f"Unknown economy message kind {message.kind!r} from {message.sender_id}")
        return Outcome.skipped(f"unknown message kind {message.kind}")

    async def _on_request_snapshot(self, message: RequestSnapshot) -> Outcome:
        if not self.is_authority:
            return Outcome.skipped("replicas do not serve snapshots")
        if self.state is None:
            logger.error(f"Snapshot requested by {message.sender_id} before economy was generated")
            return Outcome.skipped("economy not generated")
        logger.info(f"Sending economy snapshot to peers on request of {message.sender_id}")
        return await self.broadcast_snapshot()

    def _on_snapshot(self, message: Snapshot) -> Outcome:
        if self.is_authority:
            logger.warning(f"Authority ignored snapshot from {message.sender_id}")
            return self._discard("authority does not accept snapshots")
        if self.snapshot_version is not None and message.version <= self.snapshot_version:
            logger.debug(
                f"Discarded stale snapshot version {message.version} (have {self.snapshot_version})"
            )
            return self._discard("stale snapshot")

        try:
            state = self._state_from_snapshot(message.state, message.version)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            logger.error(f"Malformed economy snapshot from {message.sender_id}: {e}", exc_info=True)
            return Outcome.failed(f"malformed snapshot: {e}")

        self._snapshot_data = message.state
        self.snapshot_version = message.version
        self.phase = PeerPhase.REPLICA
        self.messages_applied += 1

        for version in [v for v in self._pending if v <= message.version]:
            del self._pending[version]
        self._install_and_replay(state)

        logger.info(
            f"Applied economy snapshot version {message.version} "
            f"({len(state.ledger)} items, {len(self._pending)} deltas replayed)"
        )
        return Outcome.success(message.version)

    def _on_supply_delta(self, message: SupplyDelta) -> Outcome:
        if self.is_authority:
            logger.warning(f"Authority ignored supply delta from {message.sender_id}")
            return self._discard("authority does not accept deltas")
        if self.snapshot_version is not None and message.version <= self.snapshot_version:
            logger.debug(f"Discarded supply delta version {message.version}; covered by snapshot")
            return self._discard("stale delta")
        if message.version in self._pending:
            logger.debug(f"Discarded duplicate supply delta version {message.version}")
            return self._discard("duplicate delta")

        if self.state is None:
            if not self.config.buffer_early_deltas:
                logger.warning(f"Dropped supply delta for {message.item_id}; no snapshot yet")
                return self._discard("no snapshot yet")
            logger.warning(
                f"Buffered supply delta for {message.item_id} (version {message.version}) "
                "until the first snapshot arrives"
            )
            self._remember(message)
            return Outcome.skipped("buffered until snapshot")

        if message.version < self.state.version:
            # Clamped additions do not commute: rebuild in version order
            logger.debug(
                f"Supply delta version {message.version} arrived after {self.state.version}; "
                "replaying from last snapshot"
            )
            self._remember(message)
            self._install_and_replay(
                self._state_from_snapshot(self._snapshot_data, self.snapshot_version)
            )
            applied = self.state.get_item(message.item_id) is not None
        else:
            applied = self._apply_delta(message)
            if applied or self.config.buffer_early_deltas:
                self._remember(message)

        if not applied:
            return Outcome.skipped(f"unknown item {message.item_id}")
        self.messages_applied += 1
        return Outcome.success(message.version)

    # Internals

    def _state_from_snapshot(self, data: Dict[str, Any], version: int) -> EconomyState:
        state = EconomyState.from_dict(data)
        state.version = version
        if self._on_state_received is not None:
            self._on_state_received(state)
        return state

    def _install_and_replay(self, state: EconomyState) -> None:
        self.state = state
        for version in sorted(self._pending):
            self._apply_delta(self._pending[version])

    def _apply_delta(self, message: SupplyDelta) -> bool:
        ledger = self.state.ledger
        category = ledger.category_of(message.item_id)
        if category is None:
            logger.warning(
                f"Supply delta for unknown item {message.item_id} (version {message.version}); "
                "waiting for next snapshot"
            )
            return False
        record = ledger.categories()[category][message.item_id]
        previous = apply_supply_change(record, message.amount, self.config, category)
        self.state.version = max(self.state.version, message.version)
        logger.debug(
            f"Replicated supply change for {message.item_id}: {previous} -> {record.supply}"
        )
        return True

    def _remember(self, message: SupplyDelta) -> None:
        self._pending[message.version] = message
        while len(self._pending) > self.config.max_buffered_deltas:
            dropped_version, dropped = self._pending.popitem(last=False)
            logger.warning(
                f"Delta buffer full; dropped supply delta version {dropped_version} for {dropped.item_id}"
            )

    def _discard(self, reason: str) -> Outcome:
        self.messages_discarded += 1
        return Outcome.skipped(reason)

    @property
    def pending_deltas(self) -> Dict[int, SupplyDelta]:
        return dict(self._pending)
