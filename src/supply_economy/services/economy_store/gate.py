"""
Persistence gate: when the canonical state is saved, and how a loaded state is
reconciled against the current catalog.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from .persistence import PersistenceBackend
from .state import EconomyState

if TYPE_CHECKING:
    from supply_economy.services.randomizer import Randomizer

logger = logging.getLogger(__name__)


class PersistenceGate:
    """
    Only the authority writes. Replicas hold whatever the authority last sent and
    never touch the save data.
    """

    def __init__(self, backend: PersistenceBackend, state_key: str, is_authority: bool):
        self.backend = backend
        self.state_key = state_key
        self.is_authority = is_authority
        self.saves = 0

    async def maybe_save(self, state: Optional[EconomyState]) -> bool:
        """Write the full state under the fixed key. Returns True when written."""
        if not self.is_authority:
            return False
        if state is None:
            logger.error("Economy not generated; nothing to save")
            return False
        await self.backend.write(self.state_key, state.to_dict())
        self.saves += 1
        logger.debug(f"Saved economy state version {state.version} under {self.state_key}")
        return True

    async def load(self) -> Optional[EconomyState]:
        data: Optional[Dict[str, Any]] = await self.backend.read(self.state_key)
        if not data:
            return None
        return EconomyState.from_dict(data)

    @staticmethod
    def load_or_reconcile(
        persisted: Optional[EconomyState],
        freshly_generated: EconomyState,
        randomizer: "Randomizer",
    ) -> Tuple[EconomyState, bool]:
        """
        Keep the persisted state when its item-id set matches the fresh blank
        state exactly; otherwise fully randomize the fresh one and use it.

        Returns (state, needs_save). No partial merge is attempted: any catalog
        drift discards the whole history.
        """
        if persisted is not None and persisted.has_same_items(freshly_generated):
            logger.info(f"Loaded persisted economy ({len(persisted.ledger)} items, version {persisted.version})")
            return persisted, False

        if persisted is None:
            logger.info("No persisted economy found; generating a new one")
        else:
            old_ids = persisted.ledger.item_ids()
            new_ids = freshly_generated.ledger.item_ids()
            logger.warning(
                f"Catalog drift detected (added={len(new_ids - old_ids)}, "
                f"removed={len(old_ids - new_ids)}); regenerating economy"
            )
            # Keep versions monotonic so replicas never treat the new state as stale
            freshly_generated.version = persisted.version
        randomizer.randomize(freshly_generated, update_supply=True, update_delta=True)
        return freshly_generated, True
