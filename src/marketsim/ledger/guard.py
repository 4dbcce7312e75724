"""
Post-boundary persistence guard.

Market close, day rollover and weekend transitions are where a naive
re-initialisation can overwrite a tracked price with a class default or
drop it entirely.  The scheduler snapshots the ledger before a boundary
update; once the update (and a short settling delay) has passed, the
guard writes back every snapshot price that went missing or non-positive.
Restorations go through ``PriceLedger.apply_batch`` like any other write.
"""
from typing import Dict, Mapping, Optional

from loguru import logger

from src.marketsim.ledger.ledger import PriceLedger
from src.marketsim.market.types import TickBatch


class PersistenceGuard:
    """Restores prices dropped across a calendar boundary."""

    RESTORE_REASON = "restore"

    def __init__(self):
        self.last_restore: Optional[TickBatch] = None

    def verify(
        self,
        pre_snapshot: Mapping[str, float],
        ledger: PriceLedger,
        tick: int = 0,
    ) -> int:
        """Compare *pre_snapshot* with the ledger and restore dropped prices.

        Args:
            pre_snapshot: ``{asset_id: price}`` taken before the update.
            ledger: The live ledger to check and repair.
            tick: Tick stamped on restored records.

        Returns:
            Number of restored assets.
        """
        restored: Dict[str, float] = {}
        for asset_id, price in pre_snapshot.items():
            if not price or price <= 0:
                continue

            rec = ledger.record(asset_id)
            if rec is None or rec.current_price <= 0:
                restored[asset_id] = price

        if not restored:
            logger.debug(f"Persistence check passed for {len(pre_snapshot)} assets")
            return 0

        logger.warning(
            f"Boundary inconsistency: restoring {len(restored)} dropped prices "
            f"{sorted(restored)}"
        )
        self.last_restore = TickBatch.from_prices(restored, tick=tick, reason=self.RESTORE_REASON)
        ledger.apply_batch(self.last_restore)
        return len(restored)
