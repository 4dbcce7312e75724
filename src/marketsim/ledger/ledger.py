"""
Global price ledger.

The canonical, process-wide map from asset id to current price.  Every
consumer (portfolio valuation, charts, dashboards) reads through it; no
one else caches prices independently.

Writes are copy-on-write: ``apply_batch`` builds a new record map and
swaps it in under a writer lock, so a reader either sees the state before
a batch or after it, never half of it.  Readers take no lock.
"""
import math
import threading
from types import MappingProxyType
from typing import Dict, Mapping, Optional

import pandas as pd
from loguru import logger

from src.marketsim.catalog.loader import AssetCatalog
from src.marketsim.catalog.schemas import AssetClass
from src.marketsim.core.errors import UnknownAssetError
from src.marketsim.market.types import PriceRecord, TickBatch
from src.marketsim.portfolio.base import OwnedAssetsProvider


class PriceLedger:
    """Single source of truth for current prices."""

    def __init__(
        self,
        catalog: AssetCatalog,
        owned: Optional[OwnedAssetsProvider] = None,
    ):
        """
        Args:
            catalog: Instrument catalog; supplies base prices for the last
                     step of the read fallback chain.
            owned: Optional owned-assets collaborator; supplies last known
                   prices for held instruments.
        """
        self.catalog = catalog
        self.owned = owned
        self._records: Mapping[str, PriceRecord] = MappingProxyType({})
        self._write_lock = threading.Lock()
        self._version = 0

    @property
    def version(self) -> int:
        """Number of batches applied so far."""
        return self._version

    def attach_owned(self, owned: Optional[OwnedAssetsProvider]) -> None:
        self.owned = owned

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def record(self, asset_id: str) -> Optional[PriceRecord]:
        return self._records.get(asset_id)

    def get(self, asset_id: str) -> float:
        """Current price with the ledger → owned → base fallback chain.

        Raises:
            UnknownAssetError: If *asset_id* is neither tracked, owned,
                               nor catalogued.
        """
        rec = self._records.get(asset_id)
        if rec is not None:
            return rec.current_price

        if self.owned is not None:
            last_known = self.owned.last_known_price(asset_id)
            if last_known is not None and last_known > 0:
                logger.debug(f"Ledger miss for {asset_id}; using owned last-known {last_known}")
                return last_known

        asset = self.catalog.find(asset_id)
        if asset is not None:
            logger.debug(f"Ledger miss for {asset_id}; using base price {asset.base_price}")
            return asset.base_price

        raise UnknownAssetError(asset_id)

    def snapshot(self) -> Dict[str, float]:
        """Copy of ``{asset_id: price}`` for every tracked asset."""
        records = self._records
        return {asset_id: rec.current_price for asset_id, rec in records.items()}

    def get_all_prices(self, asset_class: AssetClass) -> Dict[str, float]:
        """Prices of every catalogued asset of *asset_class* (with fallbacks)."""
        return {asset.id: self.get(asset.id) for asset in self.catalog.by_class(asset_class)}

    def to_frame(self) -> pd.DataFrame:
        """Tracked prices as a DataFrame indexed by asset id."""
        records = self._records
        rows = []
        for rec in records.values():
            asset = self.catalog.find(rec.asset_id)
            rows.append({
                "asset_id": rec.asset_id,
                "asset_class": asset.kind.value if asset else None,
                "base_price": asset.base_price if asset else None,
                "current_price": rec.current_price,
                "last_updated_tick": rec.last_updated_tick,
            })

        columns = ["asset_id", "asset_class", "base_price", "current_price", "last_updated_tick"]
        return pd.DataFrame(rows, columns=columns).set_index("asset_id")

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def apply_batch(self, batch: TickBatch) -> int:
        """Atomically apply every valid entry of *batch*.

        Entries with non-finite or non-positive prices are dropped with a
        warning; the rest of the batch still applies.

        Returns:
            Number of records written.
        """
        with self._write_lock:
            updated = dict(self._records)
            written = 0

            for asset_id, price in batch.entries:
                if price is None or not math.isfinite(price) or price <= 0:
                    logger.warning(
                        f"Rejected invalid price {price} for {asset_id} in tick {batch.tick}"
                    )
                    continue

                updated[asset_id] = PriceRecord(
                    asset_id=asset_id,
                    current_price=price,
                    last_updated_tick=batch.tick,
                )
                written += 1

            self._records = MappingProxyType(updated)
            self._version += 1

        logger.debug(
            f"Applied batch tick={batch.tick} reason={batch.reason}: "
            f"{written}/{len(batch)} records"
        )
        return written
