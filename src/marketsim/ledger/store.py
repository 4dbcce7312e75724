"""
Durable ledger snapshots.

Persists the ledger as a flat ``{asset_id: price}`` JSON object for
restart continuity.  There is no versioning: on load, keys that are not in
the catalog and values that are not positive numbers are ignored.
"""
import json
import math
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Union

from loguru import logger

from src.marketsim.catalog.loader import AssetCatalog
from src.marketsim.catalog.schemas import Asset
from src.marketsim.ledger.ledger import PriceLedger
from src.marketsim.market.types import TickBatch


class LedgerStore:
    """Reads and writes ledger snapshots on local disk."""

    def __init__(self, path: Union[str, Path] = "state/prices.json"):
        self.path = Path(path)

    def save(self, snapshot: Mapping[str, float]) -> None:
        """Serialise *snapshot* as pretty-printed JSON."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(dict(snapshot), f, indent=2, sort_keys=True)
        tmp_path.replace(self.path)
        logger.success(f"Saved {len(snapshot)} prices to {self.path}")

    def load(self, catalog: AssetCatalog) -> Dict[str, float]:
        """Return the stored prices of catalogued assets.

        A missing file yields an empty map; a corrupt file is logged and
        also yields an empty map.
        """
        if not self.path.exists():
            logger.info(f"No price snapshot at {self.path}; starting from base prices")
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read price snapshot {self.path}: {e}")
            return {}

        if not isinstance(raw, dict):
            logger.error(f"Price snapshot {self.path} is not a JSON object; ignoring")
            return {}

        prices: Dict[str, float] = {}
        skipped = 0
        for asset_id, value in raw.items():
            if asset_id not in catalog:
                skipped += 1
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                skipped += 1
                continue
            if not math.isfinite(value) or value <= 0:
                skipped += 1
                continue
            prices[asset_id] = float(value)

        if skipped:
            logger.debug(f"Ignored {skipped} unknown or invalid snapshot entries")
        return prices

    def restore_into(
        self,
        ledger: PriceLedger,
        floor_of: Optional[Callable[[Asset], float]] = None,
    ) -> int:
        """Load the snapshot and apply it to *ledger* as a single batch.

        Args:
            ledger: Target ledger.
            floor_of: Optional per-asset floor; stored prices below it are
                      raised to it.

        Returns:
            Number of restored records.
        """
        prices = self.load(ledger.catalog)
        if not prices:
            return 0

        if floor_of is not None:
            for asset_id, price in prices.items():
                floor = floor_of(ledger.catalog.get(asset_id))
                if price < floor:
                    prices[asset_id] = floor

        written = ledger.apply_batch(TickBatch.from_prices(prices, tick=0, reason="snapshot"))
        logger.info(f"Restored {written} prices from {self.path.name}")
        return written
