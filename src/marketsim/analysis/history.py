"""
Price history recorder.

Subscribes to the recalculation notifier and keeps one row per applied
batch holding the full ledger snapshot, which is what the chart views
consume.  ``summary()`` condenses the history into per-asset statistics.
"""
from typing import Callable, Dict, List, Optional, Sequence

import pandas as pd
from loguru import logger

from src.marketsim.ledger.ledger import PriceLedger
from src.marketsim.market.types import TickBatch
from src.marketsim.scheduler.notifier import RecalculationNotifier


class PriceHistoryRecorder:
    """Accumulates ledger snapshots per tick."""

    def __init__(self, ledger: PriceLedger, max_rows: int = 10_000):
        """
        Args:
            ledger: Ledger whose snapshot is recorded after each batch.
            max_rows: Oldest rows are discarded beyond this many.
        """
        self.ledger = ledger
        self.max_rows = max_rows
        self._rows: List[Dict] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self, notifier: RecalculationNotifier) -> None:
        self._unsubscribe = notifier.subscribe(self.on_batch)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_batch(self, batch: TickBatch) -> None:
        row = {"tick": batch.tick, "reason": batch.reason, **self.ledger.snapshot()}
        self._rows.append(row)
        if len(self._rows) > self.max_rows:
            del self._rows[: len(self._rows) - self.max_rows]

    def __len__(self) -> int:
        return len(self._rows)

    def to_frame(self, asset_ids: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """Wide DataFrame: one row per batch, one column per asset.

        Restore batches share a tick with the batch they repair; the later
        row wins.
        """
        if not self._rows:
            return pd.DataFrame()

        df = pd.DataFrame(self._rows).drop(columns=["reason"])
        df = df.drop_duplicates(subset="tick", keep="last").set_index("tick").sort_index()
        df = df.ffill()
        if asset_ids is not None:
            df = df.reindex(columns=list(asset_ids))
        return df

    def summary(self) -> pd.DataFrame:
        """Per-asset first/last/min/max price, percent change and tick volatility."""
        df = self.to_frame()
        if df.empty:
            return pd.DataFrame(
                columns=["first", "last", "min", "max", "change_pct", "volatility"]
            )

        returns = df.pct_change(fill_method=None)
        first = df.bfill().iloc[0]
        last = df.iloc[-1]
        summary = pd.DataFrame({
            "first": first,
            "last": last,
            "min": df.min(),
            "max": df.max(),
            "change_pct": (last / first - 1.0) * 100,
            "volatility": returns.std().fillna(0.0),
        })
        logger.debug(f"Summarised history: {len(df)} ticks x {len(summary)} assets")
        return summary
