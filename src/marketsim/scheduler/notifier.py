"""
Recalculation notifier.

Fires once per completed tick batch so that aggregate consumers (portfolio
totals, price history, dashboards) recompute exactly once per batch rather
than once per asset.
"""
from typing import Callable, List

from loguru import logger

from src.marketsim.market.types import TickBatch

BatchCallback = Callable[[TickBatch], None]


class RecalculationNotifier:
    def __init__(self):
        self._subscribers: List[BatchCallback] = []
        self.batches_notified = 0

    def subscribe(self, callback: BatchCallback) -> Callable[[], None]:
        """Register *callback*; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def notify(self, batch: TickBatch) -> None:
        """Deliver *batch* to every subscriber once.

        A failing subscriber is logged and does not stop delivery to the
        others.
        """
        self.batches_notified += 1
        for callback in list(self._subscribers):
            try:
                callback(batch)
            except Exception:
                logger.exception(
                    f"Recalculation subscriber {getattr(callback, '__qualname__', callback)} "
                    f"failed on tick {batch.tick}"
                )

    def __len__(self) -> int:
        return len(self._subscribers)
