"""
Portfolio valuation.

Subscribes to the recalculation notifier; after each batch it syncs
holding prices from the ledger and recomputes per-class totals and net
worth exactly once.
"""
from typing import Callable, Dict, Optional

from loguru import logger
from pydantic import BaseModel, Field

from src.marketsim.catalog.schemas import AssetClass
from src.marketsim.ledger.ledger import PriceLedger
from src.marketsim.market.types import TickBatch
from src.marketsim.portfolio.holdings import Portfolio
from src.marketsim.scheduler.notifier import RecalculationNotifier


class PortfolioTotals(BaseModel):
    cash: float = 0.0
    by_class: Dict[AssetClass, float] = Field(default_factory=dict)
    net_worth: float = 0.0
    tick: int = 0

    def total(self, asset_class: AssetClass) -> float:
        return self.by_class.get(asset_class, 0.0)


class PortfolioValuator:
    """Keeps ``PortfolioTotals`` in step with the ledger."""

    def __init__(self, portfolio: Portfolio, ledger: PriceLedger, cash: float = 0.0):
        self.portfolio = portfolio
        self.ledger = ledger
        self.cash = cash
        self.totals = PortfolioTotals(cash=cash, net_worth=cash)
        self.recalculations = 0
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self, notifier: RecalculationNotifier) -> None:
        self._unsubscribe = notifier.subscribe(self.on_batch)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_batch(self, batch: TickBatch) -> None:
        self.portfolio.sync_prices(self.ledger.snapshot())
        self.recalculate(tick=batch.tick)

    def recalculate(self, tick: int = 0) -> PortfolioTotals:
        by_class: Dict[AssetClass, float] = {kind: 0.0 for kind in AssetClass}
        for holding in self.portfolio.holdings():
            by_class[holding.asset_class] += holding.quantity * self.ledger.get(holding.asset_id)

        net_worth = self.cash + sum(by_class.values())
        self.totals = PortfolioTotals(
            cash=self.cash, by_class=by_class, net_worth=net_worth, tick=tick,
        )
        self.recalculations += 1
        logger.debug(f"Portfolio revalued at tick {tick}: net worth {net_worth:,.2f}")
        return self.totals
