"""
Player portfolio.

Tracks held positions and the last price seen for each, which doubles as
the second step of the ledger's read fallback chain.  ``sync_prices``
pulls fresh ledger prices into the holdings after every batch.
"""
import threading
from typing import Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from src.marketsim.catalog.schemas import AssetClass
from src.marketsim.portfolio.base import OwnedAssetsProvider


class Holding(BaseModel):
    asset_id: str
    asset_class: AssetClass
    quantity: float = Field(..., ge=0)
    purchase_price: float = Field(..., gt=0)
    last_known_price: Optional[float] = Field(None, gt=0)

    @property
    def current_price(self) -> float:
        return self.last_known_price or self.purchase_price

    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price


class Portfolio(OwnedAssetsProvider):
    """In-memory set of holdings keyed by asset id."""

    def __init__(self, holdings: Optional[List[Holding]] = None):
        self._holdings: Dict[str, Holding] = {}
        self._lock = threading.Lock()
        for h in holdings or []:
            self.add(h)

    def add(self, holding: Holding) -> None:
        """Add a position, merging quantity into an existing one at average cost."""
        with self._lock:
            existing = self._holdings.get(holding.asset_id)
            if existing is None:
                self._holdings[holding.asset_id] = holding
                return

            total_qty = existing.quantity + holding.quantity
            avg_cost = (
                (existing.quantity * existing.purchase_price + holding.quantity * holding.purchase_price)
                / total_qty
                if total_qty > 0
                else existing.purchase_price
            )
            self._holdings[holding.asset_id] = existing.model_copy(
                update={"quantity": total_qty, "purchase_price": avg_cost}
            )

    def remove(self, asset_id: str) -> Optional[Holding]:
        with self._lock:
            return self._holdings.pop(asset_id, None)

    def holdings(self) -> List[Holding]:
        return list(self._holdings.values())

    def get(self, asset_id: str) -> Optional[Holding]:
        return self._holdings.get(asset_id)

    def owned_ids(self) -> List[str]:
        return [h.asset_id for h in self._holdings.values() if h.quantity > 0]

    def last_known_price(self, asset_id: str) -> Optional[float]:
        h = self._holdings.get(asset_id)
        if h is None:
            return None
        return h.last_known_price or h.purchase_price

    def sync_prices(self, prices: Dict[str, float]) -> int:
        """Copy fresh prices onto matching holdings; returns how many changed."""
        changed = 0
        with self._lock:
            for asset_id, holding in self._holdings.items():
                price = prices.get(asset_id)
                if price is None or price <= 0 or price == holding.last_known_price:
                    continue
                self._holdings[asset_id] = holding.model_copy(update={"last_known_price": price})
                changed += 1

        if changed:
            logger.debug(f"Synced {changed} holding prices")
        return changed
