"""
Next-price sampler.

For each asset the generator:
  1. Falls back to the base price when no usable previous price exists.
  2. Leaves calendar-bound prices untouched while their market is closed.
  3. Draws a bounded uniform perturbation ``r ∈ [-variance, +variance]``.
  4. Applies ``previous × (1 + r + drift)`` and the class price floor.
  5. Smooths the candidate against the previous price.
  6. Rounds to the class precision.

Invalid results (NaN, infinities, non-positive, below floor) never leave
this module: they are clamped to the floor and logged as warnings.
"""
import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from src.marketsim.catalog.schemas import Asset, AssetClass
from src.marketsim.market.calendar import StatusMap
from src.marketsim.market.types import (
    CalendarStatus,
    MacroMarketState,
    TickBatch,
    VolatilityParams,
)
from src.marketsim.market.volatility import VolatilityModel


class ClassProfile(BaseModel):
    """Class-specific pricing constraints."""

    model_config = ConfigDict(frozen=True)

    floor_factor: float = Field(..., gt=0, lt=1, description="Minimum price as a fraction of base")
    update_probability: float = Field(
        1.0, gt=0, le=1,
        description="Chance that an open-market tick re-prices the asset",
    )


CLASS_PROFILES: Dict[AssetClass, ClassProfile] = {
    AssetClass.STOCK: ClassProfile(floor_factor=0.1),
    AssetClass.CRYPTO: ClassProfile(floor_factor=0.2),
    AssetClass.BOND: ClassProfile(floor_factor=0.5),
    # Real estate and collectibles re-price occasionally, not every tick.
    AssetClass.PROPERTY: ClassProfile(floor_factor=0.5, update_probability=0.1),
    AssetClass.OTHER: ClassProfile(floor_factor=0.2, update_probability=0.2),
}

SMOOTHING_WEIGHT = 0.8


def price_precision(asset: Asset) -> int:
    """Decimal places used when quoting *asset*."""
    if asset.kind is AssetClass.CRYPTO:
        if asset.base_price < 1:
            return 8
        if asset.base_price < 10:
            return 4
    return 2


def _round_up(value: float, decimals: int) -> float:
    scale = 10 ** decimals
    return math.ceil(value * scale - 1e-9) / scale


class PriceGenerator:
    """Samples the next price for single assets or whole catalogs."""

    def __init__(
        self,
        volatility: Optional[VolatilityModel] = None,
        profiles: Optional[Dict[AssetClass, ClassProfile]] = None,
        seed: Optional[int] = None,
        smoothing_weight: float = SMOOTHING_WEIGHT,
    ):
        """
        Args:
            volatility: Model used by ``generate_batch`` to parameterise each
                        asset.  Defaults to the canonical table.
            profiles: Per-class overrides of ``CLASS_PROFILES``.
            seed: Seed for the numpy random generator (``None`` = entropy).
            smoothing_weight: Weight of the fresh candidate in the
                              exponential smoothing step.
        """
        if not 0 < smoothing_weight <= 1:
            raise ValueError("smoothing_weight must be in (0, 1]")

        self.volatility = volatility or VolatilityModel()
        self.profiles = {**CLASS_PROFILES, **(profiles or {})}
        self.smoothing_weight = smoothing_weight
        self._rng = np.random.default_rng(seed)

    def floor_price(self, asset: Asset) -> float:
        """Lowest quotable price for *asset*, rounded up to its precision."""
        floor = asset.base_price * self.profiles[asset.kind].floor_factor
        return _round_up(floor, price_precision(asset))

    def next(
        self,
        previous_price: Optional[float],
        asset: Asset,
        status: CalendarStatus,
        params: VolatilityParams,
    ) -> float:
        """Return the next price for *asset*.

        Args:
            previous_price: Last ledger price, or ``None`` when untracked.
            asset: The instrument being priced.
            status: Calendar status of the asset's class for this tick.
            params: Drift and variance from the volatility model.
        """
        previous = self._usable_previous(previous_price, asset)

        if asset.kind.calendar_bound and not status.is_open:
            return previous

        r = float(self._rng.uniform(-params.variance_factor, params.variance_factor))
        candidate = previous * (1.0 + r + params.drift_bias)

        floor = asset.base_price * self.profiles[asset.kind].floor_factor
        candidate = max(candidate, floor)

        w = self.smoothing_weight
        smoothed = w * candidate + (1.0 - w) * previous

        return self._sanitize(smoothed, asset)

    def should_reprice(self, asset: Asset) -> bool:
        probability = self.profiles[asset.kind].update_probability
        if probability >= 1.0:
            return True
        return bool(self._rng.random() < probability)

    def generate_batch(
        self,
        assets: Sequence[Asset],
        previous_prices: Mapping[str, float],
        statuses: StatusMap,
        state: MacroMarketState,
        tick: int,
        reason: str = "timer",
        priority_ids: Iterable[str] = (),
        batch_size: int = 0,
    ) -> TickBatch:
        """Price a list of assets from one macro snapshot and one status map.

        Assets in *priority_ids* are processed first, then the rest in
        chunks of *batch_size* (``0`` = a single chunk).  Calendar-bound
        assets appear in the returned batch only when their price changed or
        they have no ledger record yet; continuous-market assets appear
        whenever they are re-priced.
        """
        priority = set(priority_ids)
        ordered = [a for a in assets if a.id in priority] + [
            a for a in assets if a.id not in priority
        ]
        chunk = batch_size if batch_size > 0 else max(len(ordered), 1)

        entries: List = []
        for start in range(0, len(ordered), chunk):
            for asset in ordered[start:start + chunk]:
                previous = previous_prices.get(asset.id)
                status = statuses[asset.kind]

                if previous is not None and status.is_open and not self.should_reprice(asset):
                    continue

                params = self.volatility.for_state(asset.kind, asset.volatility, state)
                new_price = self.next(previous, asset, status, params)

                # Continuous markets report every tick, even when the quote rounds unchanged.
                if previous is None or new_price != previous or not asset.kind.calendar_bound:
                    entries.append((asset.id, new_price))

            logger.debug(
                f"Priced chunk {start // chunk + 1} "
                f"({min(start + chunk, len(ordered))}/{len(ordered)} assets)"
            )

        return TickBatch(tick=tick, reason=reason, entries=entries)

    def _usable_previous(self, previous_price: Optional[float], asset: Asset) -> float:
        if previous_price is None or not math.isfinite(previous_price) or previous_price <= 0:
            logger.debug(
                f"No usable previous price for {asset.id} ({previous_price}); "
                f"falling back to base {asset.base_price}"
            )
            return asset.base_price
        return previous_price

    def _sanitize(self, value: float, asset: Asset) -> float:
        floor = self.floor_price(asset)
        if not math.isfinite(value) or value <= 0:
            logger.warning(
                f"Invalid price sample for {asset.id}: {value}. Clamping to floor {floor}."
            )
            return floor

        price = round(value, price_precision(asset))
        if price < floor:
            return floor
        return price
