"""
Table-driven volatility model.

Maps (asset class, volatility tier, macro trend, health) to the drift and
variance used by the price generator.  The tier table is the canonical one
for the whole engine; class multipliers scale it so that crypto and
miscellaneous instruments swing harder than equities, and bonds/property
move more slowly.
"""
from typing import Dict, Optional

from src.marketsim.catalog.schemas import AssetClass, VolatilityTier
from src.marketsim.market.types import MacroMarketState, MarketTrend, VolatilityParams

# Half-width of the per-tick uniform perturbation.
TIER_VARIANCE: Dict[VolatilityTier, float] = {
    VolatilityTier.VERY_LOW: 0.003,
    VolatilityTier.LOW: 0.005,
    VolatilityTier.MEDIUM: 0.01,
    VolatilityTier.HIGH: 0.015,
    VolatilityTier.VERY_HIGH: 0.02,
    VolatilityTier.EXTREME: 0.03,
}

CLASS_MULTIPLIER: Dict[AssetClass, float] = {
    AssetClass.STOCK: 1.0,
    AssetClass.BOND: 0.5,
    AssetClass.PROPERTY: 0.4,
    AssetClass.OTHER: 1.25,
    AssetClass.CRYPTO: 1.5,
}

TREND_DRIFT: Dict[MarketTrend, float] = {
    MarketTrend.BULL: 0.001,
    MarketTrend.BEAR: -0.001,
    MarketTrend.STABLE: 0.0,
}

# Drift contributed by a health score of 0 or 100.
HEALTH_DRIFT_SCALE = 0.0005


class VolatilityModel:
    """Pure lookup; holds no state beyond its tables."""

    def __init__(
        self,
        tier_variance: Optional[Dict[VolatilityTier, float]] = None,
        class_multiplier: Optional[Dict[AssetClass, float]] = None,
    ):
        self.tier_variance = {**TIER_VARIANCE, **(tier_variance or {})}
        self.class_multiplier = {**CLASS_MULTIPLIER, **(class_multiplier or {})}

    def parameters(
        self,
        asset_class: AssetClass,
        tier: VolatilityTier,
        trend: MarketTrend,
        health: float = 50.0,
    ) -> VolatilityParams:
        variance = self.tier_variance[tier] * self.class_multiplier[asset_class]
        drift = TREND_DRIFT[trend] + (health - 50.0) / 50.0 * HEALTH_DRIFT_SCALE
        return VolatilityParams(drift_bias=drift, variance_factor=variance)

    def for_state(
        self,
        asset_class: AssetClass,
        tier: VolatilityTier,
        state: MacroMarketState,
    ) -> VolatilityParams:
        return self.parameters(asset_class, tier, state.trend, state.health)
