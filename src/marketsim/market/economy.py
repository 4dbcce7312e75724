"""
Macro economy collaborator.

Owns the ``MacroMarketState`` and evolves it on day rollovers: small
weekly drifts in market health, larger monthly shifts, and a trend that
follows health (bull above 65, bear below 35, stable in between).  The
price engine only ever reads ``state``.
"""
from typing import Optional

import numpy as np
from loguru import logger

from src.marketsim.market.types import MacroMarketState, MarketTrend

BULL_THRESHOLD = 65.0
BEAR_THRESHOLD = 35.0


def trend_for_health(health: float) -> MarketTrend:
    if health > BULL_THRESHOLD:
        return MarketTrend.BULL
    if health < BEAR_THRESHOLD:
        return MarketTrend.BEAR
    return MarketTrend.STABLE


class EconomySimulator:
    """Evolves market health and trend over in-game days."""

    def __init__(
        self,
        initial: Optional[MacroMarketState] = None,
        seed: Optional[int] = None,
        weekly_swing: float = 3.0,
        monthly_swing: float = 5.0,
    ):
        self._state = initial or MacroMarketState()
        self._rng = np.random.default_rng(seed)
        self.weekly_swing = weekly_swing
        self.monthly_swing = monthly_swing

    @property
    def state(self) -> MacroMarketState:
        return self._state

    def set_state(self, state: MacroMarketState) -> None:
        logger.info(f"Macro state overridden: trend={state.trend.value}, health={state.health:.1f}")
        self._state = state

    def process_weekly_update(self) -> MacroMarketState:
        return self._shift(self.weekly_swing, "Weekly")

    def process_monthly_update(self) -> MacroMarketState:
        return self._shift(self.monthly_swing, "Monthly")

    def on_day_rollover(self, day_counter: int) -> MacroMarketState:
        """Apply weekly / monthly updates due on *day_counter*."""
        if day_counter > 0 and day_counter % 7 == 0:
            self.process_weekly_update()
        if day_counter > 0 and day_counter % 30 == 0:
            self.process_monthly_update()
        return self._state

    def _shift(self, swing: float, label: str) -> MacroMarketState:
        change = float(self._rng.uniform(-swing, swing))
        health = min(100.0, max(0.0, self._state.health + change))
        self._state = MacroMarketState(trend=trend_for_health(health), health=health)
        logger.info(
            f"{label} economy update: health {health:.1f} "
            f"({self._state.health_category.value}), trend {self._state.trend.value}"
        )
        return self._state
