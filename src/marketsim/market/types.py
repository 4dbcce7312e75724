"""
Data contracts for the price simulation core.

Covers the macro market snapshot, the game-clock reading supplied by the
clock collaborator, derived calendar statuses, volatility parameters and
the ledger's price records / tick batches.  Everything here is an
immutable pydantic model so a snapshot taken at the start of a tick can be
shared across the whole batch without copying.
"""
import math
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class MarketTrend(str, Enum):
    BULL = "bull"
    BEAR = "bear"
    STABLE = "stable"


class MarketHealth(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"
    CRITICAL = "critical"


def health_category(health: float) -> MarketHealth:
    """Bucket a 0–100 health score into a ``MarketHealth`` category."""
    if health >= 80:
        return MarketHealth.EXCELLENT
    if health >= 60:
        return MarketHealth.GOOD
    if health >= 40:
        return MarketHealth.AVERAGE
    if health >= 20:
        return MarketHealth.POOR
    return MarketHealth.CRITICAL


class MacroMarketState(BaseModel):
    """Global indicators that bias every price movement."""

    model_config = ConfigDict(frozen=True)

    trend: MarketTrend = MarketTrend.STABLE
    health: float = Field(50.0, ge=0, le=100, description="Stock market health score")

    @property
    def health_category(self) -> MarketHealth:
        return health_category(self.health)


class ClockReading(BaseModel):
    """A single reading of the in-game clock.

    ``hour_fraction`` is the day's progress on a 0–100 scale, mapped onto
    24 hours.
    """

    model_config = ConfigDict(frozen=True)

    day: int = Field(..., ge=1, le=31)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1)
    hour_fraction: float = Field(0.0, ge=0, le=100)

    @model_validator(mode="after")
    def day_must_exist(self) -> "ClockReading":
        # Raises ValueError for e.g. 31 February.
        date(self.year, self.month, self.day)
        return self

    @classmethod
    def at(cls, year: int, month: int, day: int, hour: float = 0.0) -> "ClockReading":
        """Build a reading from a wall-clock hour (0–24)."""
        return cls(day=day, month=month, year=year, hour_fraction=hour / 24 * 100)

    @property
    def calendar_date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def hour(self) -> int:
        # Epsilon absorbs float error from hour -> fraction -> hour round trips.
        return min(int(math.floor(self.hour_fraction / 100 * 24 + 1e-9)), 23)

    @property
    def weekday(self) -> int:
        """Monday is 0, Sunday is 6."""
        return self.calendar_date.weekday()

    @property
    def is_weekend(self) -> bool:
        return self.weekday >= 5


class CalendarReason(str, Enum):
    WEEKDAY_OPEN = "weekday-open"
    WEEKEND_CLOSED = "weekend-closed"
    PRE_MARKET = "pre-market"
    AFTER_HOURS = "after-hours"
    CONTINUOUS = "continuous"


class CalendarStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_open: bool
    reason: CalendarReason


class VolatilityParams(BaseModel):
    """Per-asset sampling parameters produced by the volatility model."""

    model_config = ConfigDict(frozen=True)

    drift_bias: float = Field(0.0, description="Additive per-tick drift")
    variance_factor: float = Field(..., ge=0, description="Half-width of the uniform perturbation")


class PriceRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset_id: str
    current_price: float = Field(..., gt=0)
    last_updated_tick: int = Field(..., ge=0)


class TickBatch(BaseModel):
    """Ephemeral unit of work produced by one scheduler invocation."""

    model_config = ConfigDict(frozen=True)

    tick: int = Field(..., ge=0)
    reason: str = "timer"
    entries: List[Tuple[str, float]] = Field(default_factory=list)

    @field_validator("entries")
    @classmethod
    def asset_ids_must_be_unique(cls, v: List[Tuple[str, float]]) -> List[Tuple[str, float]]:
        ids = [asset_id for asset_id, _ in v]
        if len(ids) != len(set(ids)):
            raise ValueError("TickBatch contains duplicate asset ids")
        return v

    @classmethod
    def from_prices(cls, prices: Dict[str, float], tick: int, reason: str) -> "TickBatch":
        return cls(tick=tick, reason=reason, entries=list(prices.items()))

    def as_dict(self) -> Dict[str, float]:
        return dict(self.entries)

    def price_of(self, asset_id: str) -> Optional[float]:
        return self.as_dict().get(asset_id)

    def __len__(self) -> int:
        return len(self.entries)
