"""
Per-asset-class trading calendar.

Maps a game-clock reading to an open/closed status with a reason code.
Calendar-bound classes (stocks, bonds, property) trade on weekdays inside
an intraday session window; crypto and miscellaneous instruments trade
continuously.

Boundary detection works on *stored* statuses: the scheduler keeps the
status map computed at its previous transition and compares it with a
freshly computed one, so a boundary is never inferred by reading the
clock twice.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.marketsim.catalog.schemas import AssetClass
from src.marketsim.market.types import CalendarReason, CalendarStatus, ClockReading

StatusMap = Dict[AssetClass, CalendarStatus]

_CONTINUOUS = CalendarStatus(is_open=True, reason=CalendarReason.CONTINUOUS)


class SessionWindow(BaseModel):
    """Intraday trading window, ``open_hour <= hour < close_hour``."""

    model_config = ConfigDict(frozen=True)

    open_hour: int = Field(9, ge=0, le=23)
    close_hour: int = Field(16, ge=1, le=24)

    @model_validator(mode="after")
    def open_before_close(self) -> "SessionWindow":
        if self.open_hour >= self.close_hour:
            raise ValueError(
                f"open_hour ({self.open_hour}) must be before close_hour ({self.close_hour})"
            )
        return self


class CalendarTransition(BaseModel):
    model_config = ConfigDict(frozen=True)

    asset_class: AssetClass
    opened: bool

    @property
    def closed(self) -> bool:
        return not self.opened


class TradingCalendar:
    """Pure mapping from (asset class, clock reading) to ``CalendarStatus``."""

    def __init__(self, sessions: Optional[Dict[AssetClass, SessionWindow]] = None):
        """
        Args:
            sessions: Session window per calendar-bound class.  Classes not
                      listed fall back to the 09:00–16:00 default.
        """
        self.sessions: Dict[AssetClass, SessionWindow] = {
            kind: SessionWindow() for kind in AssetClass if kind.calendar_bound
        }
        if sessions:
            for kind, window in sessions.items():
                if not kind.calendar_bound:
                    raise ValueError(f"{kind.value} trades continuously; no session window")
                self.sessions[kind] = window

    def status(self, asset_class: AssetClass, reading: ClockReading) -> CalendarStatus:
        if not asset_class.calendar_bound:
            return _CONTINUOUS

        if reading.is_weekend:
            return CalendarStatus(is_open=False, reason=CalendarReason.WEEKEND_CLOSED)

        window = self.sessions[asset_class]
        hour = reading.hour
        if hour < window.open_hour:
            return CalendarStatus(is_open=False, reason=CalendarReason.PRE_MARKET)
        if hour >= window.close_hour:
            return CalendarStatus(is_open=False, reason=CalendarReason.AFTER_HOURS)
        return CalendarStatus(is_open=True, reason=CalendarReason.WEEKDAY_OPEN)

    def statuses(self, reading: ClockReading) -> StatusMap:
        """Status of every class computed from a single reading."""
        return {kind: self.status(kind, reading) for kind in AssetClass}

    def is_open(self, asset_class: AssetClass, reading: ClockReading) -> bool:
        return self.status(asset_class, reading).is_open

    @staticmethod
    def transitions(previous: StatusMap, current: StatusMap) -> List[CalendarTransition]:
        """Classes whose open/closed state differs between two status maps."""
        changes: List[CalendarTransition] = []
        for kind, now in current.items():
            before = previous.get(kind)
            if before is None or before.is_open == now.is_open:
                continue
            changes.append(CalendarTransition(asset_class=kind, opened=now.is_open))
        return changes
