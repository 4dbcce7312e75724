"""
Reference game clock.

The real day-advance mechanism lives outside the engine.  This minimal
implementation exposes the same surface (current reading plus change
notifications on the event bus) so the engine can be driven from the CLI,
the replay script and tests.
"""
from datetime import datetime, timedelta
from typing import Optional

from src.marketsim.market.types import ClockReading
from src.marketsim.scheduler.events import ClockEvent, EventBus


class SimulatedClock:
    """In-game clock that publishes hour/day crossings to an ``EventBus``."""

    def __init__(self, start: ClockReading, bus: Optional[EventBus] = None):
        self._reading = start
        self.bus = bus or EventBus()
        self.day_counter = 0

    @property
    def reading(self) -> ClockReading:
        return self._reading

    def set_reading(self, reading: ClockReading) -> Optional[ClockEvent]:
        """Jump to *reading*; publishes an event if an hour or day was crossed."""
        previous = self._reading
        self._reading = reading

        event = ClockEvent(previous=previous, current=reading)
        if not event.hour_changed:
            return None

        if event.day_changed:
            self.day_counter += abs((reading.calendar_date - previous.calendar_date).days)
        self.bus.publish(event)
        return event

    def advance_hours(self, hours: float) -> Optional[ClockEvent]:
        """Move the clock forward by *hours* of game time in a single step."""
        if hours < 0:
            raise ValueError("The game clock only moves forward")

        current = self._reading
        start = datetime(current.year, current.month, current.day) + timedelta(
            hours=current.hour_fraction / 100 * 24
        )
        moved = start + timedelta(hours=hours)
        midnight = datetime(moved.year, moved.month, moved.day)
        fraction = (moved - midnight).total_seconds() / 86400 * 100

        return self.set_reading(
            ClockReading(
                day=moved.day,
                month=moved.month,
                year=moved.year,
                hour_fraction=min(fraction, 100.0),
            )
        )
