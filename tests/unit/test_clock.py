"""
test_clock.py
"""
import pytest

from src.marketsim.market.types import ClockReading
from src.marketsim.scheduler.clock import SimulatedClock


def test_advance_publishes_one_event_per_step():
    clock = SimulatedClock(ClockReading.at(2025, 1, 6, 22))
    events = []
    clock.bus.subscribe(events.append)

    clock.advance_hours(3)

    assert len(events) == 1
    assert events[0].day_changed
    assert clock.reading.calendar_date.day == 7
    assert clock.reading.hour == 1
    assert clock.day_counter == 1


def test_sub_hour_moves_are_silent():
    clock = SimulatedClock(ClockReading.at(2025, 1, 6, 10))
    events = []
    clock.bus.subscribe(events.append)

    assert clock.advance_hours(0.25) is None
    assert events == []


def test_unsubscribe_and_backwards_moves():
    clock = SimulatedClock(ClockReading.at(2025, 1, 6, 10))
    events = []
    unsubscribe = clock.bus.subscribe(events.append)
    unsubscribe()

    clock.advance_hours(2)
    assert events == []
    assert len(clock.bus) == 0

    with pytest.raises(ValueError):
        clock.advance_hours(-1)


def test_day_counter_spans_multi_day_jumps():
    clock = SimulatedClock(ClockReading.at(2025, 1, 6, 12))
    clock.advance_hours(24 * 7)

    assert clock.day_counter == 7
    assert clock.reading.weekday == 0
