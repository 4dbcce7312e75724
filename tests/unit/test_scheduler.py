"""
test_scheduler.py
"""
from types import MappingProxyType

import pytest

from src.marketsim.catalog.schemas import AssetClass
from src.marketsim.ledger.ledger import PriceLedger
from src.marketsim.market.calendar import TradingCalendar
from src.marketsim.market.generator import PriceGenerator
from src.marketsim.market.types import ClockReading, MacroMarketState, TickBatch
from src.marketsim.portfolio.holdings import Holding, Portfolio
from src.marketsim.scheduler import scheduler as scheduler_module
from src.marketsim.scheduler.clock import SimulatedClock
from src.marketsim.scheduler.config import SchedulerConfig
from src.marketsim.scheduler.events import ClockEvent
from src.marketsim.scheduler.notifier import RecalculationNotifier
from src.marketsim.scheduler.scheduler import BoundaryKind, SchedulerState, UpdateScheduler


class DroppingLedger(PriceLedger):
    """Ledger that can lose a record, the way a careless re-initialisation would."""

    def drop(self, asset_id):
        self._records = MappingProxyType(
            {k: v for k, v in self._records.items() if k != asset_id}
        )


class Harness:
    def __init__(self, catalog, start, fake_time, timer_factory, owned=None, **config):
        self.clock = SimulatedClock(start)
        self.ledger = DroppingLedger(catalog, owned=owned)
        self.notifier = RecalculationNotifier()
        self.batches = []
        self.notifier.subscribe(self.batches.append)
        self.macro = MacroMarketState()
        self.timer_factory = timer_factory
        self.scheduler = UpdateScheduler(
            catalog=catalog,
            ledger=self.ledger,
            generator=PriceGenerator(seed=11),
            calendar=TradingCalendar(),
            notifier=self.notifier,
            reading_source=lambda: self.clock.reading,
            macro_source=lambda: self.macro,
            config=SchedulerConfig(**{"throttle_interval_ms": 2000, **config}),
            owned=owned,
            time_source=fake_time,
            timer_factory=timer_factory,
        )
        self.scheduler.attach(self.clock.bus)


@pytest.fixture
def make_harness(catalog, fake_time, timer_factory):
    def _make(start, **kwargs):
        return Harness(catalog, start, fake_time, timer_factory, **kwargs)
    return _make


def test_timer_ticks_inside_throttle_window_are_skipped(make_harness, monday_open, fake_time):
    h = make_harness(monday_open)

    assert h.scheduler.on_timer() is not None
    fake_time.advance(1.0)
    assert h.scheduler.on_timer() is None
    fake_time.advance(1.5)
    assert h.scheduler.on_timer() is not None

    assert h.scheduler.ticks_applied == 2
    assert h.scheduler.ticks_skipped == 1
    assert h.scheduler.current_tick == 2
    assert h.scheduler.state is SchedulerState.IDLE


def test_run_now_ignores_throttle(make_harness, monday_open):
    h = make_harness(monday_open)
    h.scheduler.on_timer()
    batch = h.scheduler.run_now()

    assert batch.reason == "manual"
    assert h.scheduler.ticks_applied == 2


def test_weekend_stock_price_is_preserved_while_crypto_moves(
    make_harness, saturday_noon, fake_time,
):
    h = make_harness(saturday_noon)
    h.ledger.apply_batch(TickBatch(tick=0, entries=[("acme", 52.30), ("bigcoin", 45000.0)]))

    crypto_prices = []
    for _ in range(10):
        fake_time.advance(5)
        h.scheduler.on_timer()
        crypto_prices.append(h.ledger.get("bigcoin"))

    assert h.ledger.get("acme") == 52.30
    assert h.ledger.record("acme").last_updated_tick == 0
    assert len(set(crypto_prices)) == len(crypto_prices)


def test_one_batch_one_notification(make_harness, monday_open):
    h = make_harness(monday_open)
    h.scheduler.run_now()

    assert h.notifier.batches_notified == 1
    assert len(h.batches) == 1
    assert len(h.batches[0]) == len(h.ledger)


def test_market_open_triggers_single_recovery_and_verification(make_harness):
    h = make_harness(ClockReading.at(2025, 1, 6, 8))
    h.scheduler.run_now(reason="startup")
    acme_before_open = h.ledger.get("acme")

    event = h.clock.advance_hours(1)

    assert event is not None
    assert h.scheduler.recoveries == 1
    assert h.batches[-1].reason == BoundaryKind.MARKET_OPEN.value
    assert h.scheduler.pending_verifications == 1

    timer = h.timer_factory.timers[0]
    assert timer.started and timer.daemon
    assert timer.interval == pytest.approx(0.25)

    # Lose a record between the eager tick and the deferred check.
    h.ledger.drop("acme")
    assert "acme" not in h.ledger

    restored = timer.fire()

    assert restored == 1
    assert h.ledger.get("acme") == acme_before_open
    assert h.scheduler.verifications == 1
    assert h.scheduler.prices_restored == 1
    assert h.batches[-1].reason == "restore"
    assert h.scheduler.pending_verifications == 0


def test_hour_change_without_boundary_does_not_recover(make_harness, monday_open):
    h = make_harness(monday_open)
    boundaries = h.scheduler.handle_clock_event(
        ClockEvent(previous=monday_open, current=ClockReading.at(2025, 1, 6, 11))
    )

    assert boundaries == []
    assert h.scheduler.recoveries == 0
    assert h.timer_factory.timers == []


def test_friday_night_rollover_reports_every_boundary_once(make_harness):
    h = make_harness(ClockReading.at(2025, 1, 10, 23))
    h.clock.advance_hours(1)

    assert h.scheduler.recoveries == 1
    assert h.scheduler.ticks_applied == 1
    reason = h.batches[-1].reason
    assert BoundaryKind.DAY_ROLLOVER.value in reason
    assert BoundaryKind.WEEKEND.value in reason
    assert BoundaryKind.MARKET_OPEN.value not in reason


def test_market_close_is_detected(make_harness):
    h = make_harness(ClockReading.at(2025, 1, 6, 15))
    boundaries = h.scheduler.handle_clock_event(
        ClockEvent(previous=h.clock.reading, current=ClockReading.at(2025, 1, 6, 16))
    )
    assert boundaries == [BoundaryKind.MARKET_CLOSE]


def test_overlapping_tick_is_refused(make_harness, monday_open, fake_time):
    h = make_harness(monday_open, throttle_interval_ms=0)
    nested = []

    def reenter(batch):
        if not nested:
            nested.append(h.scheduler.on_timer())

    h.notifier.subscribe(reenter)
    h.scheduler.on_timer()

    assert nested == [None]
    assert h.scheduler.overlaps_refused == 1
    assert h.scheduler.ticks_applied == 1


def test_boundary_during_busy_tick_is_queued_and_replayed(
    make_harness, monday_open, monkeypatch,
):
    monkeypatch.setattr(scheduler_module, "BOUNDARY_LOCK_TIMEOUT_S", 0.01)
    h = make_harness(monday_open, throttle_interval_ms=0)
    closing = ClockEvent(previous=monday_open, current=ClockReading.at(2025, 1, 6, 16))
    fired = []

    def boundary_mid_tick(batch):
        if not fired:
            fired.append(h.scheduler.handle_clock_event(closing))

    h.notifier.subscribe(boundary_mid_tick)
    h.scheduler.on_timer()

    assert fired == [[BoundaryKind.MARKET_CLOSE]]
    assert h.scheduler.recoveries == 0

    replayed = h.scheduler.on_timer()
    assert replayed.reason == BoundaryKind.MARKET_CLOSE.value
    assert h.scheduler.recoveries == 1
    assert h.scheduler.pending_verifications == 1


def test_stop_cancels_pending_verifications(make_harness):
    h = make_harness(ClockReading.at(2025, 1, 6, 8))
    h.clock.advance_hours(1)
    timer = h.timer_factory.timers[0]

    h.scheduler.stop()

    assert timer.cancelled
    assert h.scheduler.pending_verifications == 0
    # Unsubscribed from the clock: further boundaries are ignored.
    h.clock.advance_hours(7)
    assert h.scheduler.recoveries == 1


def test_refresh_owned_only_touches_held_assets(make_harness, monday_open, catalog):
    portfolio = Portfolio([
        Holding(asset_id="bigcoin", asset_class=AssetClass.CRYPTO, quantity=0.5, purchase_price=44000.0),
    ])
    h = make_harness(monday_open, owned=portfolio)

    batch = h.scheduler.refresh_owned()

    assert batch.reason == "owned_refresh"
    assert batch.as_dict().keys() == {"bigcoin"}


def test_owned_assets_are_priced_first(make_harness, monday_open):
    portfolio = Portfolio([
        Holding(asset_id="treasury_5y", asset_class=AssetClass.BOND, quantity=2, purchase_price=990.0),
    ])
    h = make_harness(monday_open, owned=portfolio)

    batch = h.scheduler.run_now()
    assert batch.entries[0][0] == "treasury_5y"


def test_stats_snapshot(make_harness, monday_open):
    h = make_harness(monday_open)
    h.scheduler.run_now()
    stats = h.scheduler.stats()

    assert stats["ticks_applied"] == 1
    assert set(stats) == {
        "ticks_applied", "ticks_skipped", "overlaps_refused",
        "recoveries", "verifications", "prices_restored",
    }


def test_overnight_jump_to_next_open_recovers_exactly_once(make_harness):
    h = make_harness(ClockReading.at(2025, 1, 6, 16))
    h.scheduler.run_now(reason="startup")
    pre = h.ledger.snapshot()

    h.clock.set_reading(ClockReading.at(2025, 1, 7, 9))

    assert h.scheduler.recoveries == 1
    assert len(h.timer_factory.timers) == 1
    reason = h.batches[-1].reason
    assert BoundaryKind.MARKET_OPEN.value in reason
    assert BoundaryKind.DAY_ROLLOVER.value in reason

    h.ledger.drop("treasury_5y")
    assert h.timer_factory.timers[0].fire() == 1
    assert h.ledger.get("treasury_5y") == pre["treasury_5y"]


def test_queued_boundary_is_replayed_against_the_current_clock(make_harness, monkeypatch):
    monkeypatch.setattr(scheduler_module, "BOUNDARY_LOCK_TIMEOUT_S", 0.01)
    h = make_harness(ClockReading.at(2025, 1, 6, 8), throttle_interval_ms=0)
    opened_mid_tick = []

    def open_during_tick(batch):
        if not opened_mid_tick:
            opened_mid_tick.append(h.clock.advance_hours(1))

    unsubscribe = h.notifier.subscribe(open_during_tick)
    h.scheduler.on_timer()
    unsubscribe()
    assert h.scheduler.recoveries == 0

    # Market closes, then the clock moves on into after-hours.
    h.clock.advance_hours(7)
    h.clock.advance_hours(1)
    assert h.scheduler.recoveries == 1
    closed_price = h.ledger.get("acme")
    closed_tick = h.ledger.record("acme").last_updated_tick

    replayed = h.scheduler.on_timer()

    assert replayed.reason == BoundaryKind.MARKET_OPEN.value
    assert h.scheduler.recoveries == 2
    assert h.ledger.get("acme") == closed_price
    assert h.ledger.record("acme").last_updated_tick == closed_tick
    assert "acme" not in replayed.as_dict()


def test_boundaries_queued_while_busy_are_merged(make_harness, monkeypatch):
    monkeypatch.setattr(scheduler_module, "BOUNDARY_LOCK_TIMEOUT_S", 0.01)
    start = ClockReading.at(2025, 1, 6, 8)
    h = make_harness(start, throttle_interval_ms=0)
    opening = ClockEvent(previous=start, current=ClockReading.at(2025, 1, 6, 9))
    closing = ClockEvent(previous=opening.current, current=ClockReading.at(2025, 1, 6, 16))
    handled = []

    def boundaries_mid_tick(batch):
        if not handled:
            handled.append(h.scheduler.handle_clock_event(opening))
            handled.append(h.scheduler.handle_clock_event(closing))

    h.notifier.subscribe(boundaries_mid_tick)
    h.scheduler.on_timer()
    assert handled == [[BoundaryKind.MARKET_OPEN], [BoundaryKind.MARKET_CLOSE]]

    replayed = h.scheduler.on_timer()

    assert replayed.reason == "market_open+market_close"
    assert h.scheduler.recoveries == 1
    assert h.scheduler.pending_verifications == 1


def test_crypto_record_advances_on_every_tick(make_harness, saturday_noon, fake_time):
    h = make_harness(saturday_noon)

    for _ in range(20):
        fake_time.advance(5)
        h.scheduler.on_timer()
        for asset_id in ("bigcoin", "dust"):
            assert h.ledger.record(asset_id).last_updated_tick == h.scheduler.current_tick
