"""
Update scheduler.

Control-flow backbone of the engine.  It decides when the whole catalog is
re-priced and drives the generator → ledger → notifier pipeline.

States::

    IDLE ──timer, throttle elapsed──▶ TICKING ──batch applied──▶ IDLE
    IDLE ──clock boundary──▶ BOUNDARY_RECOVERY ──eager tick +
                                                 deferred check──▶ IDLE

* Timer ticks are throttled: a tick inside the throttle window is a no-op.
* Clock events that cross market open, market close, a day rollover or a
  weekday/weekend edge trigger an eager tick that ignores the throttle.
  The ledger is snapshotted first, and a persistence check is scheduled
  after ``verification_delay_ms`` to restore any price the update dropped.
* Only one tick runs at a time.  A timer tick that finds another tick in
  progress is refused; a boundary that finds the scheduler busy is queued
  and replayed by the next timer tick.  Recoveries always price against
  the clock as read once the tick lock is held.
"""
import itertools
import threading
import time
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from loguru import logger

from src.marketsim.catalog.loader import AssetCatalog
from src.marketsim.catalog.schemas import Asset
from src.marketsim.ledger.guard import PersistenceGuard
from src.marketsim.ledger.ledger import PriceLedger
from src.marketsim.market.calendar import StatusMap, TradingCalendar
from src.marketsim.market.generator import PriceGenerator
from src.marketsim.market.types import ClockReading, MacroMarketState, TickBatch
from src.marketsim.portfolio.base import OwnedAssetsProvider
from src.marketsim.scheduler.config import SchedulerConfig
from src.marketsim.scheduler.events import ClockEvent, EventBus
from src.marketsim.scheduler.notifier import RecalculationNotifier

# Longest a boundary waits for an in-flight tick before being queued.
BOUNDARY_LOCK_TIMEOUT_S = 2.0


class SchedulerState(str, Enum):
    IDLE = "idle"
    TICKING = "ticking"
    BOUNDARY_RECOVERY = "boundary_recovery"


class BoundaryKind(str, Enum):
    MARKET_OPEN = "market_open"
    MARKET_CLOSE = "market_close"
    DAY_ROLLOVER = "day_rollover"
    WEEKEND = "weekend_transition"


class UpdateScheduler:
    """Throttled, boundary-aware driver of catalog-wide price updates."""

    def __init__(
        self,
        catalog: AssetCatalog,
        ledger: PriceLedger,
        generator: PriceGenerator,
        calendar: TradingCalendar,
        notifier: RecalculationNotifier,
        reading_source: Callable[[], ClockReading],
        macro_source: Callable[[], MacroMarketState],
        config: SchedulerConfig = SchedulerConfig(),
        guard: Optional[PersistenceGuard] = None,
        owned: Optional[OwnedAssetsProvider] = None,
        time_source: Callable[[], float] = time.monotonic,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        """
        Args:
            catalog: Instruments to price on every tick.
            ledger: Target of every batch.
            generator: Next-price sampler.
            calendar: Trading calendar used to derive per-class status.
            notifier: Fired once per applied batch.
            reading_source: Returns the clock collaborator's current reading.
            macro_source: Returns the economy collaborator's current state.
            config: Throttle, chunking and verification settings.
            guard: Persistence guard for post-boundary checks.
            owned: Owned-assets collaborator (priority ordering and
                   ``refresh_owned``).
            time_source: Monotonic real-time clock in seconds.
            timer_factory: ``threading.Timer``-compatible factory used for
                           deferred verification passes.
        """
        self.catalog = catalog
        self.ledger = ledger
        self.generator = generator
        self.calendar = calendar
        self.notifier = notifier
        self.config = config
        self.guard = guard or PersistenceGuard()
        self.owned = owned

        self._reading_source = reading_source
        self._macro_source = macro_source
        self._time = time_source
        self._timer_factory = timer_factory

        self._tick_lock = threading.Lock()
        self._state = SchedulerState.IDLE
        self._tick = 0
        self._last_tick_time: Optional[float] = None

        # Baseline for boundary detection; only clock events move it.
        self._boundary_statuses: StatusMap = calendar.statuses(reading_source())
        self._queued_boundaries: List[BoundaryKind] = []

        self._pending_checks: Dict[int, threading.Timer] = {}
        self._check_ids = itertools.count(1)
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._stopped = False

        self.ticks_applied = 0
        self.ticks_skipped = 0
        self.overlaps_refused = 0
        self.recoveries = 0
        self.verifications = 0
        self.prices_restored = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def current_tick(self) -> int:
        return self._tick

    @property
    def pending_verifications(self) -> int:
        return len(self._pending_checks)

    def stats(self) -> Dict[str, int]:
        return {
            "ticks_applied": self.ticks_applied,
            "ticks_skipped": self.ticks_skipped,
            "overlaps_refused": self.overlaps_refused,
            "recoveries": self.recoveries,
            "verifications": self.verifications,
            "prices_restored": self.prices_restored,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def attach(self, bus: EventBus) -> None:
        """Subscribe to clock events published on *bus*."""
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = bus.subscribe(self.handle_clock_event)

    def start(self) -> None:
        """Run the throttled timer on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            logger.warning("Scheduler already running")
            return

        self._stopped = False
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop, name="market-price-scheduler", daemon=True,
        )
        self._thread.start()
        logger.info(
            f"Price scheduler started (throttle {self.config.throttle_interval_ms} ms, "
            f"batch size {self.config.batch_size})"
        )

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the timer and abandon pending verification passes.

        An in-flight tick is allowed to finish so the ledger is never left
        with a partially applied batch.
        """
        self._stopped = True
        self._stop_event.set()

        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Scheduler thread did not exit within timeout")
            self._thread = None

        for timer in list(self._pending_checks.values()):
            timer.cancel()
        abandoned = len(self._pending_checks)
        self._pending_checks.clear()

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        logger.info(f"Price scheduler stopped ({abandoned} pending checks abandoned)")

    def _run_loop(self) -> None:
        poll = max(self.config.throttle_interval_s, 0.05)
        self.on_timer()
        while not self._stop_event.wait(poll):
            self.on_timer()

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def on_timer(self) -> Optional[TickBatch]:
        """Timer expiry: tick unless still inside the throttle window."""
        if self._queued_boundaries:
            boundaries, self._queued_boundaries = self._queued_boundaries, []
            logger.info(f"Replaying queued boundary {[b.value for b in boundaries]}")
            return self._recover(boundaries)

        if not self._tick_lock.acquire(blocking=False):
            self.overlaps_refused += 1
            logger.debug("Tick refused: previous tick still running")
            return None

        try:
            now = self._time()
            if (
                self._last_tick_time is not None
                and now - self._last_tick_time < self.config.throttle_interval_s
            ):
                self.ticks_skipped += 1
                logger.debug(
                    f"Skipping tick: {(now - self._last_tick_time) * 1000:.0f} ms since last, "
                    f"throttle {self.config.throttle_interval_ms} ms"
                )
                return None

            self._state = SchedulerState.TICKING
            return self._execute(self._reading_source(), reason="timer")
        finally:
            self._state = SchedulerState.IDLE
            self._tick_lock.release()

    def run_now(self, reason: str = "manual") -> Optional[TickBatch]:
        """Tick immediately, ignoring the throttle."""
        if not self._tick_lock.acquire(blocking=False):
            self.overlaps_refused += 1
            logger.debug(f"{reason} tick refused: previous tick still running")
            return None

        try:
            self._state = SchedulerState.TICKING
            return self._execute(self._reading_source(), reason=reason)
        finally:
            self._state = SchedulerState.IDLE
            self._tick_lock.release()

    def refresh_owned(self) -> Optional[TickBatch]:
        """Eagerly re-price only the owned positions."""
        if self.owned is None:
            return None

        owned_ids = set(self.owned.owned_ids())
        assets = [a for a in self.catalog if a.id in owned_ids]
        if not assets:
            return None

        if not self._tick_lock.acquire(blocking=False):
            self.overlaps_refused += 1
            logger.debug("Owned refresh refused: previous tick still running")
            return None

        try:
            self._state = SchedulerState.TICKING
            return self._execute(self._reading_source(), reason="owned_refresh", assets=assets)
        finally:
            self._state = SchedulerState.IDLE
            self._tick_lock.release()

    def handle_clock_event(self, event: ClockEvent) -> List[BoundaryKind]:
        """React to an hour/day change published by the clock collaborator.

        Returns:
            Boundaries detected for this event (empty if none).
        """
        current = self.calendar.statuses(event.current)
        changes = self.calendar.transitions(self._boundary_statuses, current)
        self._boundary_statuses = current

        boundaries: List[BoundaryKind] = []
        bound_changes = [c for c in changes if c.asset_class.calendar_bound]
        if any(c.opened for c in bound_changes):
            boundaries.append(BoundaryKind.MARKET_OPEN)
        if any(c.closed for c in bound_changes):
            boundaries.append(BoundaryKind.MARKET_CLOSE)
        if event.day_changed:
            boundaries.append(BoundaryKind.DAY_ROLLOVER)
        if event.previous.is_weekend != event.current.is_weekend:
            boundaries.append(BoundaryKind.WEEKEND)

        if not boundaries:
            logger.debug(f"Hour changed to {event.current.hour}:00; no market boundary")
            return boundaries

        logger.info(
            f"Market boundary at {event.current.calendar_date} {event.current.hour:02d}:00: "
            f"{[b.value for b in boundaries]}"
        )

        self._recover(boundaries)
        return boundaries

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _recover(self, boundaries: Sequence[BoundaryKind]) -> Optional[TickBatch]:
        """Eager tick for *boundaries*, priced from the clock as read under the lock."""
        if not self._tick_lock.acquire(timeout=BOUNDARY_LOCK_TIMEOUT_S):
            logger.warning("Scheduler busy; queueing boundary recovery for next timer tick")
            for b in boundaries:
                if b not in self._queued_boundaries:
                    self._queued_boundaries.append(b)
            return None

        try:
            self._state = SchedulerState.BOUNDARY_RECOVERY
            self.recoveries += 1

            pre_snapshot = self.ledger.snapshot()
            reason = "+".join(b.value for b in boundaries)
            batch = self._execute(self._reading_source(), reason=reason)
        finally:
            self._state = SchedulerState.IDLE
            self._tick_lock.release()

        # Scheduled outside the lock so an immediate timer can take it.
        self._schedule_verification(pre_snapshot)
        return batch

    def _execute(
        self,
        reading: ClockReading,
        reason: str,
        assets: Optional[Sequence[Asset]] = None,
    ) -> TickBatch:
        """Price, apply and announce one batch.  Caller holds the tick lock."""
        # One macro snapshot and one status map for the whole batch.
        macro = self._macro_source()
        statuses = self.calendar.statuses(reading)

        self._tick += 1
        priority = self.owned.owned_ids() if (self.owned and self.config.prioritize_owned) else []

        batch = self.generator.generate_batch(
            assets=list(assets) if assets is not None else list(self.catalog),
            previous_prices=self.ledger.snapshot(),
            statuses=statuses,
            state=macro,
            tick=self._tick,
            reason=reason,
            priority_ids=priority,
            batch_size=self.config.batch_size,
        )

        self.ledger.apply_batch(batch)
        self._last_tick_time = self._time()
        self.ticks_applied += 1

        open_classes = sorted(k.value for k, s in statuses.items() if s.is_open)
        logger.debug(
            f"Tick {self._tick} ({reason}): {len(batch)} prices updated; "
            f"open classes {open_classes}; trend {macro.trend.value}"
        )

        self.notifier.notify(batch)
        return batch

    def _schedule_verification(self, pre_snapshot: Dict[str, float]) -> None:
        check_id = next(self._check_ids)
        timer = self._timer_factory(
            self.config.verification_delay_s,
            self._verify,
            args=(check_id, pre_snapshot),
        )
        timer.daemon = True
        self._pending_checks[check_id] = timer
        timer.start()

    def _verify(self, check_id: int, pre_snapshot: Dict[str, float]) -> int:
        if self._pending_checks.pop(check_id, None) is None or self._stopped:
            return 0

        with self._tick_lock:
            self.verifications += 1
            restored = self.guard.verify(pre_snapshot, self.ledger, tick=self._tick)
            if restored:
                self.prices_restored += restored
                self.notifier.notify(self.guard.last_restore)
        return restored
