"""
Market engine registry.

Wires the catalog, economy, calendar, volatility model, generator, ledger,
guard, notifier and scheduler into one service object with an explicit
lifecycle:

  1. ``MarketEngine(...)`` builds every component and subscribes the
     economy and the scheduler to the clock's event bus.
  2. ``start()`` restores the durable snapshot (if configured), runs an
     initial tick and starts the throttled timer.
  3. ``shutdown()`` stops the scheduler, drops pending verifications and
     saves the snapshot.

Consumers hold a reference to the engine (or to its ledger); there is no
module-level state.
"""
import threading
import time
from typing import Callable, Dict, Optional

from loguru import logger

from src.marketsim.catalog.loader import AssetCatalog
from src.marketsim.catalog.schemas import AssetClass
from src.marketsim.ledger.guard import PersistenceGuard
from src.marketsim.ledger.ledger import PriceLedger
from src.marketsim.ledger.store import LedgerStore
from src.marketsim.market.calendar import TradingCalendar
from src.marketsim.market.economy import EconomySimulator
from src.marketsim.market.generator import PriceGenerator
from src.marketsim.market.types import ClockReading, TickBatch
from src.marketsim.market.volatility import VolatilityModel
from src.marketsim.portfolio.holdings import Portfolio
from src.marketsim.portfolio.valuation import PortfolioValuator
from src.marketsim.scheduler.clock import SimulatedClock
from src.marketsim.scheduler.events import ClockEvent
from src.marketsim.scheduler.notifier import RecalculationNotifier
from src.marketsim.scheduler.scheduler import UpdateScheduler
from src.marketsim.utils.settings import EngineSettings

DEFAULT_START = ClockReading(day=6, month=1, year=2025, hour_fraction=0.0)


class MarketEngine:
    """Service object owning every market-price component."""

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        catalog: Optional[AssetCatalog] = None,
        clock: Optional[SimulatedClock] = None,
        economy: Optional[EconomySimulator] = None,
        portfolio: Optional[Portfolio] = None,
        cash: float = 0.0,
        time_source: Callable[[], float] = time.monotonic,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self.settings = settings or EngineSettings()

        if catalog is None:
            catalog = (
                AssetCatalog.from_json(self.settings.catalog_file)
                if self.settings.catalog_file
                else AssetCatalog.default()
            )
        self.catalog = catalog

        self.clock = clock or SimulatedClock(DEFAULT_START)
        self.economy = economy or EconomySimulator(seed=self.settings.seed)
        self.portfolio = portfolio or Portfolio()

        self.calendar = TradingCalendar()
        self.volatility = VolatilityModel()
        self.generator = PriceGenerator(self.volatility, seed=self.settings.seed)
        self.ledger = PriceLedger(self.catalog, owned=self.portfolio)
        self.guard = PersistenceGuard()
        self.notifier = RecalculationNotifier()
        self.store = LedgerStore(self.settings.state_file) if self.settings.state_file else None

        self.scheduler = UpdateScheduler(
            catalog=self.catalog,
            ledger=self.ledger,
            generator=self.generator,
            calendar=self.calendar,
            notifier=self.notifier,
            reading_source=lambda: self.clock.reading,
            macro_source=lambda: self.economy.state,
            config=self.settings.scheduler_config(),
            guard=self.guard,
            owned=self.portfolio,
            time_source=time_source,
            timer_factory=timer_factory,
        )

        self.valuator = PortfolioValuator(self.portfolio, self.ledger, cash=cash)
        self.valuator.attach(self.notifier)

        # Economy first so a rollover batch prices against the new macro state.
        self._unsubscribe_economy = self.clock.bus.subscribe(self._on_clock_event)
        self.scheduler.attach(self.clock.bus)

        self._running = False
        logger.info(
            f"Market engine ready: {len(self.catalog)} assets, "
            f"device={self.settings.device}, mode={self.settings.performance_mode}"
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> Optional[TickBatch]:
        """Restore the durable snapshot and seed the ledger with one tick."""
        if self.store is not None:
            self.store.restore_into(self.ledger, floor_of=self.generator.floor_price)
        return self.scheduler.run_now(reason="startup")

    def start(self) -> None:
        if self._running:
            return
        self.initialize()
        self.scheduler.start()
        self._running = True

    def shutdown(self, save: bool = True) -> None:
        self.scheduler.stop()
        self._unsubscribe_economy()
        self.valuator.detach()
        if save and self.store is not None:
            self.store.save(self.ledger.snapshot())
        self._running = False
        logger.info(f"Market engine shut down. Stats: {self.scheduler.stats()}")

    def __enter__(self) -> "MarketEngine":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def get_price(self, asset_id: str) -> float:
        return self.ledger.get(asset_id)

    def get_all_prices(self, asset_class: AssetClass) -> Dict[str, float]:
        return self.ledger.get_all_prices(asset_class)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_clock_event(self, event: ClockEvent) -> None:
        if event.day_changed:
            self.economy.on_day_rollover(self.clock.day_counter)
