"""
Shared fixtures for the unit suite.
"""
import pytest
from loguru import logger

from src.marketsim.catalog.loader import AssetCatalog
from src.marketsim.market.types import ClockReading

SMALL_CATALOG = {
    "stock": [
        {"id": "acme", "name": "Acme Corp", "symbol": "ACME", "volatility": "low", "base_price": 100.0},
        {"id": "widgets", "name": "Widget Works", "symbol": "WDGT", "volatility": "high", "base_price": 40.0},
    ],
    "crypto": [
        {"id": "bigcoin", "name": "Big Coin", "symbol": "BIG", "coin_type": "bitcoin",
         "volatility": "very_high", "base_price": 45000.0},
        {"id": "dust", "name": "Dust Token", "symbol": "DUST", "coin_type": "meme",
         "volatility": "extreme", "base_price": 0.01},
    ],
    "bond": [
        {"id": "treasury_5y", "name": "Treasury 5Y", "term_years": 5, "yield_rate": 0.03,
         "volatility": "very_low", "base_price": 1000.0},
    ],
}


class ManualTimer:
    """``threading.Timer`` stand-in that only runs when ``fire()`` is called."""

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.cancelled:
            return None
        return self.function(*self.args, **self.kwargs)


class ManualTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = ManualTimer(interval, function, args, kwargs)
        self.timers.append(timer)
        return timer


class FakeTime:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def quiet_logger():
    logger.remove()
    logger.add(lambda msg: None, level="DEBUG")
    yield
    logger.remove()


@pytest.fixture
def catalog() -> AssetCatalog:
    return AssetCatalog.from_mapping(SMALL_CATALOG)


@pytest.fixture
def timer_factory() -> ManualTimerFactory:
    return ManualTimerFactory()


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


# 2025-01-06 is a Monday.
@pytest.fixture
def monday_open() -> ClockReading:
    return ClockReading.at(2025, 1, 6, 10)


@pytest.fixture
def saturday_noon() -> ClockReading:
    return ClockReading.at(2025, 1, 11, 12)
