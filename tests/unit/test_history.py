"""
test_history.py
"""
import pytest

from src.marketsim.analysis.history import PriceHistoryRecorder
from src.marketsim.analysis.plotter import PriceHistoryPlotter
from src.marketsim.ledger.ledger import PriceLedger
from src.marketsim.market.types import TickBatch
from src.marketsim.scheduler.notifier import RecalculationNotifier


@pytest.fixture
def recorded(catalog):
    ledger = PriceLedger(catalog)
    notifier = RecalculationNotifier()
    recorder = PriceHistoryRecorder(ledger)
    recorder.attach(notifier)

    for batch in (
        TickBatch(tick=1, entries=[("acme", 100.0), ("bigcoin", 45000.0)]),
        TickBatch(tick=2, entries=[("bigcoin", 46000.0)]),
        TickBatch(tick=3, entries=[("acme", 110.0), ("bigcoin", 44000.0)]),
    ):
        ledger.apply_batch(batch)
        notifier.notify(batch)
    return recorder


def test_history_frame_has_one_row_per_tick(recorded):
    df = recorded.to_frame()

    assert list(df.index) == [1, 2, 3]
    assert df.loc[2, "acme"] == 100.0
    assert df.loc[3, "bigcoin"] == 44000.0
    assert list(recorded.to_frame(["acme"]).columns) == ["acme"]


def test_summary_statistics(recorded):
    summary = recorded.summary()

    assert summary.loc["acme", "first"] == 100.0
    assert summary.loc["acme", "last"] == 110.0
    assert summary.loc["acme", "change_pct"] == pytest.approx(10.0)
    assert summary.loc["bigcoin", "max"] == 46000.0
    assert summary.loc["bigcoin", "volatility"] > 0


def test_max_rows_trims_oldest(catalog):
    ledger = PriceLedger(catalog)
    recorder = PriceHistoryRecorder(ledger, max_rows=2)
    for tick in range(1, 5):
        recorder.on_batch(TickBatch(tick=tick))

    assert len(recorder) == 2
    assert list(recorder.to_frame().index) == [3, 4]


def test_plotter_writes_png(recorded, tmp_path):
    path = PriceHistoryPlotter().plot_paths(recorded.to_frame(), tmp_path / "chart.png")

    assert path is not None
    assert path.exists()
    assert PriceHistoryPlotter().plot_paths(recorded.to_frame(), tmp_path / "x.png", ["ghost"]) is None
