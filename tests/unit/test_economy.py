"""
test_economy.py
"""
from src.marketsim.market.economy import EconomySimulator, trend_for_health
from src.marketsim.market.types import MacroMarketState, MarketHealth, MarketTrend


def test_trend_follows_health_thresholds():
    assert trend_for_health(80) is MarketTrend.BULL
    assert trend_for_health(50) is MarketTrend.STABLE
    assert trend_for_health(20) is MarketTrend.BEAR


def test_updates_only_fire_on_week_and_month_boundaries():
    economy = EconomySimulator(seed=3)
    start = economy.state

    for day in range(1, 7):
        assert economy.on_day_rollover(day) == start

    economy.on_day_rollover(7)
    assert economy.state != start


def test_health_stays_within_bounds():
    economy = EconomySimulator(
        initial=MacroMarketState(trend=MarketTrend.BULL, health=99.0),
        seed=1,
        weekly_swing=50.0,
    )
    for _ in range(100):
        state = economy.process_weekly_update()
        assert 0.0 <= state.health <= 100.0
        assert state.trend is trend_for_health(state.health)


def test_set_state_overrides_current_state():
    economy = EconomySimulator()
    economy.set_state(MacroMarketState(trend=MarketTrend.BEAR, health=10))

    assert economy.state.trend is MarketTrend.BEAR
    assert economy.state.health_category is MarketHealth.CRITICAL
