"""
Accelerated replay entry point.

Drives the engine synchronously (no background thread, no throttle) over
a number of game days, records every batch, and writes:
  - ``price_history.csv``: tick × asset prices.
  - ``summary.json``: per-asset statistics and scheduler counters.
  - ``price_paths.png``: normalised chart of a few representative assets.

Usage::

    uv run run_replay.py --days 30
    uv run run_replay.py --days 90 --seed 42 --assets btc tech_giant govt_bond
"""
import argparse
import json
import os
import sys
from datetime import datetime

from dotenv import load_dotenv
from loguru import logger

from src.marketsim.utils.logger import setup_logger

load_dotenv()

from src.marketsim.analysis.history import PriceHistoryRecorder  # noqa: E402
from src.marketsim.analysis.plotter import PriceHistoryPlotter  # noqa: E402
from src.marketsim.core.engine import MarketEngine  # noqa: E402
from src.marketsim.scheduler.timers import InlineTimer  # noqa: E402
from src.marketsim.utils.settings import EngineSettings  # noqa: E402

DEFAULT_CHART_ASSETS = ["btc", "eth", "tech_giant", "startup_fund", "govt_bond", "gold_bullion"]


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Replay the market simulation over N game days.",
    )
    parser.add_argument("--days", type=int, default=30, help="Game days to replay")
    parser.add_argument(
        "--step-hours", type=float, default=1.0,
        help="In-game hours per scheduler tick",
    )
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--assets", nargs="+", default=DEFAULT_CHART_ASSETS,
        help="Asset ids to draw on the chart",
    )
    args = parser.parse_args()

    settings = EngineSettings.from_env(
        seed=args.seed, throttle_interval_ms=0, verification_delay_ms=0,
    )
    setup_logger(settings.log_dir, settings.log_level, retention=settings.log_retention)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = os.path.join("outcomes", f"{timestamp}_replay_{args.days}d")
    os.makedirs(output_dir, exist_ok=True)

    try:
        # Verifications run inline so a seeded replay is reproducible.
        engine = MarketEngine(settings=settings, timer_factory=InlineTimer)
        recorder = PriceHistoryRecorder(engine.ledger)
        recorder.attach(engine.notifier)

        engine.initialize()
        steps = int(args.days * 24 / args.step_hours)
        logger.info(f"Replaying {args.days} days ({steps} ticks)...")

        for _ in range(steps):
            engine.clock.advance_hours(args.step_hours)
            engine.scheduler.on_timer()

        engine.shutdown(save=False)

        history = recorder.to_frame()
        history.to_csv(os.path.join(output_dir, "price_history.csv"))

        summary = recorder.summary()
        payload = {
            "days": args.days,
            "ticks": len(history),
            "macro_state": engine.economy.state.model_dump(mode="json"),
            "scheduler": engine.scheduler.stats(),
            "assets": json.loads(summary.to_json(orient="index")),
        }
        with open(os.path.join(output_dir, "summary.json"), "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

        PriceHistoryPlotter().plot_paths(
            history,
            os.path.join(output_dir, "price_paths.png"),
            asset_ids=args.assets,
            title=f"Simulated Price Paths ({args.days} game days)",
        )

        logger.success(f"Replay complete. Results archived to: {output_dir}")

    except Exception as e:
        logger.exception(f"Replay failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
