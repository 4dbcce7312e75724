"""
Live simulation entry point.

Runs the market engine in real time:
  1. Restore the last price snapshot (when a state file is configured).
  2. Start the throttled price scheduler on its background thread.
  3. Advance the game clock by ``--step-hours`` every ``--step-seconds``
     of real time; boundary crossings trigger eager recovery ticks.
  4. Save the final snapshot and archive it, with the run log, to a
     timestamped folder.

Usage::

    uv run main.py --game-hours 72
    uv run main.py --game-hours 24 --device mobile --mode low --seed 7
"""
import argparse
import json
import os
import shutil
import sys
import time
from datetime import datetime

from dotenv import load_dotenv
from loguru import logger

from src.marketsim.utils.logger import LOG_FILE_PREFIX, setup_logger

load_dotenv()

from src.marketsim.catalog.schemas import AssetClass  # noqa: E402
from src.marketsim.core.engine import MarketEngine  # noqa: E402
from src.marketsim.utils.settings import EngineSettings  # noqa: E402


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def create_outcome_dir(label: str) -> str:
    """Create and return a timestamped output directory under ``outcomes/``."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    target_dir = os.path.join("outcomes", f"{timestamp}_{label}")
    os.makedirs(target_dir, exist_ok=True)
    logger.info(f"Output directory created: {target_dir}")
    return target_dir


def save_json(data: dict, folder: str, filename: str) -> None:
    """Serialise *data* as pretty-printed JSON into *folder*/*filename*."""
    path = os.path.join(folder, filename)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    logger.success(f"Saved {filename}")


def archive_current_log(log_dir: str, target_dir: str) -> None:
    """Copy today's log file into *target_dir* for post-mortem analysis."""
    try:
        today_str = datetime.now().strftime("%Y-%m-%d")
        src_log = os.path.join(log_dir, f"{LOG_FILE_PREFIX}_{today_str}.log")

        if os.path.exists(src_log):
            dst_log = os.path.join(target_dir, "execution.log")
            shutil.copy2(src_log, dst_log)
            logger.info(f"Archived execution log to {dst_log}")
        else:
            logger.warning("Log file not found for archiving.")
    except OSError as e:
        logger.warning(f"Failed to archive log: {e}")


# ---------------------------------------------------------------------------
# Main loop
# ---------------------------------------------------------------------------

def main() -> None:
    parser = argparse.ArgumentParser(
        description="Market Price Simulation: live engine run",
    )
    parser.add_argument(
        "--game-hours", type=float, default=48,
        help="Total in-game hours to simulate",
    )
    parser.add_argument(
        "--step-hours", type=float, default=1.0,
        help="In-game hours the clock advances per step",
    )
    parser.add_argument(
        "--step-seconds", type=float, default=0.5,
        help="Real seconds between clock steps",
    )
    parser.add_argument("--device", choices=["desktop", "tablet", "mobile"], default=None)
    parser.add_argument("--mode", choices=["standard", "low", "high"], default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--state-file", type=str, default=None,
        help="Durable price snapshot to restore from and save to",
    )
    args = parser.parse_args()

    settings = EngineSettings.from_env(
        device=args.device,
        performance_mode=args.mode,
        seed=args.seed,
        state_file=args.state_file,
    )
    setup_logger(settings.log_dir, settings.log_level, retention=settings.log_retention)

    output_dir = create_outcome_dir(f"live_{int(args.game_hours)}h_{settings.device}")

    try:
        engine = MarketEngine(settings=settings)
        steps = max(int(args.game_hours / args.step_hours), 1)

        with engine:
            for step in range(steps):
                time.sleep(args.step_seconds)
                engine.clock.advance_hours(args.step_hours)

                if step % 24 == 0:
                    reading = engine.clock.reading
                    logger.info(
                        f"Game time {reading.calendar_date} {reading.hour:02d}:00 | "
                        f"trend {engine.economy.state.trend.value} | "
                        f"net worth {engine.valuator.totals.net_worth:,.2f} | "
                        f"ticks {engine.scheduler.ticks_applied}"
                    )

        summary = {
            "final_reading": engine.clock.reading.model_dump(),
            "macro_state": engine.economy.state.model_dump(mode="json"),
            "scheduler": engine.scheduler.stats(),
            "prices": {
                kind.value: engine.get_all_prices(kind) for kind in AssetClass
            },
        }
        save_json(summary, output_dir, "run_summary.json")

        logger.success("-" * 30)
        logger.success("SIMULATION RUN COMPLETE")
        logger.success(f"Results archived to: {output_dir}")
        logger.success("-" * 30)

        archive_current_log(settings.log_dir, output_dir)

    except Exception as e:
        logger.exception(f"Simulation failed: {e}")
        archive_current_log(settings.log_dir, output_dir)
        sys.exit(1)


if __name__ == "__main__":
    main()
