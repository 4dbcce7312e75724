"""
Centralised Loguru configuration.

Sets up two logging sinks with different verbosity levels:
  - **stderr** (terminal): INFO and above by default, compact and coloured.
  - **File**: DEBUG and above, one file per day (rotated at midnight),
    zipped on rotation and kept for ``retention``.

The engine logs from three kinds of thread: the caller driving the clock,
the scheduler's timer thread and the short-lived verification timers.
File records therefore carry the thread name so a boundary recovery can be
followed across them.  Tick-level chatter (skipped ticks, per-chunk
progress) is emitted at DEBUG so the terminal only shows boundary
transitions, economy updates and run milestones.

Call ``setup_logger()`` once at application startup (before any other
``logger`` usage) to activate both sinks.
"""
import sys
from pathlib import Path

from loguru import logger

LOG_FILE_PREFIX = "marketsim"

DEFAULT_RETENTION = "14 days"
DEFAULT_ROTATION = "00:00"


def setup_logger(
    log_dir: str = "logs",
    console_level: str = "INFO",
    retention: str = DEFAULT_RETENTION,
    rotation: str = DEFAULT_ROTATION,
) -> logger:
    """Configure and return the global Loguru logger.

    Args:
        log_dir: Directory for log files.  Created if missing.
        console_level: Minimum level printed to the terminal.
        retention: How long rotated files are kept (Loguru duration).
        rotation: When the file sink rolls over; midnight by default so
                  each file matches the date in its name.

    Returns:
        The configured ``logger`` instance (same singleton used everywhere
        via ``from loguru import logger``).
    """
    logger.remove()

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    # e.g. logs/marketsim_2026-02-08.log
    log_file = log_path / f"{LOG_FILE_PREFIX}_{{time:YYYY-MM-DD}}.log"

    logger.add(
        sys.stderr,
        level=console_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    logger.add(
        log_file,
        level="DEBUG",
        rotation=rotation,
        retention=retention,
        compression="zip",
        format=(
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {thread.name: <22} | "
            "{name}:{function}:{line} - {message}"
        ),
        enqueue=True,
        encoding="utf-8",
    )

    return logger
