"""
Logging configuration for the Carrier Tracker.
Uses loguru; every record carries the query it belongs to, if any.
"""

import sys
from pathlib import Path
from loguru import logger

from tracker.config import TrackerConfig


CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | "
    "<magenta>{extra[query]}</magenta><level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {extra[query]}{message}"


def _add_file_sink(path: Path, level: str, retention: str) -> None:
    logger.add(
        str(path),
        format=FILE_FORMAT,
        level=level,
        rotation="10 MB",
        retention=retention,
        compression="zip",
        enqueue=True,
    )


def setup_logging(config: TrackerConfig, console: bool = True) -> None:
    """
    Route tracker logs to stderr and, when LOG_FILE is set, to rotating files.

    stdout is left alone so ``--json`` output stays machine-readable. Next to
    the main log file an ``error.log`` keeps failures for longer.

    Args:
        config: Tracker configuration
        console: Whether to log to stderr (disable when embedded in another app)
    """
    logger.remove()
    logger.configure(extra={"query": ""})

    if console:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=config.log_level, colorize=True)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        _add_file_sink(log_path, config.log_level, "30 days")
        _add_file_sink(log_path.parent / "error.log", "ERROR", "60 days")

    logger.debug(f"Logging to {config.log_file or 'stderr only'} at {config.log_level}")


class QueryLogger:
    """Logger bound to one tracking query."""

    def __init__(self, carrier: str, tracking_number: str):
        self.carrier = carrier
        self.tracking_number = tracking_number
        self._logger = logger.bind(
            carrier=carrier,
            tracking_number=tracking_number,
            query=f"[{carrier}:{tracking_number}] ",
        )

    def info(self, message: str):
        self._logger.info(message)

    def debug(self, message: str):
        self._logger.debug(message)

    def warning(self, message: str):
        self._logger.warning(message)
