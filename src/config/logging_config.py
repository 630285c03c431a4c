# src/config/logging_config.py

"""Per-run logging configuration for price_scout.

Every launch writes to its own ``logs/run_<timestamp>.log`` file. All
``price_scout.*`` loggers (orchestrator, per-site scrapers, filters,
currency) propagate into the project logger configured here, so one
query's fan-out can be followed site by site in a single file.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty dependencies that would otherwise flood the run log
_QUIET_LOGGERS: tuple[str, ...] = ("asyncio", "urllib3", "charset_normalizer")


def setup_logging(console_level: int = logging.WARNING) -> Path:
    """Initialise the ``price_scout`` logger for the current run.

    Args:
        console_level: Minimum level echoed to stderr. The file handler
            always records DEBUG and above.

    Returns:
        The :class:`~pathlib.Path` of this run's log file.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{timestamp}.log"

    project_logger = logging.getLogger("price_scout")
    project_logger.setLevel(logging.DEBUG)

    # Repeated calls keep the first run's handlers and file
    for handler in project_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    project_logger.addHandler(file_handler)
    project_logger.addHandler(console_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    project_logger.info(
        "Logging initialised (env=%s, demo=%s, constrained=%s, "
        "rendering=%s) -> %s",
        Settings.APP_ENV,
        Settings.DEMO_MODE,
        Settings.RESOURCE_CONSTRAINED,
        Settings.RENDERING_ENABLED,
        log_file,
    )

    return log_file
