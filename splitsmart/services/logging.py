"""Root logger setup for processes embedding the expense core.

Records go to stdout and to a log file. Level and file path come from
Settings (SPLITSMART_LOG_LEVEL, SPLITSMART_LOG_FILE). INFO covers stored
writes and rejected submissions; DEBUG adds split and balance arithmetic.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from splitsmart.services.config import Settings, get_settings

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(level_name: Optional[str]) -> int:
    """Map a level name to its logging constant, INFO when unknown."""
    return LOG_LEVEL_MAP.get((level_name or "").strip().upper(), logging.INFO)


def setup_logging(settings: Optional[Settings] = None) -> Path:
    """Attach stdout and file handlers to the root logger.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.

    Args:
        settings: Source of log_level and log_file (default: get_settings())

    Returns:
        Path of the log file in use
    """
    settings = settings or get_settings()
    level = get_log_level(settings.log_level)

    log_path = Path(settings.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_path, encoding="utf-8"),
    ]

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger(__name__).debug(
        f"Logging to {log_path} at {logging.getLevelName(level)}"
    )
    return log_path


__all__ = ["LOG_LEVEL_MAP", "get_log_level", "setup_logging"]
