"""
Logging setup for the land cover precedence engine.

Component loggers live under the "LandCover" namespace
(e.g. "LandCover.Engine", "LandCover.Cascade"); configuring the parent
logger here routes all of them to the same handlers.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from Land_Cover_Precedence.config_types import LoggingConfig

ROOT_LOGGER_NAME = "LandCover"


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """Configure logging with console and optional file handlers.

    Args:
        level: Level name; overrides config.level when given.
        log_file: Path of a UTF-8 log file; overrides config.log_file.
        config: LoggingConfig (defaults to LoggingConfig()).

    Returns:
        The configured "LandCover" parent logger.
    """
    config = config or LoggingConfig()
    level_name = (level or config.level).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    log_file = log_file or config.log_file

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(log_level)
    ch.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(ch)

    # File handler
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(log_level)
        fh.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(fh)

    return logger
