"""Logging setup for the synergi server and CLI."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def default_log_file() -> Path:
    return Path.home() / ".synergi" / "synergi.log"


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    verbose: bool = False,
) -> None:
    """
    Replace loguru's default sink with a console sink and a rotating file sink.

    Args:
        level: Minimum console level.
        log_file: Log file path (default: ~/.synergi/synergi.log).
        verbose: Force console level to DEBUG.
    """
    logger.remove()

    log_file = log_file or default_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    console_level = "DEBUG" if verbose else level
    logger.add(sys.stderr, level=console_level, format=CONSOLE_FORMAT, backtrace=True, diagnose=False)

    # The file always gets everything from DEBUG up
    logger.add(
        str(log_file),
        level="DEBUG",
        format=FILE_FORMAT,
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        enqueue=True,
    )

    logger.debug(f"Logging initialized. Console level: {console_level}, file: {log_file}")
