"""loguru sinks for the command-line tools."""

from __future__ import annotations
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"


def configure_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    logger.enable("Backend")
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level="DEBUG" if verbose else "WARNING")
    if log_file is not None:
        logger.add(
            str(log_file),
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} - {message}",
            level="DEBUG",
            rotation="10 MB",
        )
