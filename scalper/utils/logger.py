"""
Logging configuration for Perp Scalper
Uses loguru for structured, colorized logging
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logger(level: str = "INFO", log_dir: Optional[Path] = None):
    """Configure loguru logger with console and (optionally) file outputs"""
    # Remove default logger
    logger.remove()

    # Console output with colors
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if log_dir is not None:
        log_file = Path(log_dir) / "perp_scalper.log"
        logger.add(
            log_file,
            rotation="10 MB",
            retention="30 days",
            compression="zip",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=level,
        )
        logger.info(f"Log file: {log_file}")

    logger.info(f"Log level: {level}")

    return logger
