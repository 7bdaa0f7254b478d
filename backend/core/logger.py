import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from core.config import settings


def setup_logger(name: Optional[str] = None, log_level: Optional[str] = None) -> logging.Logger:
    """
    Sets up the root logger with console output and, when LOG_DIR is configured,
    a RotatingFileHandler next to it.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level or settings.log_level)

    # Prevent adding handlers multiple times if logger is already set up
    if logger.hasHandlers():
        return logger

    fmt = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(fmt)
    logger.addHandler(console_handler)

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / "egg-ledger.log", maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"  # 5 MB
        )
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)

    return logger
