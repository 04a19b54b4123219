import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional


class LevelColorFormatter(logging.Formatter):
    """Console formatter that colours the level name; other levels print plain"""

    RESET = "\x1b[0m"
    LEVEL_COLORS = {
        logging.DEBUG: "\x1b[38;20m",
        logging.INFO: "\x1b[34;20m",
        logging.WARNING: "\x1b[33;20m",
        logging.ERROR: "\x1b[31;20m",
    }

    def __init__(self):
        super().__init__(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    def formatMessage(self, record):
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().formatMessage(record)
        plain = record.levelname
        record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().formatMessage(record)
        finally:
            record.levelname = plain


def setup_logger(
    name: str = "habitflow",
    level: str = "INFO",
    log_file: Optional[str] = None
) -> logging.Logger:
    """Configures and returns the package logger"""

    logger = logging.getLogger(name)
    logger.setLevel(logging.getLevelName(level.upper()))

    # Prevent duplicate handlers if called more than once
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(LevelColorFormatter())
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        # 5MB per file, keep last 5 backups
        file_handler = RotatingFileHandler(log_file, maxBytes=5*1024*1024, backupCount=5, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(file_handler)

    return logger
