#
# logging_setup.py
# Minecraft Backup Script
#
# Configures a rotating file logger and stdout handler shared by the backup job.
#
# Thales Matheus Mendonça Santos - November 2025
#
"""Logging configuration helpers."""
import logging
import sys
from logging.handlers import RotatingFileHandler

from .config import BackupConfig
from .errors import StartupError

LOGGER_NAME = "minecraft_backup"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(config: BackupConfig, logger_name: str = LOGGER_NAME) -> logging.Logger:
    """
    Configure a rotating file handler + stdout handler.
    Safe to call multiple times; existing handlers are reused.

    Raises ``StartupError`` when the log file cannot be opened, since every
    later failure is reported only through that file.
    """
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger

    log_file = config.paths.log_file
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            str(log_file),
            maxBytes=config.settings.log_max_bytes,
            backupCount=config.settings.log_backup_count,
        )
    except OSError as e:
        raise StartupError(f"cannot open log file {log_file}: {e}") from e

    logger.setLevel(logging.DEBUG)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))

    # Mirror everything to stdout so cron mail / journald capture it too.
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(logging.INFO)
    ch.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.addHandler(fh)
    logger.addHandler(ch)
    return logger


__all__ = ["setup_logging", "LOGGER_NAME"]
