"""
Logging for simledger.

Three channels on the standard logging module:
- simledger              general messages
- simledger.resolutions  which source answered each fact query (DEBUG)
- simledger.errors       errors only, mirrored from the general channel

Console output is colored by level. When a log directory is configured each
channel also writes a dated file (simledger_YYYYMMDD.log, resolutions_...,
errors_...).
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional


_RESET = "\033[0m"

_LEVEL_STYLE = {
    logging.DEBUG: "\033[96m",
    logging.INFO: "\033[92m",
    logging.WARNING: "\033[93m",
    logging.ERROR: "\033[91m",
    logging.CRITICAL: "\033[1m\033[91m",
}

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name and message."""

    def format(self, record):
        style = _LEVEL_STYLE.get(record.levelno)
        if style is None:
            return super().format(record)
        # Color a copy; file handlers see the same record
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{style}{record.levelname}{_RESET}"
        colored.msg = f"{style}{record.msg}{_RESET}"
        return super().format(colored)


class LedgerLogger:
    """
    Process-wide logger for simledger.

    Usage:
        logger = get_logger()
        logger.info("Loaded scenario")
        logger.resolution("mark_px", "local", key=(0,))
    """

    _instance: Optional['LedgerLogger'] = None
    _initialized: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_dir: Optional[str] = "logs", log_level: str = "INFO"):
        if LedgerLogger._initialized:
            return

        self.log_dir = Path(log_dir) if log_dir else None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = self._channel("simledger", log_level, "simledger")
        self.resolution_logger = self._channel("simledger.resolutions", log_level, "resolutions")
        self.error_logger = self._channel("simledger.errors", "ERROR", "errors")

        LedgerLogger._initialized = True

    def _channel(self, name: str, level: str, file_prefix: str) -> logging.Logger:
        logger = logging.getLogger(name)
        logger.setLevel(level.upper())
        logger.handlers.clear()
        logger.propagate = False

        console = logging.StreamHandler()
        console.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        logger.addHandler(console)

        if self.log_dir is not None:
            stamp = datetime.now().strftime("%Y%m%d")
            handler = logging.FileHandler(self.log_dir / f"{file_prefix}_{stamp}.log", encoding="utf-8")
            handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
            logger.addHandler(handler)

        return logger

    def info(self, msg: str, *args, **kwargs):
        self.main_logger.info(msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self.main_logger.debug(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self.main_logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        """Log to the general channel and the errors file."""
        self.main_logger.error(msg, *args, **kwargs)
        self.error_logger.error(msg, *args, **kwargs)

    def resolution(self, fact: str, source: str, **fields):
        """
        Record which source answered a fact query.

        Args:
            fact: Fact name (e.g. "mark_px")
            source: "local" or the oracle's source_name
            **fields: Query key, rendered as name=value
        """
        if not self.resolution_logger.isEnabledFor(logging.DEBUG):
            return
        detail = " | ".join(f"{name}={value}" for name, value in fields.items())
        message = f"[RESOLVE:{source}] fact={fact}"
        self.resolution_logger.debug(f"{message} | {detail}" if detail else message)


_logger: Optional[LedgerLogger] = None


def get_logger(log_dir: Optional[str] = "logs", log_level: str = "INFO") -> LedgerLogger:
    """Return the shared logger, creating it with these settings on first use."""
    global _logger
    if _logger is None:
        _logger = LedgerLogger(log_dir, log_level)
        _configure_third_party_loggers()
    return _logger


def setup_logger(log_dir: Optional[str] = "logs", log_level: str = "INFO") -> LedgerLogger:
    """Replace the shared logger with one built from these settings."""
    global _logger
    LedgerLogger._instance = None
    LedgerLogger._initialized = False
    _logger = LedgerLogger(log_dir, log_level)
    _configure_third_party_loggers()
    return _logger


def _configure_third_party_loggers():
    # pybit and urllib3 log every retry at INFO
    for name in ("pybit", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)
