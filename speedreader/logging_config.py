"""Logging configuration for the speed-reading core"""

import json
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from speedreader.config import Settings, get_settings


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON for file output"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Structured fields passed via extra={"extra_data": {...}}
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        return json.dumps(log_data)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter with colors"""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        log_msg = f"{color}[{record.levelname}]{reset} {record.name} - {record.getMessage()}"

        if hasattr(record, "extra_data") and "duration_ms" in record.extra_data:
            log_msg += f" ({record.extra_data['duration_ms']:.2f}ms)"

        if record.exc_info:
            log_msg += f"\n{self.formatException(record.exc_info)}"

        return log_msg


def setup_logging(
    log_level: Optional[str] = None,
    enable_console_logging: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    settings: Optional[Settings] = None,
) -> None:
    """
    Setup logging for the ``speedreader`` package.

    Handlers are attached to the package logger rather than the root logger,
    and any handlers from a previous call are replaced.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to ``settings.log_level``, or DEBUG when ``settings.debug``.
        enable_console_logging: Enable logging to the console
        log_file: Optional path of a rotating JSON log file
        settings: Settings to read defaults from (cached settings if omitted)
    """
    if log_level is None:
        settings = settings or get_settings()
        log_level = "DEBUG" if settings.debug else settings.log_level

    package_logger = logging.getLogger("speedreader")
    package_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    package_logger.handlers.clear()

    if enable_console_logging:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(ConsoleFormatter())
        package_logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=10 * 1024 * 1024, backupCount=5  # 10MB
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        package_logger.addHandler(file_handler)
