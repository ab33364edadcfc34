"""
Logging setup for the rate service.

Text output for local runs, JSON records (one per line) for log shippers.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import TextIO

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "shipping-rates"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-request chatter from HTTP libraries
QUIET_LOGGERS = ("urllib3", "requests", "httpx", "httpcore")


class JSONFormatter(JsonFormatter):
    """JSON formatter that tags each record with the service and call site."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict):
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = SERVICE_NAME
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno


def build_formatter(log_format: str) -> logging.Formatter:
    """Formatter for "json" or (anything else) plain text."""
    if log_format.lower() == "json":
        return JSONFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: Path | str | None = None,
    stream: TextIO | None = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Configure the root logger.

    Replaces any handlers already installed, so calling it twice (app
    lifespan after an import-time call, or tests) does not duplicate output.

    Args:
        level: Log level name. Unknown names fall back to INFO.
        log_format: "text" or "json". LOG_FORMAT in the environment wins.
        log_file: Optional path for a rotating log file.
        stream: Console stream (stdout if omitted).
        max_bytes: Log file size before rotation.
        backup_count: Rotated files to keep.
    """
    log_format = os.environ.get("LOG_FORMAT") or log_format
    formatter = build_formatter(log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.debug(f"Logging configured: level={level}, format={log_format}")
