"""
Structured logging configuration for the events backend.

Provides JSON-formatted logging with file rotation for production environments
and human-readable console logging for development.

Loggers:
- api: HTTP requests, responses, exception handlers
- services: Event store and series expansion operations
- db: Engine lifecycle and database errors
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Dict, Optional
import json
from datetime import datetime, timezone


LOGGER_NAMES = ["api", "services", "db"]


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs logs as JSON for structured logging.

    Each log record includes timestamp, level, logger, message, module,
    function and line, plus exception info and any ``extra`` fields.
    """

    _RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Fields passed via logger.info("msg", extra={...})
        for key, value in vars(record).items():
            if key not in self._RESERVED and key not in log_data:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable formatter for console output in development.

    Format: [TIMESTAMP] LEVEL - LOGGER - MESSAGE
    Example: [2026-01-05 10:30:45] INFO - events.api - Listed 12 events
    """

    def __init__(self):
        super().__init__(
            fmt="[%(asctime)s] %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )


def _get_log_level() -> int:
    """
    Get log level from environment variable.

    Environment Variables:
        EVENTS_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default INFO)
    """
    level_str = os.environ.get("EVENTS_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def _get_log_dir() -> Path:
    """
    Get log directory path from environment variable or use default.

    Environment Variables:
        EVENTS_LOG_DIR: Custom log directory path (default ./logs)
    """
    log_dir = Path(os.environ.get("EVENTS_LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _is_production() -> bool:
    """
    Check if running in production environment.

    Environment Variables:
        EVENTS_ENV: production, development or test (default development)
    """
    env = os.environ.get("EVENTS_ENV", "development").lower()
    return env == "production"


def configure_logging() -> Dict[str, logging.Logger]:
    """
    Configure structured logging for the events backend.

    Behavior:
    - Production (EVENTS_ENV=production):
      * JSON-formatted logs to files with rotation
      * One file per logger: api.log, services.log, db.log
      * 10MB per file, 5 backups
    - Development (default):
      * Human-readable console output, no file logging

    Returns:
        Dictionary mapping short logger names to configured Logger instances

    Example:
        >>> loggers = configure_logging()
        >>> loggers["api"].info("GET /api/events", extra={"status_code": 200})
    """
    log_level = _get_log_level()
    is_prod = _is_production()
    log_dir = _get_log_dir() if is_prod else None

    loggers = {}

    for logger_name in LOGGER_NAMES:
        logger = logging.getLogger(f"events.{logger_name}")
        logger.setLevel(log_level)
        logger.propagate = False

        logger.handlers.clear()

        if is_prod:
            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / f"{logger_name}.log",
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8"
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)
        else:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(ConsoleFormatter())
            logger.addHandler(console_handler)

        loggers[logger_name] = logger

    return loggers


_loggers: Optional[Dict[str, logging.Logger]] = None


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger by name.

    Args:
        name: Logger name (api, services, db)

    Returns:
        Configured Logger instance

    Raises:
        ValueError: If logger name is not recognized
    """
    global _loggers

    if _loggers is None:
        _loggers = configure_logging()

    if name not in _loggers:
        raise ValueError(
            f"Unknown logger name: {name}. "
            f"Valid names: {', '.join(_loggers.keys())}"
        )

    return _loggers[name]


def init_logging() -> Dict[str, logging.Logger]:
    """
    Initialize logging configuration (called on application startup).

    Returns:
        Dictionary of configured loggers
    """
    global _loggers
    _loggers = configure_logging()
    return _loggers
