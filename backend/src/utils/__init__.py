"""
Utility modules for the events backend.

This package contains shared utilities used across the application:
- logging_config: Named loggers with console or JSON file output
"""

from backend.src.utils.logging_config import get_logger, init_logging

__all__ = [
    "get_logger",
    "init_logging",
]
