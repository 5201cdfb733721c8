"""
Utilities package for the chunk engine.

This package contains logging configuration and environment-driven settings.
"""

from .logging_config import LogLevel, LogFormat, JSONFormatter, OperationTimer, configure_logging
from .settings import EngineSettings

__all__ = [
    "LogLevel",
    "LogFormat",
    "JSONFormatter",
    "OperationTimer",
    "configure_logging",
    "EngineSettings",
]
