"""
Logging configuration for the chunk engine.

This module provides console/file logging setup with standard, detailed and
JSON formats, plus a timing context manager used to measure chunking calls
and report them as structured log records.
"""

import json
import logging
import logging.handlers
import time
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Any, Optional, Union

if TYPE_CHECKING:
    from .settings import EngineSettings


class LogLevel(Enum):
    """Log level enumeration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_name(cls, name: str) -> 'LogLevel':
        """Resolve a level from its case-insensitive name."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown log level '{name}', expected one of {[m.name for m in cls]}")


class LogFormat(Enum):
    """Log format types."""
    STANDARD = "standard"
    JSON = "json"
    DETAILED = "detailed"


class JSONFormatter(logging.Formatter):
    """
    JSON formatter that merges ``extra_data`` attached to a record.

    Records created through ``logger.info(msg, extra={"extra_data": {...}})``
    are rendered with their structured fields at the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        extra_data = getattr(record, "extra_data", None)
        if isinstance(extra_data, dict):
            log_data.update(extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        try:
            return json.dumps(log_data, default=str, ensure_ascii=False, separators=(',', ':'))
        except (TypeError, ValueError):
            # Fallback for non-serializable data
            return json.dumps({
                "timestamp": log_data["timestamp"],
                "level": log_data["level"],
                "logger": log_data["logger"],
                "message": str(record.getMessage()),
                "serialization_error": "Failed to serialize additional data"
            }, separators=(',', ':'))


def _create_formatter(log_format: LogFormat) -> logging.Formatter:
    if log_format == LogFormat.JSON:
        return JSONFormatter()
    if log_format == LogFormat.DETAILED:
        return logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s'
        )
    return logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')


def configure_logging(
    level: Optional[Union[LogLevel, str]] = None,
    log_format: Union[LogFormat, str] = LogFormat.STANDARD,
    log_file: Optional[Path] = None,
    enable_console: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    settings: Optional['EngineSettings'] = None
) -> logging.Logger:
    """
    Configure the ``chunk_engine`` logger hierarchy.

    Handlers are attached to the package logger rather than the root logger so
    embedding applications keep control of their own logging setup.

    Args:
        level: Minimum level to emit; defaults to ``settings.log_level``, else INFO
        log_format: One of standard, json, detailed
        log_file: Optional path for a rotating file handler
        enable_console: Whether to log to stderr
        max_bytes: Rotation size for the file handler
        backup_count: Number of rotated files to keep
        settings: Engine settings supplying the level when ``level`` is omitted

    Returns:
        The configured package logger
    """
    if level is None:
        level = settings.log_level if settings is not None else LogLevel.INFO
    if isinstance(level, str):
        level = LogLevel.from_name(level)
    if isinstance(log_format, str):
        log_format = LogFormat(log_format.lower())

    package_logger = logging.getLogger("chunk_engine")
    package_logger.setLevel(level.value)

    # Clear existing handlers
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = _create_formatter(log_format)

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level.value)
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setLevel(level.value)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    return package_logger


class OperationTimer:
    """
    Context manager timing a named operation.

    The elapsed time is available as ``elapsed_ms`` after the block exits and is
    logged at DEBUG with the supplied context as ``extra_data``.

    Example:
        >>> with OperationTimer("chunk_text", strategy="fixed") as timer:
        ...     pieces = "alpha beta".split()
        >>> timer.elapsed_ms >= 0
        True
    """

    def __init__(self, operation_name: str, logger: Optional[logging.Logger] = None, **context) -> None:
        self.operation_name = operation_name
        self.context = context
        self.logger = logger or logging.getLogger(__name__)
        self._start: Optional[float] = None
        self.elapsed_ms: int = 0

    def __enter__(self) -> 'OperationTimer':
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        duration = time.perf_counter() - self._start
        self.elapsed_ms = int(duration * 1000)
        self.logger.debug(
            f"Operation timing: {self.operation_name} took {self.elapsed_ms}ms",
            extra={"extra_data": {
                "operation": self.operation_name,
                "duration_ms": self.elapsed_ms,
                "succeeded": exc_type is None,
                **self.context
            }}
        )
