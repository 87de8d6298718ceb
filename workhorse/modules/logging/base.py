import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TextIO
from loguru import logger


LEVELS = {
    "trace": "TRACE",
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
    "critical": "CRITICAL",
}


def normalize_level(level: Optional[str]) -> str:
    """Map a config level name (debug, warn, ...) onto a loguru level name."""
    if not level:
        return "INFO"
    return LEVELS.get(level.strip().lower(), "INFO")


def format_fields(fields: Dict[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in fields.items())


class BaseLogger(ABC):
    """Abstract base class for loggers."""

    def __init__(
        self,
        log_level: str = "INFO",
        sink: Optional[TextIO] = None,
        static_fields: Optional[Dict[str, Any]] = None
    ):
        self.log_level = normalize_level(log_level)
        self.sink = sink if sink is not None else sys.stdout
        self.static_fields = dict(static_fields or {})
        self.logger = logger.bind(**self.static_fields)

    @abstractmethod
    def log_request(self, method: str, path: str, status: int, duration_ms: float, request_id: str = ""):
        """Log a completed HTTP request."""
        pass

    @abstractmethod
    def log_error(self, message: str, **fields: Any):
        """Log an error message."""
        pass

    @abstractmethod
    def log_warning(self, message: str, **fields: Any):
        """Log a warning message."""
        pass

    @abstractmethod
    def log_info(self, message: str, **fields: Any):
        """Log an info message."""
        pass

    @abstractmethod
    def log_debug(self, message: str, **fields: Any):
        """Log a debug message."""
        pass

    def flush(self) -> None:
        """Wait for queued records to reach their sinks."""
        self.logger.complete()
        flush = getattr(self.sink, "flush", None)
        if flush is not None:
            flush()
