import sys
from typing import Any
from .base import BaseLogger


class JsonLogger(BaseLogger):
    """Logger that outputs JSON for machine parsing."""

    def __init__(self, log_level: str = "INFO", sink=None, static_fields=None):
        super().__init__(log_level, sink if sink is not None else sys.stderr, static_fields)
        # Configure loguru for JSON output
        self.logger.configure(
            handlers=[{
                "sink": self.sink,
                "serialize": True,  # JSON output
                "format": "{time} | {level} | {message}",
                "level": self.log_level
            }]
        )

    def log_request(self, method: str, path: str, status: int, duration_ms: float, request_id: str = ""):
        self.logger.bind(
            type="request",
            method=method,
            path=path,
            status=status,
            duration_ms=round(duration_ms, 3),
            request_id=request_id
        ).info("HTTP request completed")

    def log_error(self, message: str, **fields: Any):
        self.logger.bind(type="error", **fields).error(message)

    def log_warning(self, message: str, **fields: Any):
        self.logger.bind(type="warning", **fields).warning(message)

    def log_info(self, message: str, **fields: Any):
        self.logger.bind(type="info", **fields).info(message)

    def log_debug(self, message: str, **fields: Any):
        self.logger.bind(type="debug", **fields).debug(message)
