from typing import Any
from .base import BaseLogger, format_fields


class PlainLogger(BaseLogger):
    """Logger that outputs plain text, suitable for CI/file output."""

    def __init__(self, log_level: str = "INFO", sink=None, static_fields=None):
        super().__init__(log_level, sink, static_fields)
        # Configure loguru for plain output
        self.logger.configure(
            handlers=[{
                "sink": self.sink,
                "format": "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message}",
                "colorize": False,
                "level": self.log_level
            }]
        )

    def _with_fields(self, message: str, fields: dict) -> str:
        return f"{message} {format_fields(fields)}" if fields else message

    def log_request(self, method: str, path: str, status: int, duration_ms: float, request_id: str = ""):
        self.logger.info(f"{method} {path} {status} {duration_ms:.2f}ms {request_id}".rstrip())

    def log_error(self, message: str, **fields: Any):
        self.logger.error(self._with_fields(message, fields))

    def log_warning(self, message: str, **fields: Any):
        self.logger.warning(self._with_fields(message, fields))

    def log_info(self, message: str, **fields: Any):
        self.logger.info(self._with_fields(message, fields))

    def log_debug(self, message: str, **fields: Any):
        self.logger.debug(self._with_fields(message, fields))
