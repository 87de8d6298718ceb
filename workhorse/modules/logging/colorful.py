import click
from typing import Any
from .base import BaseLogger, format_fields


class ColorfulLogger(BaseLogger):
    """Logger that outputs colorful text for CLI usage."""

    def __init__(self, log_level: str = "INFO", sink=None, static_fields=None):
        super().__init__(log_level, sink, static_fields)
        # Configure loguru for colored output
        self.logger.configure(
            handlers=[{
                "sink": self.sink,
                "colorize": True,
                "format": "<cyan>{time:YYYY-MM-DD HH:mm:ss.SSS}</cyan> | "
                         "<level>{level: <8}</level> | "
                         "<white>{message}</white>",
                "level": self.log_level
            }]
        )

    def _with_fields(self, message: str, fields: dict) -> str:
        if not fields:
            return message
        return f"{message} {click.style(format_fields(fields), fg='bright_black')}"

    def log_request(self, method: str, path: str, status: int, duration_ms: float, request_id: str = ""):
        if status >= 500:
            color = "red"
        elif status >= 400:
            color = "yellow"
        elif status >= 300:
            color = "blue"
        elif status >= 200:
            color = "green"
        else:
            color = "white"

        self.logger.info(
            click.style(f"{method} {path} ", fg="white")
            + click.style(str(status), fg=color, bold=True)
            + click.style(f" {duration_ms:.2f}ms {request_id}".rstrip(), fg="white")
        )

    def log_error(self, message: str, **fields: Any):
        self.logger.error(self._with_fields(click.style(message, fg="red", bold=True), fields))

    def log_warning(self, message: str, **fields: Any):
        self.logger.warning(self._with_fields(click.style(message, fg="yellow", bold=True), fields))

    def log_info(self, message: str, **fields: Any):
        self.logger.info(self._with_fields(click.style(message, fg="white"), fields))

    def log_debug(self, message: str, **fields: Any):
        self.logger.debug(self._with_fields(click.style(message, fg="blue"), fields))
