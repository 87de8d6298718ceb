from typing import Any, Dict, Optional, TextIO, Type
from .base import BaseLogger, normalize_level
from .colorful import ColorfulLogger
from .plain import PlainLogger
from .json import JsonLogger


def create_logger(
    output_type: str,
    log_level: str = "INFO",
    static_fields: Optional[Dict[str, Any]] = None,
    sink: Optional[TextIO] = None
) -> BaseLogger:
    """Factory function to create the appropriate logger.

    Args:
        output_type: The type of logger to create (colorful, plain, or json)
        log_level: The logging level (trace, debug, info, warn, error, critical)
        static_fields: Fields bound to every record (service, namespace, ...)
        sink: Stream to write to; json defaults to stderr, the others to stdout
    """
    loggers: dict[str, Type[BaseLogger]] = {
        "colorful": ColorfulLogger,
        "plain": PlainLogger,
        "json": JsonLogger
    }

    if output_type.lower() not in loggers:
        raise ValueError(f"Invalid output type: {output_type}. Must be one of: {', '.join(loggers.keys())}")

    return loggers[output_type.lower()](log_level, sink=sink, static_fields=static_fields)

__all__ = ['BaseLogger', 'ColorfulLogger', 'PlainLogger', 'JsonLogger', 'create_logger', 'normalize_level']
