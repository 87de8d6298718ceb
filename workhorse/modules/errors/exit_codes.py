"""Semantic process exit codes."""

import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, NoReturn, Optional

from ..logging import BaseLogger


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1
    USAGE = 64
    DATA_INVALID = 65
    FILE_NOT_FOUND = 66
    EXTERNAL_SERVICE_UNAVAILABLE = 69
    INTERNAL = 70
    PORT_UNAVAILABLE = 71
    CONFIG_INVALID = 78


@dataclass(frozen=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str
    category: str


EXIT_CODES: Dict[ExitCode, ExitCodeInfo] = {
    ExitCode.SUCCESS: ExitCodeInfo(0, "SUCCESS", "Command completed successfully", "standard"),
    ExitCode.FAILURE: ExitCodeInfo(1, "FAILURE", "Command failed", "standard"),
    ExitCode.USAGE: ExitCodeInfo(64, "USAGE", "Command was used incorrectly", "input"),
    ExitCode.DATA_INVALID: ExitCodeInfo(65, "DATA_INVALID", "Input data was malformed", "input"),
    ExitCode.FILE_NOT_FOUND: ExitCodeInfo(66, "FILE_NOT_FOUND", "A required file could not be found", "input"),
    ExitCode.EXTERNAL_SERVICE_UNAVAILABLE: ExitCodeInfo(
        69, "EXTERNAL_SERVICE_UNAVAILABLE", "A required service is unavailable", "runtime"
    ),
    ExitCode.INTERNAL: ExitCodeInfo(70, "INTERNAL", "Internal software error", "runtime"),
    ExitCode.PORT_UNAVAILABLE: ExitCodeInfo(
        71, "PORT_UNAVAILABLE", "The server could not bind its listen address", "networking"
    ),
    ExitCode.CONFIG_INVALID: ExitCodeInfo(78, "CONFIG_INVALID", "Configuration is invalid", "configuration"),
}


def get_exit_code_info(code: ExitCode) -> ExitCodeInfo:
    return EXIT_CODES[code]


def signal_exit_code(signum: int) -> int:
    """Exit status of a process terminated by a signal (128 + signal number)."""
    return 128 + int(signum)


def exit_with_code(
    logger: Optional[BaseLogger],
    code: ExitCode,
    message: str,
    error: Optional[BaseException] = None
) -> NoReturn:
    """
    Log a fatal error with its exit code metadata and exit.

    Without a logger (failures before logging is set up) the error is
    written to stderr instead.

    Raises:
        SystemExit: always, with the numeric exit code
    """
    info = get_exit_code_info(code)

    if logger is not None:
        fields = {
            "exit_code": info.code,
            "exit_name": info.name,
            "exit_description": info.description,
            "exit_category": info.category,
        }
        if error is not None:
            fields["error"] = str(error)
        logger.log_error(message, **fields)
        logger.flush()
    else:
        if error is not None:
            print(f"FATAL: {message}: {error}", file=sys.stderr)
        else:
            print(f"FATAL: {message}", file=sys.stderr)
        print(f"Exit Code: {info.code} ({info.name}) - {info.description}", file=sys.stderr)

    raise SystemExit(info.code)
