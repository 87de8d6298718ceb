from .envelope import ErrorEnvelope, Severity, envelope_from_exception, fallback_correlation_id
from .exceptions import ConfigError, IdentityNotFoundError, ServerStartError, WorkhorseError
from .exit_codes import ExitCode, exit_with_code, get_exit_code_info, signal_exit_code

__all__ = [
    'ErrorEnvelope', 'Severity', 'envelope_from_exception', 'fallback_correlation_id',
    'ConfigError', 'IdentityNotFoundError', 'ServerStartError', 'WorkhorseError',
    'ExitCode', 'exit_with_code', 'get_exit_code_info', 'signal_exit_code',
]
