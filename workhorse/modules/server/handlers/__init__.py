from .admin import AdminSignalHandler, parse_signal
from .errors import envelope_for_status, handle_error
from .health import HealthManager
from .metrics import metrics_handler
from .version import VersionHandler

__all__ = [
    'AdminSignalHandler', 'HealthManager', 'VersionHandler', 'envelope_for_status',
    'handle_error', 'metrics_handler', 'parse_signal',
]
