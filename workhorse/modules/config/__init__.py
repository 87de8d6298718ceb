"""Application configuration."""

from .loader import ConfigLoader, deep_merge, env_specs, load_env_overrides
from .models import AppConfig, LoggingConfig, MetricsConfig, ServerConfig, ShutdownSettings, parse_duration

__all__ = [
    'AppConfig', 'ConfigLoader', 'LoggingConfig', 'MetricsConfig', 'ServerConfig',
    'ShutdownSettings', 'deep_merge', 'env_specs', 'load_env_overrides', 'parse_duration',
]
