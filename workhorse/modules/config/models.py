import re
from typing import Union

from pydantic import BaseModel, field_validator

_NUMBER = re.compile(r"^\d+(?:\.\d+)?$")
_DURATION = re.compile(r"^(?:\d+(?:\.\d+)?(?:ms|s|m|h))+$")
_SEGMENT = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: Union[str, int, float]) -> float:
    """Parse '500ms', '10s', '1m30s', '1h' or a bare number of seconds."""
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = str(value).strip()
        if _NUMBER.match(text):
            seconds = float(text)
        elif _DURATION.match(text):
            seconds = sum(float(number) * _UNITS[unit] for number, unit in _SEGMENT.findall(text))
        else:
            raise ValueError(f"invalid duration: {value!r}")
    if seconds < 0:
        raise ValueError(f"duration must not be negative: {value!r}")
    return seconds


class ServerConfig(BaseModel):
    host: str = "localhost"
    port: int = 8080
    read_timeout: float = 30.0
    write_timeout: float = 30.0
    idle_timeout: float = 120.0
    shutdown_timeout: float = 10.0

    @field_validator('read_timeout', 'write_timeout', 'idle_timeout', 'shutdown_timeout', mode='before')
    @classmethod
    def validate_duration(cls, value):
        return parse_duration(value)

    @field_validator('port')
    @classmethod
    def validate_port(cls, value: int) -> int:
        if not 0 <= value <= 65535:
            raise ValueError(f"port out of range: {value}")
        return value


class ShutdownSettings(BaseModel):
    double_signal_enabled: bool = True
    double_signal_window: float = 2.0
    double_signal_message: str = "Press Ctrl+C again to force quit"

    @field_validator('double_signal_window', mode='before')
    @classmethod
    def validate_duration(cls, value):
        return parse_duration(value)


class LoggingConfig(BaseModel):
    level: str = "info"
    profile: str = "structured"


class MetricsConfig(BaseModel):
    enabled: bool = True
    port: int = 9090


class HealthConfig(BaseModel):
    enabled: bool = True


class DebugConfig(BaseModel):
    enabled: bool = False
    pprof_enabled: bool = False


class AppConfig(BaseModel):
    server: ServerConfig = ServerConfig()
    shutdown: ShutdownSettings = ShutdownSettings()
    logging: LoggingConfig = LoggingConfig()
    metrics: MetricsConfig = MetricsConfig()
    health: HealthConfig = HealthConfig()
    debug: DebugConfig = DebugConfig()
    workers: int = 4
