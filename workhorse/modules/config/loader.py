"""Layered configuration: defaults, config file, environment, runtime overrides."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from ..appid import AppIdentity
from ..errors import ConfigError
from .models import AppConfig


@dataclass(frozen=True)
class EnvVarSpec:
    name: str
    path: Tuple[str, ...]
    type: str = "str"


ENV_SPECS = [
    ("HOST", ("server", "host"), "str"),
    ("PORT", ("server", "port"), "int"),
    ("READ_TIMEOUT", ("server", "read_timeout"), "str"),
    ("WRITE_TIMEOUT", ("server", "write_timeout"), "str"),
    ("IDLE_TIMEOUT", ("server", "idle_timeout"), "str"),
    ("SHUTDOWN_TIMEOUT", ("server", "shutdown_timeout"), "str"),
    ("DOUBLE_SIGNAL_WINDOW", ("shutdown", "double_signal_window"), "str"),
    ("LOG_LEVEL", ("logging", "level"), "str"),
    ("LOG_PROFILE", ("logging", "profile"), "str"),
    ("METRICS_ENABLED", ("metrics", "enabled"), "bool"),
    ("METRICS_PORT", ("metrics", "port"), "int"),
    ("HEALTH_ENABLED", ("health", "enabled"), "bool"),
    ("DEBUG_ENABLED", ("debug", "enabled"), "bool"),
    ("DEBUG_PPROF_ENABLED", ("debug", "pprof_enabled"), "bool"),
    ("WORKERS", ("workers",), "int"),
]

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def env_specs(prefix: str) -> List[EnvVarSpec]:
    if prefix and not prefix.endswith("_"):
        prefix += "_"
    return [EnvVarSpec(prefix + name, path, kind) for name, path, kind in ENV_SPECS]


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into a copy of base; nested dicts merge, other values replace."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def set_path(data: Dict[str, Any], path: Tuple[str, ...], value: Any) -> None:
    node = data
    for key in path[:-1]:
        node = node.setdefault(key, {})
    node[path[-1]] = value


def _convert(spec: EnvVarSpec, raw: str) -> Any:
    if spec.type == "int":
        try:
            return int(raw.strip())
        except ValueError:
            raise ConfigError(f"{spec.name} must be an integer, got {raw!r}")
    if spec.type == "bool":
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ConfigError(f"{spec.name} must be a boolean, got {raw!r}")
    return raw


def load_env_overrides(specs: List[EnvVarSpec], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Collect the environment variables that are set into a nested override dict."""
    environ = environ if environ is not None else os.environ
    overrides: Dict[str, Any] = {}
    for spec in specs:
        raw = environ.get(spec.name)
        if raw is None or raw == "":
            continue
        set_path(overrides, spec.path, _convert(spec, raw))
    return overrides


def user_config_dir(environ: Optional[Dict[str, str]] = None) -> Path:
    environ = environ if environ is not None else os.environ
    xdg = environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


class ConfigLoader:
    """Loads AppConfig for an app identity."""

    def __init__(self, identity: AppIdentity, environ: Optional[Dict[str, str]] = None, cwd: Optional[Path] = None):
        self.identity = identity
        self.environ = environ if environ is not None else os.environ
        self.cwd = cwd or Path.cwd()
        self.config_file_used: Optional[Path] = None

    def candidate_paths(self) -> List[Path]:
        config_dir = user_config_dir(self.environ)
        paths = [config_dir / self.identity.config_name / "config.yaml"]
        # Older templates stored config under the binary name
        if self.identity.binary_name != self.identity.config_name:
            paths.append(config_dir / self.identity.binary_name / "config.yaml")
        paths.append(self.cwd / "config" / "config.yaml")
        return paths

    def _read_file(self, path: Path) -> Dict[str, Any]:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    def load(self, config_file: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> AppConfig:
        """
        Load the effective configuration.

        Args:
            config_file: Explicit config file; must exist when given
            overrides: Runtime overrides (e.g. CLI flags), highest precedence

        Raises:
            ConfigError: If a file is unreadable, an env var is malformed
                or the merged result fails validation
        """
        merged: Dict[str, Any] = {}

        if config_file:
            path = Path(config_file).expanduser()
            if not path.is_file():
                raise ConfigError(f"Config file not found: {path}")
            self.config_file_used = path
        else:
            self.config_file_used = next((p for p in self.candidate_paths() if p.is_file()), None)

        if self.config_file_used is not None:
            merged = deep_merge(merged, self._read_file(self.config_file_used))

        merged = deep_merge(merged, load_env_overrides(env_specs(self.identity.env_prefix), self.environ))

        if overrides:
            merged = deep_merge(merged, overrides)

        try:
            return AppConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
