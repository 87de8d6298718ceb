"""App identity loaded from .fulmen/app.yaml."""

import re
from typing import Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from ..errors import ConfigError


class AppIdentity(BaseModel):
    binary_name: str
    vendor: str = "fulmenhq"
    env_prefix: str = "WORKHORSE_"
    config_name: str = ""
    description: str = ""
    telemetry_namespace_override: Optional[str] = None

    @field_validator('env_prefix')
    @classmethod
    def normalize_env_prefix(cls, value: str) -> str:
        value = value.strip().upper()
        if value and not value.endswith("_"):
            value += "_"
        return value

    @model_validator(mode='after')
    def default_config_name(self) -> 'AppIdentity':
        if not self.config_name:
            self.config_name = self.binary_name
        return self

    def telemetry_namespace(self) -> str:
        """Metric/log namespace: explicit value or <vendor>_<binary_name>."""
        if self.telemetry_namespace_override:
            return self.telemetry_namespace_override
        raw = f"{self.vendor}_{self.binary_name}" if self.vendor else self.binary_name
        return re.sub(r"[^a-z0-9_]", "_", raw.lower())

    @classmethod
    def from_yaml(cls, content: str, source: str = "<string>") -> 'AppIdentity':
        """
        Parse an identity document.

        The document holds an ``app`` mapping; ``telemetry.namespace`` is
        optional.

        Raises:
            ConfigError: If the document is malformed
        """
        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {source}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("app"), dict):
            raise ConfigError(f"{source}: missing 'app' section")

        fields = dict(data["app"])
        telemetry = data.get("telemetry") or {}
        if isinstance(telemetry, dict) and telemetry.get("namespace"):
            fields["telemetry_namespace_override"] = telemetry["namespace"]

        try:
            return cls(**fields)
        except ValidationError as e:
            raise ConfigError(f"{source}: invalid app identity: {e}") from e
