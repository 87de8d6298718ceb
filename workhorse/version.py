"""Build and version information."""

import platform
import sys
from dataclasses import dataclass, field
from importlib import metadata
from typing import Dict, Optional

from . import __version__

# Release builds overwrite these two values.
COMMIT = "unknown"
BUILD_DATE = "unknown"

DEPENDENCIES = ["aiohttp", "click", "loguru", "prometheus-client", "psutil", "pydantic", "PyYAML", "requests"]


@dataclass(frozen=True)
class VersionInfo:
    """Version details reported by the CLI and the /version endpoint."""
    version: str = __version__
    commit: str = COMMIT
    build_date: str = BUILD_DATE
    dependencies: Dict[str, str] = field(default_factory=dict)

    @property
    def python_version(self) -> str:
        return platform.python_version()

    @property
    def implementation(self) -> str:
        return sys.implementation.name

    @property
    def platform(self) -> str:
        return f"{sys.platform}/{platform.machine()}"


def dependency_version(name: str) -> Optional[str]:
    """Get the installed version of a distribution, or None when missing."""
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        return None


def get_version_info() -> VersionInfo:
    dependencies = {}
    for name in DEPENDENCIES:
        dependencies[name] = dependency_version(name) or "not installed"
    return VersionInfo(dependencies=dependencies)
