from typing import Optional

import click
import requests

from ....version import VersionInfo
from ...config import AppConfig
from ...errors import ExitCode, exit_with_code
from ...logging import BaseLogger


class HealthCommand:
    """Self-health check, optionally probing a running instance."""

    def __init__(self, logger: Optional[BaseLogger], version_info: VersionInfo, config: Optional[AppConfig], timeout: float = 5.0):
        self.logger = logger
        self.version_info = version_info
        self.config = config
        self.timeout = timeout

    def _fail(self, message: str) -> None:
        click.echo(f"❌ FAIL: {message}")
        exit_with_code(self.logger, ExitCode.FAILURE, message)

    def check_remote(self, url: str) -> None:
        """GET <url>/health and require a healthy or degraded answer."""
        endpoint = url.rstrip("/") + "/health"
        try:
            response = requests.get(endpoint, timeout=self.timeout)
            body = response.json()
        except (requests.exceptions.RequestException, ValueError) as err:
            click.echo(f"❌ FAIL: {endpoint} unreachable")
            exit_with_code(self.logger, ExitCode.EXTERNAL_SERVICE_UNAVAILABLE, f"Cannot reach {endpoint}", err)

        status = body.get("status", "unknown") if isinstance(body, dict) else "unknown"
        if response.status_code != 200:
            click.echo(f"❌ FAIL: {endpoint} reported {status} ({response.status_code})")
            exit_with_code(self.logger, ExitCode.EXTERNAL_SERVICE_UNAVAILABLE, f"{endpoint} is {status}")
        click.echo(f"✅ Service at {url} is {status}")

    def run(self, url: Optional[str] = None) -> None:
        if self.logger is None:
            self._fail("Logger not initialized")
        self.logger.log_info("Running health check...")

        # Check 1: Version info available
        if not self.version_info.version:
            self.logger.log_error("Version information not available")
            self._fail("Version information missing")
        self.logger.log_debug("Version check passed", version=self.version_info.version)
        click.echo("✅ Version information available")

        # Check 2: Logger initialized
        click.echo("✅ Logger initialized")

        # Check 3: Configuration loaded
        if self.config is None:
            self._fail("Configuration not loaded")
        click.echo("✅ Configuration system ready")

        if url:
            self.check_remote(url)

        click.echo("\n✅ All health checks passed")
        self.logger.log_info("Health check completed successfully")
