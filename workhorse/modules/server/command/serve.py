import asyncio
import contextlib
import os
from typing import Mapping, Optional

from ....version import VersionInfo
from ...appid import AppIdentity
from ...config import AppConfig
from ...errors import ExitCode, ServerStartError, exit_with_code
from ...logging import BaseLogger, create_logger
from ...metrics import MetricsExporter
from ...shutdown import ShutdownConfig, ShutdownCoordinator, ShutdownOutcome
from ..handlers import HealthManager, VersionHandler
from ..server import Server, create_app

PROFILE_OUTPUTS = {
    "structured": "json",
    "json": "json",
    "plain": "plain",
    "simple": "plain",
    "colorful": "colorful",
    "dev": "colorful",
}


def shutdown_config_from(config: AppConfig) -> ShutdownConfig:
    return ShutdownConfig(
        grace_period=config.server.shutdown_timeout,
        double_signal_window=config.shutdown.double_signal_window,
        double_signal_message=config.shutdown.double_signal_message
    )


class ServeCommand:
    """Command class for running the HTTP server until it is told to stop."""

    def __init__(
        self,
        identity: AppIdentity,
        config: AppConfig,
        version_info: VersionInfo,
        logger: Optional[BaseLogger] = None,
        environ: Optional[Mapping[str, str]] = None
    ):
        """
        Initialize the serve command.

        Args:
            identity: App identity (names, env prefix, telemetry namespace)
            config: Effective configuration
            version_info: Version reported by /health and /version
            logger: Server logger; built from the logging config when omitted
            environ: Environment used to look up the admin token
        """
        self.identity = identity
        self.config = config
        self.version_info = version_info
        self.environ = environ if environ is not None else os.environ
        self.namespace = identity.telemetry_namespace()
        self.logger = logger or create_logger(
            PROFILE_OUTPUTS.get(config.logging.profile.lower(), "json"),
            config.logging.level,
            static_fields={"service": identity.binary_name, "namespace": self.namespace}
        )

    def build(self, host: str, port: int):
        """Wire the exporter, coordinator and server together.

        Handlers are registered so that LIFO execution stops HTTP first,
        then the metrics exporter, and flushes logs last.
        """
        metrics_cfg = self.config.metrics
        metrics = MetricsExporter(
            self.namespace,
            metrics_cfg.port,
            enabled=metrics_cfg.enabled and metrics_cfg.port != port
        )

        coordinator = ShutdownCoordinator(self.logger, shutdown_config_from(self.config))
        if self.config.shutdown.double_signal_enabled:
            coordinator.enable_double_signal(
                self.config.shutdown.double_signal_window,
                self.config.shutdown.double_signal_message
            )

        health = HealthManager(self.version_info.version, coordinator)
        app = create_app(
            self.logger,
            health,
            VersionHandler(self.identity.binary_name, self.version_info),
            metrics=metrics if metrics_cfg.enabled else None,
            coordinator=coordinator,
            admin_token=self.environ.get(f"{self.identity.env_prefix}ADMIN_TOKEN")
        )
        server = Server(
            app,
            host,
            port,
            self.logger,
            shutdown_timeout=self.config.server.shutdown_timeout,
            idle_timeout=self.config.server.idle_timeout
        )

        coordinator.register_shutdown_handler("flush-logs", lambda remaining: self.logger.flush())
        coordinator.register_shutdown_handler("stop-metrics-exporter", lambda remaining: metrics.stop())
        coordinator.register_shutdown_handler("stop-http-server", server.shutdown)
        coordinator.register_reload_handler(
            "config",
            lambda: self.logger.log_warning("Configuration reload is not supported; restart recommended")
        )
        return metrics, coordinator, server

    async def serve(self, server: Server, metrics: MetricsExporter, coordinator: ShutdownCoordinator) -> ExitCode:
        """
        Run until shutdown completes or the listener fails.

        Returns:
            The exit code for the process
        """
        try:
            await server.start()
            metrics.start()
        except (ServerStartError, OSError) as e:
            self.logger.log_error("Failed to start", error=str(e))
            await coordinator.shutdown(reason="startup failure")
            return ExitCode.PORT_UNAVAILABLE

        coordinator.mark_running()
        listener = asyncio.ensure_future(coordinator.listen())
        serving = asyncio.ensure_future(server.wait())

        done, _ = await asyncio.wait({listener, serving}, return_when=asyncio.FIRST_COMPLETED)

        if serving in done and serving.exception() is not None:
            error = serving.exception()
            listener.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await listener
            self.logger.log_error("Server error", error=str(error))
            await coordinator.shutdown(reason="server error")
            return ExitCode.FAILURE

        # The server also stops during a normal shutdown; let the sequence finish
        outcome = await listener
        if not serving.done():
            serving.cancel()

        if outcome is ShutdownOutcome.COMPLETED:
            self.logger.log_info("Server stopped gracefully")
        elif outcome is ShutdownOutcome.TIMED_OUT:
            self.logger.log_warning("Server stopped after the shutdown deadline")
        self.logger.flush()
        return ExitCode.SUCCESS

    def run(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """
        Run the serve command.

        Args:
            host: Listen host; defaults to server.host from config
            port: Listen port; defaults to server.port from config
        """
        host = host or self.config.server.host
        port = port if port is not None else self.config.server.port

        self.logger.log_info(
            "Initializing server",
            service=self.identity.binary_name,
            namespace=self.namespace,
            version=self.version_info.version,
            host=host,
            port=port
        )

        metrics, coordinator, server = self.build(host, port)
        code = asyncio.run(self.serve(server, metrics, coordinator))

        if code is ExitCode.PORT_UNAVAILABLE:
            exit_with_code(self.logger, code, f"Failed to start HTTP server on {host}:{port}")
        if code is not ExitCode.SUCCESS:
            exit_with_code(self.logger, code, "Server exited with an error")
