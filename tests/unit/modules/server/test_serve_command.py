"""Tests for the serve command lifecycle."""

import asyncio
import signal
import socket

import pytest

from workhorse.modules.appid import AppIdentity
from workhorse.modules.config import AppConfig
from workhorse.modules.config.models import MetricsConfig, ServerConfig
from workhorse.modules.errors import ExitCode
from workhorse.modules.server.command.serve import PROFILE_OUTPUTS, ServeCommand, shutdown_config_from
from workhorse.modules.shutdown import LifecycleState
from workhorse.version import VersionInfo


@pytest.fixture
def identity():
    return AppIdentity(binary_name="workhorse")


@pytest.fixture
def config():
    return AppConfig(
        server=ServerConfig(host="127.0.0.1", port=0, shutdown_timeout="2s"),
        metrics=MetricsConfig(enabled=False)
    )


async def wait_until_running(coordinator):
    for _ in range(200):
        if coordinator.state is LifecycleState.RUNNING:
            return
        await asyncio.sleep(0.01)
    raise AssertionError("server did not start")


def messages(test_logger):
    return [r["message"] for r in test_logger.records]


def test_shutdown_config_from(config):
    shutdown = shutdown_config_from(config)

    assert shutdown.grace_period == 2.0
    assert shutdown.double_signal_window == 2.0
    assert shutdown.double_signal_message == "Press Ctrl+C again to force quit"


def test_profiles_map_to_logger_outputs():
    assert PROFILE_OUTPUTS["structured"] == "json"
    assert PROFILE_OUTPUTS["simple"] == "plain"


def test_admin_token_comes_from_env_prefix(identity, config, test_logger):
    command = ServeCommand(identity, config, VersionInfo(), logger=test_logger, environ={"WORKHORSE_ADMIN_TOKEN": "t"})

    _, _, server = command.build("127.0.0.1", 0)

    assert any(route.method == "POST" for route in server.app.router.routes())


@pytest.mark.asyncio
async def test_serve_shuts_down_in_order(identity, config, test_logger):
    command = ServeCommand(identity, config, VersionInfo(), logger=test_logger, environ={})
    metrics, coordinator, server = command.build("127.0.0.1", 0)

    serving = asyncio.ensure_future(command.serve(server, metrics, coordinator))
    try:
        await wait_until_running(coordinator)
        assert server.bound_port

        coordinator.notify(signal.SIGTERM)
        code = await asyncio.wait_for(serving, timeout=5.0)
    finally:
        coordinator.restore_signal_handlers()

    assert code is ExitCode.SUCCESS
    assert coordinator.state is LifecycleState.STOPPED

    logged = messages(test_logger)
    order = [
        "Executing shutdown handler: stop-http-server",
        "Shutting down HTTP server",
        "Executing shutdown handler: stop-metrics-exporter",
        "Executing shutdown handler: flush-logs",
        "Graceful shutdown completed",
        "Server stopped gracefully",
    ]
    positions = [logged.index(message) for message in order]
    assert positions == sorted(positions)


@pytest.mark.asyncio
async def test_serve_reports_busy_port(identity, config, test_logger):
    with socket.socket() as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen()
        port = busy.getsockname()[1]

        command = ServeCommand(identity, config, VersionInfo(), logger=test_logger, environ={})
        metrics, coordinator, server = command.build("127.0.0.1", port)
        code = await command.serve(server, metrics, coordinator)

    assert code is ExitCode.PORT_UNAVAILABLE
    assert coordinator.state is LifecycleState.STOPPED
    assert "Failed to start" in messages(test_logger)


def test_run_exits_on_busy_port(identity, config, test_logger):
    with socket.socket() as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen()
        port = busy.getsockname()[1]

        command = ServeCommand(identity, config, VersionInfo(), logger=test_logger, environ={})
        with pytest.raises(SystemExit) as excinfo:
            command.run(port=port)

    assert excinfo.value.code == ExitCode.PORT_UNAVAILABLE
