"""End-to-end tests running the server as a subprocess."""

import json
import os
import signal
import socket
import subprocess
import sys
import time
from pathlib import Path
from typing import Dict, List

import pytest
import requests

ROOT = Path(__file__).parent.parent.parent


def free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def start_server(port: int, extra_env: Dict[str, str] = None) -> subprocess.Popen:
    env = dict(os.environ)
    env.update({
        "FULMEN_APP_IDENTITY_PATH": str(ROOT / ".fulmen" / "app.yaml"),
        "WORKHORSE_METRICS_ENABLED": "false",
        "WORKHORSE_LOG_PROFILE": "structured",
        "WORKHORSE_SHUTDOWN_TIMEOUT": "5s",
        "PYTHONUNBUFFERED": "1",
    })
    env.update(extra_env or {})
    return subprocess.Popen(
        [sys.executable, "-m", "workhorse", "serve", "--host", "127.0.0.1", "--port", str(port)],
        cwd=ROOT,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True
    )


def wait_healthy(process: subprocess.Popen, port: int, timeout: float = 15.0) -> None:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if process.poll() is not None:
            pytest.fail(f"server exited early: {process.stderr.read()}")
        try:
            if requests.get(f"http://127.0.0.1:{port}/health", timeout=1).status_code == 200:
                return
        except requests.exceptions.ConnectionError:
            pass
        time.sleep(0.1)
    process.kill()
    pytest.fail("server did not become healthy")


def log_messages(stderr: str) -> List[str]:
    messages = []
    for line in stderr.splitlines():
        try:
            messages.append(json.loads(line)["record"]["message"])
        except (ValueError, KeyError):
            continue
    return messages


@pytest.fixture
def port():
    return free_port()


def test_sigterm_shuts_down_gracefully(port):
    process = start_server(port)
    try:
        wait_healthy(process, port)
        process.send_signal(signal.SIGTERM)
        _, stderr = process.communicate(timeout=15)
    finally:
        if process.poll() is None:
            process.kill()

    assert process.returncode == 0
    messages = log_messages(stderr)
    expected = [
        "Received SIGTERM signal, initiating graceful shutdown...",
        "Starting graceful shutdown...",
        "Shutting down HTTP server",
        "Graceful shutdown completed",
        "Server stopped gracefully",
    ]
    positions = [messages.index(message) for message in expected]
    assert positions == sorted(positions)


def test_admin_signal_shuts_down(port):
    process = start_server(port, {"WORKHORSE_ADMIN_TOKEN": "integration-token"})
    try:
        wait_healthy(process, port)
        response = requests.post(
            f"http://127.0.0.1:{port}/admin/signal",
            json={"signal": "SIGTERM"},
            headers={"Authorization": "Bearer integration-token"},
            timeout=5
        )
        assert response.status_code == 202
        _, stderr = process.communicate(timeout=15)
    finally:
        if process.poll() is None:
            process.kill()

    assert process.returncode == 0
    assert "Graceful shutdown completed" in log_messages(stderr)


def test_busy_port_exits_with_port_unavailable():
    with socket.socket() as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen()
        port = busy.getsockname()[1]

        process = start_server(port)
        process.communicate(timeout=15)

    assert process.returncode == 71
