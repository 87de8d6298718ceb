"""Tests for exit codes and error envelopes."""

import signal
import pytest

from workhorse.modules.errors import (
    ErrorEnvelope,
    ExitCode,
    Severity,
    envelope_from_exception,
    exit_with_code,
    fallback_correlation_id,
    get_exit_code_info,
    signal_exit_code,
)


def test_exit_code_values():
    assert ExitCode.SUCCESS == 0
    assert ExitCode.FAILURE == 1
    assert ExitCode.FILE_NOT_FOUND == 66
    assert ExitCode.PORT_UNAVAILABLE == 71
    assert ExitCode.CONFIG_INVALID == 78


def test_every_exit_code_has_metadata():
    for code in ExitCode:
        info = get_exit_code_info(code)
        assert info.code == int(code)
        assert info.name == code.name
        assert info.description


def test_signal_exit_code():
    assert signal_exit_code(signal.SIGINT) == 130
    assert signal_exit_code(signal.SIGTERM) == 143


def test_exit_with_code_logs_metadata(test_logger):
    with pytest.raises(SystemExit) as excinfo:
        exit_with_code(test_logger, ExitCode.PORT_UNAVAILABLE, "Failed to bind", OSError("in use"))

    assert excinfo.value.code == 71
    record = test_logger.records[-1]
    assert record["level"] == "ERROR"
    assert record["message"] == "Failed to bind"
    assert record["exit_code"] == 71
    assert record["exit_name"] == "PORT_UNAVAILABLE"
    assert record["exit_category"] == "networking"
    assert record["error"] == "in use"


def test_exit_with_code_omits_missing_error(test_logger):
    with pytest.raises(SystemExit):
        exit_with_code(test_logger, ExitCode.FAILURE, "Checks failed")

    assert "error" not in test_logger.records[-1]


def test_exit_with_code_without_logger_writes_stderr(capsys):
    with pytest.raises(SystemExit) as excinfo:
        exit_with_code(None, ExitCode.FILE_NOT_FOUND, "Failed to load app identity", FileNotFoundError("app.yaml"))

    assert excinfo.value.code == 66
    err = capsys.readouterr().err
    assert "FATAL: Failed to load app identity: app.yaml" in err
    assert "Exit Code: 66 (FILE_NOT_FOUND)" in err


def test_envelope_http_status():
    assert ErrorEnvelope("NOT_FOUND", "missing").http_status == 404
    assert ErrorEnvelope("TOO_MANY_REQUESTS", "slow down").http_status == 429
    assert ErrorEnvelope("SOMETHING_ELSE", "?").http_status == 500


def test_envelope_response_body():
    envelope = ErrorEnvelope("INVALID_INPUT", "bad field", Severity.LOW).with_context(field="port")
    envelope = envelope.with_correlation_id("req-1")

    assert envelope.to_response() == {
        "error": {
            "code": "INVALID_INPUT",
            "message": "bad field",
            "details": {"field": "port"},
            "request_id": "req-1",
        }
    }


def test_envelope_response_omits_empty_fields():
    assert ErrorEnvelope("NOT_FOUND", "missing").to_response() == {
        "error": {"code": "NOT_FOUND", "message": "missing"}
    }


def test_envelope_from_exception_wraps_error():
    envelope = envelope_from_exception(RuntimeError("kaboom"))

    assert envelope.code == "INTERNAL_ERROR"
    assert envelope.severity is Severity.HIGH
    assert envelope.context == {"wrapped_error": "kaboom"}
    assert envelope.http_status == 500


def test_fallback_correlation_id_is_unique():
    first, second = fallback_correlation_id(), fallback_correlation_id()

    assert first.startswith("fallback-")
    assert first != second
