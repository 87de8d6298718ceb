"""Error envelopes returned by the HTTP surface."""

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


STATUS_BY_CODE = {
    "INVALID_INPUT": 400,
    "VALIDATION_FAILED": 400,
    "BAD_REQUEST": 400,
    "UNAUTHORIZED": 401,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "METHOD_NOT_ALLOWED": 405,
    "CONFLICT": 409,
    "TOO_MANY_REQUESTS": 429,
    "EXTERNAL_SERVICE_ERROR": 502,
    "SERVICE_UNAVAILABLE": 503,
    "TIMEOUT": 504,
}


@dataclass(frozen=True)
class ErrorEnvelope:
    code: str
    message: str
    severity: Severity = Severity.MEDIUM
    context: Dict[str, Any] = field(default_factory=dict)
    correlation_id: str = ""

    @property
    def http_status(self) -> int:
        return STATUS_BY_CODE.get(self.code, 500)

    def with_context(self, **context: Any) -> 'ErrorEnvelope':
        return replace(self, context={**self.context, **context})

    def with_correlation_id(self, correlation_id: str) -> 'ErrorEnvelope':
        return replace(self, correlation_id=correlation_id)

    def to_response(self) -> Dict[str, Any]:
        """Build the {"error": {...}} response body."""
        detail: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.context:
            detail["details"] = self.context
        if self.correlation_id:
            detail["request_id"] = self.correlation_id
        return {"error": detail}


def fallback_correlation_id() -> str:
    return f"fallback-{uuid.uuid4()}"


def envelope_from_exception(err: BaseException) -> ErrorEnvelope:
    """Wrap an arbitrary exception as an INTERNAL_ERROR envelope."""
    envelope = getattr(err, "envelope", None)
    if isinstance(envelope, ErrorEnvelope):
        return envelope
    return ErrorEnvelope(
        code="INTERNAL_ERROR",
        message="unexpected error",
        severity=Severity.HIGH,
        context={"wrapped_error": str(err)}
    )


def invalid_input(message: str) -> ErrorEnvelope:
    return ErrorEnvelope("INVALID_INPUT", message, Severity.LOW)


def unauthorized(message: str) -> ErrorEnvelope:
    return ErrorEnvelope("UNAUTHORIZED", message, Severity.MEDIUM)


def too_many_requests(message: str = "Too many requests") -> ErrorEnvelope:
    return ErrorEnvelope("TOO_MANY_REQUESTS", message, Severity.LOW)


def service_unavailable(message: str = "Service temporarily unavailable") -> ErrorEnvelope:
    return ErrorEnvelope("SERVICE_UNAVAILABLE", message, Severity.HIGH)
