from typing import Optional

from aiohttp import web

from ...errors import ErrorEnvelope, Severity, fallback_correlation_id
from ..keys import LOGGER_KEY, METRICS_KEY

STATUS_ENVELOPES = {
    400: ("BAD_REQUEST", "The request was malformed"),
    401: ("UNAUTHORIZED", "Authentication is required"),
    403: ("FORBIDDEN", "Access to this resource is forbidden"),
    404: ("NOT_FOUND", "The requested resource was not found"),
    405: ("METHOD_NOT_ALLOWED", "The requested method is not allowed for this resource"),
    408: ("TIMEOUT", "Request timed out"),
    429: ("TOO_MANY_REQUESTS", "Too many requests"),
    500: ("INTERNAL_SERVER_ERROR", "Internal server error occurred"),
    503: ("SERVICE_UNAVAILABLE", "Service temporarily unavailable"),
}


def envelope_for_status(status: int) -> ErrorEnvelope:
    """Default envelope for a bare error status."""
    code, message = STATUS_ENVELOPES.get(status, ("UNKNOWN_ERROR", "An error occurred"))
    severity = Severity.HIGH if status >= 500 else Severity.LOW
    return ErrorEnvelope(code, message, severity)


def handle_error(request: Optional[web.Request], envelope: ErrorEnvelope, status: Optional[int] = None) -> web.Response:
    """
    Render an error envelope as a JSON response.

    The envelope is tagged with the request id (or a fallback id),
    logged at a level matching its severity, and counted in the
    errors_total metric.
    """
    if not envelope.correlation_id:
        request_id = request.get("request_id") if request is not None else None
        envelope = envelope.with_correlation_id(request_id or fallback_correlation_id())

    status = status or envelope.http_status

    if request is not None:
        logger = request.app.get(LOGGER_KEY)
        metrics = request.app.get(METRICS_KEY)
    else:
        logger = metrics = None

    if logger is not None:
        fields = {
            "error_code": envelope.code,
            "http_status": status,
            "request_id": envelope.correlation_id,
        }
        for key, value in envelope.context.items():
            if isinstance(value, str):
                fields[key] = value
        if envelope.severity in (Severity.CRITICAL, Severity.HIGH):
            logger.log_error(envelope.message, **fields)
        elif envelope.severity is Severity.MEDIUM:
            logger.log_warning(envelope.message, **fields)
        else:
            logger.log_info(envelope.message, **fields)

    if metrics is not None:
        metrics.record_error(envelope.code, status)

    return web.json_response(envelope.to_response(), status=status)
