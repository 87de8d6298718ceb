import time

from aiohttp import web

from ..keys import LOGGER_KEY, METRICS_KEY


@web.middleware
async def metrics_middleware(request: web.Request, handler):
    """Count, time and log every request."""
    start = time.perf_counter()
    response = await handler(request)
    duration = time.perf_counter() - start

    metrics = request.app.get(METRICS_KEY)
    if metrics is not None:
        body = getattr(response, "body", None)
        metrics.record_request(
            request.method,
            request.path,
            response.status,
            duration,
            request_size=request.content_length,
            response_size=len(body) if isinstance(body, (bytes, bytearray)) else None
        )

    logger = request.app.get(LOGGER_KEY)
    if logger is not None:
        logger.log_request(request.method, request.path, response.status, duration * 1000, request.get("request_id", ""))

    return response
