import uuid

from aiohttp import web

REQUEST_ID_HEADER = "X-Request-ID"


@web.middleware
async def request_id_middleware(request: web.Request, handler):
    """Reuse the caller's X-Request-ID or mint one, and echo it back."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    request["request_id"] = request_id
    response = await handler(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response
