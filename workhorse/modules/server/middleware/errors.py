import asyncio

from aiohttp import web

from ...errors import envelope_from_exception
from ..handlers.errors import envelope_for_status, handle_error


@web.middleware
async def error_middleware(request: web.Request, handler):
    """
    Turn every error into a JSON envelope.

    Covers router errors (404/405), HTTP exceptions raised by handlers,
    bodiless error responses and unhandled exceptions (500).
    """
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        if exc.status < 400:
            raise
        error_response = handle_error(request, envelope_for_status(exc.status), status=exc.status)
        allow = exc.headers.get("Allow")
        if allow:
            error_response.headers["Allow"] = allow
        return error_response
    except asyncio.CancelledError:
        raise
    except Exception as e:
        return handle_error(request, envelope_from_exception(e), status=500)

    if response.status >= 400 and isinstance(response, web.Response) and not response.body:
        return handle_error(request, envelope_for_status(response.status), status=response.status)
    return response
