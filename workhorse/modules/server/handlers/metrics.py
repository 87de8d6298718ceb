from aiohttp import web

from ..keys import METRICS_KEY
from .errors import handle_error
from ...errors.envelope import service_unavailable


async def metrics_handler(request: web.Request) -> web.Response:
    """Serve the Prometheus text exposition."""
    exporter = request.app.get(METRICS_KEY)
    if exporter is None:
        return handle_error(request, service_unavailable("Metrics are disabled"))
    return web.Response(body=exporter.render(), headers={"Content-Type": exporter.content_type})
