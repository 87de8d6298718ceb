import hmac
import signal
from typing import Optional

from aiohttp import web

from ...errors.envelope import invalid_input, too_many_requests, unauthorized
from ...shutdown import ShutdownCoordinator
from ..ratelimit import TokenBucket
from .errors import handle_error

SIGNAL_ALIASES = {
    "SIGTERM": signal.SIGTERM,
    "TERM": signal.SIGTERM,
    "SIGINT": signal.SIGINT,
    "INT": signal.SIGINT,
}
if hasattr(signal, "SIGHUP"):
    SIGNAL_ALIASES.update({"SIGHUP": signal.SIGHUP, "HUP": signal.SIGHUP, "RELOAD": signal.SIGHUP})


def parse_signal(name) -> Optional[signal.Signals]:
    if not isinstance(name, str):
        return None
    return SIGNAL_ALIASES.get(name.strip().upper())


class AdminSignalHandler:
    """POST /admin/signal: deliver a signal to the coordinator over HTTP."""

    def __init__(
        self,
        token: str,
        coordinator: ShutdownCoordinator,
        limiter: Optional[TokenBucket] = None
    ):
        self.token = token
        self.coordinator = coordinator
        self.limiter = limiter or TokenBucket(rate=10, burst=5)

    def _authorized(self, request: web.Request) -> bool:
        scheme, _, supplied = request.headers.get("Authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not supplied:
            return False
        return hmac.compare_digest(supplied.strip().encode(), self.token.encode())

    async def __call__(self, request: web.Request) -> web.Response:
        if not self.limiter.allow():
            return handle_error(request, too_many_requests("Admin signal rate limit exceeded"))
        if not self._authorized(request):
            return handle_error(request, unauthorized("Missing or invalid bearer token"))

        try:
            body = await request.json()
        except ValueError:
            return handle_error(request, invalid_input("Request body must be JSON"))

        sig = parse_signal(body.get("signal") if isinstance(body, dict) else None)
        if sig is None:
            return handle_error(request, invalid_input("Unknown signal; expected SIGTERM, SIGINT or SIGHUP"))

        self.coordinator.notify(sig)
        return web.json_response({"status": "accepted", "signal": sig.name}, status=202)
