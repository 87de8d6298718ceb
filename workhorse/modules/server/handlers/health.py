import asyncio
import inspect
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from aiohttp import web

from ...shutdown import ShutdownCoordinator

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"
DEGRADED = "degraded"
TIMEOUT = "timeout"

# Seconds each endpoint allows its checks
HEALTH_TIMEOUT = 5.0
LIVENESS_TIMEOUT = 2.0
READINESS_TIMEOUT = 5.0
STARTUP_TIMEOUT = 3.0


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class HealthManager:
    """Runs registered health checks and serves the /health endpoints.

    A checker is a sync or async callable with no arguments. Raising or
    returning False means unhealthy, returning "degraded" means degraded,
    anything else means healthy. Sync checkers run on the event loop and
    must be quick.
    """

    def __init__(self, version: str, coordinator: Optional[ShutdownCoordinator] = None):
        self.version = version
        self.coordinator = coordinator
        self.checkers: Dict[str, Callable[[], Any]] = {}

    def register_checker(self, name: str, checker: Callable[[], Any]) -> None:
        self.checkers[name] = checker

    async def _check(self, checker: Callable[[], Any]) -> str:
        try:
            result = checker()
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            return UNHEALTHY
        if result is False:
            return UNHEALTHY
        if result == DEGRADED:
            return DEGRADED
        return HEALTHY

    async def run_checks(self, timeout: float) -> Dict[str, str]:
        """Run every checker; the first one to exceed the budget ends the run."""
        checks: Dict[str, str] = {}
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        for name, checker in self.checkers.items():
            remaining = deadline - loop.time()
            try:
                if remaining <= 0:
                    raise asyncio.TimeoutError
                checks[name] = await asyncio.wait_for(self._check(checker), timeout=remaining)
            except asyncio.TimeoutError:
                checks[name] = TIMEOUT
                return checks
        return checks

    @staticmethod
    def determine_overall_status(checks: Dict[str, str]) -> str:
        degraded = False
        for status in checks.values():
            if status == UNHEALTHY:
                return UNHEALTHY
            if status in (DEGRADED, TIMEOUT):
                degraded = True
        return DEGRADED if degraded else HEALTHY

    async def _probe(self, timeout: float, check_shutdown: bool = False) -> web.Response:
        status = self.determine_overall_status(await self.run_checks(timeout))
        if check_shutdown and self.coordinator is not None and self.coordinator.is_shutting_down:
            status = UNHEALTHY
        return web.json_response(
            {"status": status, "timestamp": _timestamp()},
            status=503 if status == UNHEALTHY else 200
        )

    async def health(self, request: web.Request) -> web.Response:
        checks = await self.run_checks(HEALTH_TIMEOUT)
        status = self.determine_overall_status(checks)
        body: Dict[str, Any] = {
            "status": status,
            "version": self.version,
            "timestamp": _timestamp(),
        }
        if checks:
            body["checks"] = checks
        return web.json_response(body, status=503 if status == UNHEALTHY else 200)

    async def liveness(self, request: web.Request) -> web.Response:
        return await self._probe(LIVENESS_TIMEOUT)

    async def readiness(self, request: web.Request) -> web.Response:
        """Also reports unhealthy once shutdown has begun, so traffic drains."""
        return await self._probe(READINESS_TIMEOUT, check_shutdown=True)

    async def startup(self, request: web.Request) -> web.Response:
        return await self._probe(STARTUP_TIMEOUT)
