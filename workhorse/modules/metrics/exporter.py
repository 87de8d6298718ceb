from typing import Optional
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest, start_http_server
from prometheus_client import CONTENT_TYPE_LATEST


def endpoint_pattern(path: str) -> str:
    """Collapse a request path into a bounded label value."""
    if path == "/health" or path.startswith("/health/"):
        return "/health/*"
    if path in ("/", "/version", "/metrics", "/admin/signal"):
        return path
    return "/unknown"


class MetricsExporter:
    """Prometheus metrics for the HTTP server, kept in a private registry."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, namespace: str, port: int = 9090, enabled: bool = True):
        """Initialize the exporter.

        Args:
            namespace: Metric name prefix (the app's telemetry namespace)
            port: Port for the standalone exposition server
            enabled: When False, start() does not open the metrics port
        """
        self.namespace = namespace
        self.port = port
        self.enabled = enabled
        self.registry = CollectorRegistry()
        self._httpd = None
        self._thread = None

        self.requests_total = Counter(
            'http_requests_total',
            'Total number of HTTP requests',
            ['method', 'path', 'status'],
            namespace=namespace,
            registry=self.registry
        )
        self.request_duration = Histogram(
            'http_request_duration_seconds',
            'Duration of HTTP requests in seconds',
            ['method', 'path', 'status'],
            namespace=namespace,
            registry=self.registry
        )
        self.request_size = Histogram(
            'http_request_size_bytes',
            'Size of HTTP request bodies in bytes',
            ['method', 'path'],
            buckets=(100, 1_000, 10_000, 100_000, 1_000_000),
            namespace=namespace,
            registry=self.registry
        )
        self.response_size = Histogram(
            'http_response_size_bytes',
            'Size of HTTP response bodies in bytes',
            ['method', 'path'],
            buckets=(100, 1_000, 10_000, 100_000, 1_000_000),
            namespace=namespace,
            registry=self.registry
        )
        self.errors_total = Counter(
            'errors_total',
            'Total number of error responses by error code',
            ['code', 'status'],
            namespace=namespace,
            registry=self.registry
        )

    @property
    def running(self) -> bool:
        return self._httpd is not None

    def record_request(
        self,
        method: str,
        path: str,
        status: int,
        duration_seconds: float,
        request_size: Optional[int] = None,
        response_size: Optional[int] = None
    ) -> None:
        """Record one completed request."""
        pattern = endpoint_pattern(path)
        labels = dict(method=method, path=pattern, status=str(status))
        self.requests_total.labels(**labels).inc()
        self.request_duration.labels(**labels).observe(duration_seconds)
        if request_size is not None:
            self.request_size.labels(method=method, path=pattern).observe(request_size)
        if response_size is not None:
            self.response_size.labels(method=method, path=pattern).observe(response_size)

    def record_error(self, code: str, status: int) -> None:
        self.errors_total.labels(code=code, status=str(status)).inc()

    def render(self) -> bytes:
        """Text exposition of every metric in the registry."""
        return generate_latest(self.registry)

    def start(self, addr: str = "0.0.0.0") -> None:
        """Serve the registry on the metrics port in a background thread."""
        if not self.enabled or self.running:
            return
        self._httpd, self._thread = start_http_server(self.port, addr=addr, registry=self.registry)

    def stop(self) -> None:
        if self._httpd is None:
            return
        self._httpd.shutdown()
        self._httpd.server_close()
        self._httpd = None
        self._thread = None
