from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import time

# Metrics definitions
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"]
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

SHORT_LINKS_CREATED_TOTAL = Counter("short_links_created_total", "Total short links created")
SHORT_LINK_REJECTIONS_TOTAL = Counter(
    "short_link_rejections_total",
    "Short link creations rejected before persisting",
    ["reason"]
)
ORPHANED_SHORT_LINKS_TOTAL = Counter(
    "orphaned_short_links_total",
    "Short links persisted without an ownership relation"
)
RATE_LIMITED_TOTAL = Counter("rate_limited_total", "Total rate limited requests")


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time

        status_code = str(response.status_code)
        method = request.method
        path = request.url.path

        # Unknown paths collapse into one label to bound cardinality
        if path in ("/v1/links", "/metrics", "/health"):
            metric_path = path
        else:
            metric_path = "other"

        HTTP_REQUESTS_TOTAL.labels(method=method, path=metric_path, status=status_code).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=method, path=metric_path).observe(process_time)

        return response

def metrics_endpoint(request: Request):
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
