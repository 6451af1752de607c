"""Monitoring and observability middleware"""
import time
from typing import Callable
from fastapi import Request, Response
from prometheus_client import Counter, Histogram, Gauge
from starlette.middleware.base import BaseHTTPMiddleware
from storefront.utils.logger import logger


# ===== Prometheus Metrics =====

# Request metrics
http_requests_total = Counter(
    "storefront_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "storefront_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

# Error metrics
http_errors_total = Counter(
    "storefront_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "status"]
)

# Auth metrics
authentication_failures_total = Counter(
    "storefront_authentication_failures_total",
    "Total authentication failures",
    ["reason"]  # missing_token, revoked_token, expired_token, invalid_token, forbidden, ...
)

revoked_tokens_gauge = Gauge(
    "storefront_revoked_tokens",
    "Number of entries in the token revocation registry"
)


def _route_template(request: Request) -> str:
    # Group /api/products/<id> style paths under their route template
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for monitoring and metrics collection"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics"""
        start_time = time.time()
        method = request.method

        # Add request ID for tracing
        request_id = request.headers.get("x-request-id", f"req_{int(time.time() * 1000)}")
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as e:
            endpoint = _route_template(request)
            http_errors_total.labels(method=method, endpoint=endpoint, status=500).inc()
            logger.error(
                f"Request failed: {method} {endpoint}",
                extra={"request_id": request_id, "action": "request_failed"},
                exc_info=True
            )
            raise

        status = response.status_code
        endpoint = _route_template(request)
        duration = time.time() - start_time

        http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

        # Log slow requests
        if duration > 1.0:
            logger.warning(
                f"Slow request detected: {method} {endpoint} ({duration:.3f}s, status {status})",
                extra={"request_id": request_id, "action": "slow_request"}
            )

        if status >= 400:
            http_errors_total.labels(method=method, endpoint=endpoint, status=status).inc()

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


def record_auth_failure(reason: str):
    """Record authentication/authorization failure"""
    authentication_failures_total.labels(reason=reason).inc()


def record_revocation_registry_size(size: int):
    revoked_tokens_gauge.set(size)
