"""
Prometheus metrics for ShopLabel.

Provides metrics collection for:
- HTTP requests (latency, status codes, paths)
- Order fulfillment outcomes and generated labels
- Failures of external providers
- Stripe usage reports and webhook outcomes
"""

import re
import time
from typing import Optional

from prometheus_client import (
    Counter,
    Histogram,
    REGISTRY,
    CollectorRegistry,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)


class PrometheusMetrics:
    """Centralized Prometheus metrics collector."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or REGISTRY

        # ========== HTTP Metrics ==========
        self.http_requests_total = Counter(
            'shoplabel_http_requests_total',
            'Total HTTP requests',
            ['method', 'endpoint', 'status'],
            registry=self.registry
        )

        self.http_request_duration_seconds = Histogram(
            'shoplabel_http_request_duration_seconds',
            'HTTP request latency in seconds',
            ['method', 'endpoint'],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
            registry=self.registry
        )

        # ========== Business Metrics ==========
        self.fulfillment_events_total = Counter(
            'shoplabel_fulfillment_events_total',
            'Order events handled by the fulfillment pipeline',
            ['outcome'],
            registry=self.registry
        )

        self.labels_generated_total = Counter(
            'shoplabel_labels_generated_total',
            'Shipping labels created at the carrier',
            registry=self.registry
        )

        self.upstream_errors_total = Counter(
            'shoplabel_upstream_errors_total',
            'Failed calls to external providers',
            ['provider'],
            registry=self.registry
        )

        self.usage_reports_total = Counter(
            'shoplabel_usage_reports_total',
            'Metered usage reports sent to Stripe',
            ['status'],
            registry=self.registry
        )

        self.billing_webhooks_total = Counter(
            'shoplabel_billing_webhooks_total',
            'Stripe webhook deliveries by outcome',
            ['outcome'],
            registry=self.registry
        )

        logger.debug("Prometheus metrics initialized")


# Global metrics instance
_metrics: Optional[PrometheusMetrics] = None


def get_metrics() -> PrometheusMetrics:
    """Get or create global metrics instance."""
    global _metrics
    if _metrics is None:
        _metrics = PrometheusMetrics()
    return _metrics


_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware for automatic HTTP metrics collection."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/metrics":
            return await call_next(request)

        metrics = get_metrics()
        endpoint = self._normalize_path(request.url.path)
        method = request.method
        start_time = time.time()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            metrics.http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=status
            ).inc()
            metrics.http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(time.time() - start_time)

    @staticmethod
    def _normalize_path(path: str) -> str:
        """Collapse numeric ids so label cardinality stays bounded."""
        return _NUMERIC_SEGMENT.sub("/{id}", path)
