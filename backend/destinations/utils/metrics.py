"""
Monitoring metrics for the Destinations service.
Tracks request traffic, background job lifecycle and batch import outcomes.
"""

from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest
from typing import Optional
from contextlib import contextmanager


class DestinationsMetrics:
    """
    Central metrics collection for the Destinations service.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics with optional custom registry."""
        self.registry = registry or CollectorRegistry()

        self.http_requests_total = Counter(
            'http_requests_total',
            'Total HTTP requests handled',
            ['method', 'route', 'status'],
            registry=self.registry
        )

        self.api_response_seconds = Histogram(
            'api_response_seconds',
            'API response time in seconds',
            ['route'],
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self.registry
        )

        self.database_query_seconds = Histogram(
            'database_query_seconds',
            'Database statement execution time in seconds',
            ['statement'],
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
            registry=self.registry
        )

        self.job_transitions_total = Counter(
            'job_transitions_total',
            'Background job status transitions',
            ['job_type', 'status'],
            registry=self.registry
        )

        self.jobs_in_flight = Gauge(
            'jobs_in_flight',
            'Background jobs currently processing',
            registry=self.registry
        )

        self.batch_items_total = Counter(
            'batch_items_total',
            'Items handled by batch imports',
            ['outcome'],
            registry=self.registry
        )

    def record_request(self, method: str, route: str, status_code: int, duration: float):
        """Record a handled HTTP request."""
        self.http_requests_total.labels(
            method=method,
            route=route,
            status=str(status_code)
        ).inc()
        self.api_response_seconds.labels(route=route).observe(duration)

    def record_query(self, statement: str, duration: float):
        """Record database statement duration."""
        self.database_query_seconds.labels(statement=statement).observe(duration)

    def record_job_transition(self, job_type: str, status: str):
        """Record a job entering a new status."""
        self.job_transitions_total.labels(job_type=job_type, status=status).inc()

    def record_batch_item(self, outcome: str):
        """Record a single batch item outcome."""
        self.batch_items_total.labels(outcome=outcome).inc()

    @contextmanager
    def track_job(self):
        """Context manager counting a job as in flight while it runs."""
        self.jobs_in_flight.inc()
        try:
            yield
        finally:
            self.jobs_in_flight.dec()

    def get_metrics(self) -> str:
        """Get current metrics in Prometheus format."""
        return generate_latest(self.registry).decode('utf-8')


# Global metrics instance
metrics = DestinationsMetrics()
