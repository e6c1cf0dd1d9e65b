"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

schedule_reads = Counter(
    'schedule_reads_total',
    'Schedule aggregation requests',
    ['result']  # success, error
)

availability_queries = Counter(
    'availability_queries_total',
    'Taken-seat queries per session',
    ['result']  # success, error
)

registration_attempts = Counter(
    'registration_attempts_total',
    'Registration write attempts',
    ['status']  # success, conflict, not_found, invalid, error
)

store_latency = Histogram(
    'sheet_store_latency_seconds',
    'Spreadsheet read/write latency',
    ['operation'],  # read, append
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

seat_hold_errors = Counter(
    'seat_hold_redis_errors_total',
    'Redis errors while holding a seat (fell back to process lock)'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_schedule_read(success: bool):
    schedule_reads.labels(result="success" if success else "error").inc()


def record_availability_query(success: bool):
    availability_queries.labels(result="success" if success else "error").inc()


def record_registration_attempt(status: str):
    """Status: success, conflict, not_found, invalid, error"""
    registration_attempts.labels(status=status).inc()
