"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Payment order metrics
payment_orders = Counter(
    'eventhive_payment_orders_total',
    'Payment order transitions',
    ['outcome']  # created, successful, failed, cancelled, rejected
)

payment_verification_latency = Histogram(
    'eventhive_payment_verification_seconds',
    'Time spent verifying a payment and confirming the booking',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

reservations_expired = Counter(
    'eventhive_reservations_expired_total',
    'Pending payment orders cancelled by the expiration sweeper'
)

# Facility booking metrics
court_bookings = Counter(
    'eventhive_court_bookings_total',
    'Court time slot booking operations',
    ['operation', 'result']  # book/cancel, success/rejected
)

time_slots_generated = Counter(
    'eventhive_time_slots_generated_total',
    'Time slots created by bulk generation',
    ['result']  # created, skipped
)

# Moderation metrics
reports_submitted = Counter(
    'eventhive_reports_submitted_total',
    'User reports submitted',
    ['target']  # user, facility
)

reviews_submitted = Counter(
    'eventhive_reviews_submitted_total',
    'Venue reviews submitted by players',
    ['verified']  # true, false
)

# Cache metrics
cache_operations = Counter(
    'eventhive_cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_payment_order(outcome: str):
    """Outcome: created, successful, failed, cancelled, rejected"""
    payment_orders.labels(outcome=outcome).inc()


def record_court_booking(operation: str, success: bool):
    result = "success" if success else "rejected"
    court_bookings.labels(operation=operation, result=result).inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
