"""
Monitoring and observability configuration.

Provides Prometheus metrics for the signing gateway.
"""

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST
import time


# Prometheus Metrics
UPSTREAM_ATTEMPTS_TOTAL = Counter(
    'upstream_attempts_total',
    'Total number of upstream dispatch attempts',
    ['upstream', 'outcome']
)

UPSTREAM_DURATION_SECONDS = Histogram(
    'upstream_duration_seconds',
    'Upstream attempt duration in seconds',
    ['upstream'],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0)
)

UPSTREAM_FAILURES_TOTAL = Counter(
    'upstream_failures_total',
    'Total number of dispatches that ended without success',
    ['upstream', 'category']
)

GATEWAY_ERRORS_TOTAL = Counter(
    'gateway_errors_total',
    'Total number of unexpected gateway errors',
    ['endpoint', 'error_type']
)

UPSTREAM_CONFIGURED = Gauge(
    'upstream_configured',
    'Whether credentials for an upstream are configured (1) or missing (0)',
    ['upstream']
)


def observe_upstream_attempt(upstream: str, outcome: str, started_at: float) -> None:
    """
    Record one upstream attempt.

    Args:
        upstream: Upstream label
        outcome: Attempt outcome value
        started_at: time.time() when the attempt began
    """
    UPSTREAM_ATTEMPTS_TOTAL.labels(upstream=upstream, outcome=outcome).inc()
    UPSTREAM_DURATION_SECONDS.labels(upstream=upstream).observe(time.time() - started_at)


def record_upstream_configuration(ocr_configured: bool, chat_configured: bool) -> None:
    """Set the upstream_configured gauge for both upstreams."""
    UPSTREAM_CONFIGURED.labels(upstream='ocr').set(1 if ocr_configured else 0)
    UPSTREAM_CONFIGURED.labels(upstream='chat').set(1 if chat_configured else 0)


def get_metrics():
    """
    Generate Prometheus metrics in exposition format.

    Returns:
        Tuple of (metrics_data, content_type)
    """
    return generate_latest(), CONTENT_TYPE_LATEST
