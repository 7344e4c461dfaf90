"""
Prometheus metrics for monitoring.

Tracks authentication outcomes per method and relay call latency.
"""

import time
from typing import Optional
from functools import wraps
import logging

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)


class Metrics:
    """
    Prometheus metrics collector.

    Tracks:
    - Authentication attempts by method and outcome
    - Authentication latency by method
    - Relay request latency
    """

    def __init__(self, enabled: bool = True, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics.

        Args:
            enabled: Enable metrics collection
            registry: Collector registry (process default if None)
        """
        self.enabled = enabled
        if registry is None:
            registry = REGISTRY

        if not self.enabled:
            return

        self.authentications = Counter(
            'lit_auth_authentications_total',
            'Total authentication attempts',
            ['method', 'outcome'],
            registry=registry
        )

        self.authentication_latency = Histogram(
            'lit_auth_authentication_latency_seconds',
            'Authentication latency, including user interaction',
            ['method'],
            registry=registry
        )

        self.relay_latency = Histogram(
            'lit_auth_relay_latency_seconds',
            'Relay request latency',
            ['operation'],
            registry=registry
        )

    def track_authentication(self, method: str, outcome: str, duration: Optional[float] = None) -> None:
        """Record an authentication attempt."""
        if self.enabled:
            self.authentications.labels(method=method, outcome=outcome).inc()
            if duration is not None:
                self.authentication_latency.labels(method=method).observe(duration)

    def track_relay_latency(self, operation: str, duration: float) -> None:
        """Record relay latency."""
        if self.enabled:
            self.relay_latency.labels(operation=operation).observe(duration)


# Global metrics instance
_metrics: Optional[Metrics] = None


def get_metrics(enabled: bool = True) -> Metrics:
    """Get or create metrics instance."""
    global _metrics
    if _metrics is None:
        _metrics = Metrics(enabled=enabled)
    return _metrics


def start_metrics_server(port: int = 9090) -> bool:
    """
    Expose metrics over HTTP.

    Returns:
        True if the server started
    """
    try:
        start_http_server(port)
        logger.info(f"Metrics server started on port {port}")
        return True
    except OSError as e:
        logger.error(f"Failed to start metrics server: {e}")
        return False


def track_time(operation: str):
    """Decorator to track relay call duration."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not _metrics or not _metrics.enabled:
                return func(*args, **kwargs)

            start = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                _metrics.track_relay_latency(operation, time.time() - start)
        return wrapper
    return decorator
