"""Observability utilities for logging and metrics."""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Optional

import structlog
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client.registry import CollectorRegistry

from ..config import get_settings


def configure_logging(level: Optional[str] = None, json_logs: Optional[bool] = None):
    """Configure structured logging for applications embedding the converters.

    Arguments left as None are taken from the REDBOOK_* settings.
    """
    settings = get_settings()
    level = level or settings.log_level
    json_logs = settings.log_json if json_logs is None else json_logs

    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(level.upper())

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# Prometheus metrics
class Metrics:
    """Prometheus metrics collection."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else CollectorRegistry()

        self.documents_processed = Counter(
            'documents_processed_total',
            'Total grant documents converted to records',
            ['bulk_format'],
            registry=self.registry
        )

        self.field_misses = Counter(
            'field_misses_total',
            'Record fields left empty because the source lacked them',
            ['bulk_format', 'field'],
            registry=self.registry
        )

        self.file_fallbacks = Counter(
            'file_fallbacks_total',
            'Bulk files replaced by a single empty record',
            ['bulk_format'],
            registry=self.registry
        )

        self.conversion_duration = Histogram(
            'conversion_duration_seconds',
            'Bulk file conversion duration',
            ['bulk_format'],
            registry=self.registry
        )

    def sample(self, name: str, **labels) -> float:
        """Current value of a sample, 0.0 when it has not been recorded."""
        value = self.registry.get_sample_value(name, labels)
        return value if value is not None else 0.0


# Global metrics instance
metrics = Metrics()


@contextmanager
def track_duration(histogram: Histogram, **labels):
    """Observe the wall time of the enclosed block."""
    start_time = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start_time)


# Prometheus metrics endpoint
def get_metrics(source: Optional[Metrics] = None):
    """Get Prometheus metrics."""
    return generate_latest((source or metrics).registry), CONTENT_TYPE_LATEST
