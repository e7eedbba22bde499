"""Prometheus metrics for the risk intelligence engine.

Three groups of series, all prefixed ``vendoriq_``:

- engine operations: latency and outcome per public engine method, the
  outcome being ``success`` or the exception class name
- history repository: per-attempt latency and retries per method
- risk output: score and rating distributions, risk levels and anomalies
"""

from __future__ import annotations

import os
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    generate_latest,
)

__all__ = [
    "MetricsConfig",
    "MetricsManager",
    "ENGINE_OPERATION_DURATION",
    "ENGINE_OPERATION_COUNT",
    "REPOSITORY_CALL_DURATION",
    "REPOSITORY_RETRY_COUNT",
    "RISK_SCORE_DISTRIBUTION",
    "RISK_LEVEL_COUNT",
    "VENDOR_RATING_DISTRIBUTION",
    "ANOMALY_COUNT",
    "observe_operation",
    "observe_risk_score",
    "observe_vendor_rating",
    "record_repository_call",
    "record_repository_retry",
    "record_anomaly",
    "get_metrics",
    "get_metrics_manager",
]

# Repository calls are bounded by EngineConfig.repository_timeout_seconds (<= 120s)
LATENCY_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)

# Score buckets follow the risk bands (low < 40 <= medium < 60 <= high < 80 <= critical)
SCORE_BUCKETS = (10, 20, 30, 40, 50, 60, 70, 80, 90, 100)


@dataclass
class MetricsConfig:
    """Export settings.

    Attributes:
        enabled: Publish service info on startup.
        prefix: Metric name prefix reported in service info.
        histogram_buckets: Latency buckets in seconds.
    """

    enabled: bool = True
    prefix: str = "vendoriq"
    histogram_buckets: tuple[float, ...] = LATENCY_BUCKETS

    @classmethod
    def from_env(cls) -> MetricsConfig:
        """Read METRICS_ENABLED and METRICS_PREFIX."""
        return cls(
            enabled=os.getenv("METRICS_ENABLED", "true").lower() == "true",
            prefix=os.getenv("METRICS_PREFIX", "vendoriq"),
        )


_PREFIX = MetricsConfig.prefix

# ============================================================================
# Engine Operations
# ============================================================================

ENGINE_OPERATION_DURATION = Histogram(
    f"{_PREFIX}_engine_operation_duration_seconds",
    "Latency of risk engine operations",
    ["operation", "status"],
    buckets=LATENCY_BUCKETS,
)

ENGINE_OPERATION_COUNT = Counter(
    f"{_PREFIX}_engine_operations_total",
    "Risk engine operations by outcome",
    ["operation", "status"],
)

# ============================================================================
# History Repository
# ============================================================================

REPOSITORY_CALL_DURATION = Histogram(
    f"{_PREFIX}_repository_call_duration_seconds",
    "Latency of individual history repository attempts",
    ["method", "status"],
    buckets=LATENCY_BUCKETS,
)

REPOSITORY_RETRY_COUNT = Counter(
    f"{_PREFIX}_repository_retries_total",
    "Repository attempts retried after a timeout or transport failure",
    ["method", "reason"],
)

# ============================================================================
# Risk Output
# ============================================================================

RISK_SCORE_DISTRIBUTION = Histogram(
    f"{_PREFIX}_risk_score",
    "Computed risk scores",
    ["source"],
    buckets=SCORE_BUCKETS,
)

RISK_LEVEL_COUNT = Counter(
    f"{_PREFIX}_risk_levels_total",
    "Computed risk scores by risk level",
    ["source", "level"],
)

VENDOR_RATING_DISTRIBUTION = Histogram(
    f"{_PREFIX}_vendor_rating",
    "Computed overall vendor ratings",
    buckets=SCORE_BUCKETS,
)

ANOMALY_COUNT = Counter(
    f"{_PREFIX}_anomalies_detected_total",
    "Behavioral anomalies detected",
    ["anomaly_type", "severity"],
)

SERVICE_INFO = Info(f"{_PREFIX}_service", "Service build and environment")


class MetricsManager:
    """Publishes service info and renders the exposition for ``/metrics``."""

    def __init__(
        self,
        config: MetricsConfig | None = None,
        registry: CollectorRegistry | None = None,
    ) -> None:
        self.config = config or MetricsConfig()
        self.registry = registry or REGISTRY
        self._initialized = False

    def initialize(
        self,
        service_name: str = "vendoriq",
        service_version: str = "0.1.0",
        environment: str = "development",
    ) -> None:
        """Publish service info once; a no-op when disabled."""
        if self._initialized or not self.config.enabled:
            return
        SERVICE_INFO.info(
            {
                "name": service_name,
                "version": service_version,
                "environment": environment,
                "prefix": self.config.prefix,
            }
        )
        self._initialized = True

    def get_metrics(self) -> bytes:
        """Prometheus text exposition of the registry."""
        return generate_latest(self.registry)


_metrics_manager: MetricsManager | None = None


def get_metrics_manager() -> MetricsManager:
    """Process-wide manager configured from the environment."""
    global _metrics_manager
    if _metrics_manager is None:
        _metrics_manager = MetricsManager(MetricsConfig.from_env())
    return _metrics_manager


def get_metrics() -> bytes:
    return get_metrics_manager().get_metrics()


# ============================================================================
# Recording
# ============================================================================


@contextmanager
def observe_operation(operation: str) -> Iterator[None]:
    """Time an engine operation and count its outcome.

    The outcome label is ``success`` or the class name of the exception
    that escaped the block, which is re-raised.
    """
    status = "success"
    start = time.perf_counter()
    try:
        yield
    except Exception as exc:
        status = type(exc).__name__
        raise
    finally:
        ENGINE_OPERATION_DURATION.labels(operation=operation, status=status).observe(
            time.perf_counter() - start
        )
        ENGINE_OPERATION_COUNT.labels(operation=operation, status=status).inc()


def record_repository_call(method: str, status: str, duration_seconds: float) -> None:
    """Record one repository attempt; status is success, timeout or error."""
    REPOSITORY_CALL_DURATION.labels(method=method, status=status).observe(duration_seconds)


def record_repository_retry(method: str, reason: str) -> None:
    REPOSITORY_RETRY_COUNT.labels(method=method, reason=reason).inc()


def observe_risk_score(score: float, level: str, source: str) -> None:
    """Record a score produced by an assessment or a prediction."""
    RISK_SCORE_DISTRIBUTION.labels(source=source).observe(score)
    RISK_LEVEL_COUNT.labels(source=source, level=level).inc()


def observe_vendor_rating(rating: float) -> None:
    VENDOR_RATING_DISTRIBUTION.observe(rating)


def record_anomaly(anomaly_type: str, severity: str) -> None:
    ANOMALY_COUNT.labels(anomaly_type=anomaly_type, severity=severity).inc()
