"""Observability module for VendorIQ.

Usage:
    from vendoriq.observability import observe_operation, observe_risk_score

    with observe_operation("compute_rating") as ctx:
        rating = await engine.compute_rating(vendor_id)

    observe_risk_score(78, level="high", source="assessment")
"""

from vendoriq.observability.metrics import (
    ANOMALY_COUNT,
    ENGINE_OPERATION_COUNT,
    ENGINE_OPERATION_DURATION,
    REPOSITORY_CALL_DURATION,
    REPOSITORY_RETRY_COUNT,
    RISK_LEVEL_COUNT,
    RISK_SCORE_DISTRIBUTION,
    VENDOR_RATING_DISTRIBUTION,
    MetricsConfig,
    MetricsManager,
    get_metrics,
    get_metrics_manager,
    observe_operation,
    observe_risk_score,
    observe_vendor_rating,
    record_anomaly,
    record_repository_call,
    record_repository_retry,
)

__all__ = [
    "ANOMALY_COUNT",
    "ENGINE_OPERATION_COUNT",
    "ENGINE_OPERATION_DURATION",
    "REPOSITORY_CALL_DURATION",
    "REPOSITORY_RETRY_COUNT",
    "RISK_LEVEL_COUNT",
    "RISK_SCORE_DISTRIBUTION",
    "VENDOR_RATING_DISTRIBUTION",
    "MetricsConfig",
    "MetricsManager",
    "get_metrics",
    "get_metrics_manager",
    "observe_operation",
    "observe_risk_score",
    "observe_vendor_rating",
    "record_anomaly",
    "record_repository_call",
    "record_repository_retry",
]
