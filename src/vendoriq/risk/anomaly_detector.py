"""Anomaly Detector for vendor behavioral deviations.

This module provides the AnomalyDetector that:
1. Flags unusually slow assessment responses
2. Flags inconsistent assessment answers
3. Flags sudden risk score spikes
4. Flags compliance gaps
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from vendoriq.core.logging import get_logger
from vendoriq.repository.records import AssessmentRecord, RiskAssessmentRecord, VendorProfile
from vendoriq.risk.scoring import mean, population_variance
from vendoriq.risk.types import AnomalyDetection, AnomalyType, Severity

logger = get_logger(__name__)


# =============================================================================
# Constants
# =============================================================================


# Compliance fraction by status when no compliance score is stored
COMPLIANCE_STATUS_FRACTION: dict[str, float] = {
    "compliant": 1.0,
    "partial": 0.6,
}
DEFAULT_COMPLIANCE_FRACTION = 0.2

ANOMALY_RECOMMENDATIONS: dict[AnomalyType, tuple[str, ...]] = {
    AnomalyType.UNUSUAL_RESPONSE: (
        "Investigate vendor responsiveness",
        "Consider alternative communication channels",
    ),
    AnomalyType.PATTERN_DEVIATION: (
        "Review vendor assessment process",
        "Provide additional guidance",
    ),
    AnomalyType.RISK_SPIKE: (
        "Immediate risk assessment required",
        "Escalate to security team",
    ),
    AnomalyType.COMPLIANCE_GAP: (
        "Review compliance requirements",
        "Implement corrective actions",
    ),
}


# =============================================================================
# Models
# =============================================================================


@dataclass
class BehaviorMetrics:
    """Aggregates of a vendor's history that the anomaly checks consume.

    A metric left as None means the history could not support it and
    the corresponding check is skipped.
    """

    current_response_days: float | None = None
    historical_response_days: float | None = None
    consistency: float | None = None
    current_risk_score: float | None = None
    previous_risk_score: float | None = None
    compliance_fraction: float | None = None

    @classmethod
    def from_history(
        cls,
        vendor: VendorProfile | None,
        assessments: Sequence[AssessmentRecord],
        risk_assessments: Sequence[RiskAssessmentRecord],
        response_window: int = 1,
        min_consistency_samples: int = 3,
    ) -> "BehaviorMetrics":
        """Derive metrics from newest-first history.

        Args:
            vendor: Vendor profile, if known.
            assessments: Assessment history, newest first.
            risk_assessments: Risk score history, newest first.
            response_window: Newest completed assessments averaged as "current".
            min_consistency_samples: Scores needed to measure consistency.

        Returns:
            BehaviorMetrics with None for anything the history cannot support.
        """
        response_days = [
            days
            for a in assessments
            if a.is_completed and (days := a.response_days) is not None
        ]
        current = response_days[:response_window]
        historical = response_days[response_window:]

        scores = [a.score for a in assessments if a.score is not None]
        consistency = None
        if len(scores) >= min_consistency_samples:
            consistency = max(0.0, 1 - population_variance(scores) / 100)

        compliance_fraction = None
        if vendor is not None:
            if vendor.compliance_score is not None:
                compliance_fraction = vendor.compliance_score / 100
            else:
                compliance_fraction = COMPLIANCE_STATUS_FRACTION.get(
                    vendor.compliance_status or "", DEFAULT_COMPLIANCE_FRACTION
                )

        return cls(
            current_response_days=mean(current) if current and historical else None,
            historical_response_days=mean(historical) if current and historical else None,
            consistency=consistency,
            current_risk_score=risk_assessments[0].score if len(risk_assessments) >= 2 else None,
            previous_risk_score=risk_assessments[1].score if len(risk_assessments) >= 2 else None,
            compliance_fraction=compliance_fraction,
        )


class DetectorConfig(BaseModel):
    """Configuration for the anomaly detector."""

    # Thresholds
    response_time_multiplier: float = Field(
        default=2.0, gt=1.0, le=10.0, description="Current/historical response ratio to flag"
    )
    consistency_threshold: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Consistency below which to flag"
    )
    risk_spike_threshold: float = Field(
        default=20.0, ge=0.0, le=100.0, description="Risk score increase above which to flag"
    )
    compliance_threshold: float = Field(
        default=0.7, ge=0.0, le=1.0, description="Compliance fraction below which to flag"
    )

    # History
    response_window: int = Field(
        default=1, ge=1, le=20, description="Newest completed assessments treated as current"
    )
    min_consistency_samples: int = Field(
        default=3, ge=2, description="Scores needed to measure consistency"
    )


# =============================================================================
# Anomaly Detector
# =============================================================================


class AnomalyDetector:
    """Detects behavioral anomalies in a vendor's assessment history.

    Runs four independent checks over BehaviorMetrics. A check whose
    inputs are missing is skipped rather than failing.

    Example:
        ```python
        detector = AnomalyDetector()
        metrics = BehaviorMetrics.from_history(vendor, assessments, risk_history)
        anomalies = detector.detect("v-123", metrics)
        ```
    """

    def __init__(self, config: DetectorConfig | None = None):
        """Initialize the anomaly detector.

        Args:
            config: Detector configuration.
        """
        self.config = config or DetectorConfig()

    def metrics_from_history(
        self,
        vendor: VendorProfile | None,
        assessments: Sequence[AssessmentRecord],
        risk_assessments: Sequence[RiskAssessmentRecord],
    ) -> BehaviorMetrics:
        """Build BehaviorMetrics using this detector's history settings."""
        return BehaviorMetrics.from_history(
            vendor,
            assessments,
            risk_assessments,
            response_window=self.config.response_window,
            min_consistency_samples=self.config.min_consistency_samples,
        )

    def detect(
        self,
        vendor_id: str,
        metrics: BehaviorMetrics,
        now: datetime | None = None,
    ) -> list[AnomalyDetection]:
        """Run all anomaly checks.

        Args:
            vendor_id: Vendor the metrics describe.
            metrics: Aggregated behavior metrics.
            now: Detection time (default: current UTC time).

        Returns:
            Detected anomalies, possibly empty.
        """
        now = now or datetime.now(UTC)
        checks = (
            self._check_response_time,
            self._check_consistency,
            self._check_risk_spike,
            self._check_compliance,
        )
        anomalies = [
            anomaly for check in checks if (anomaly := check(vendor_id, metrics, now)) is not None
        ]

        logger.info(
            "Anomalies detected",
            vendor_id=vendor_id,
            total=len(anomalies),
            anomaly_types=[a.anomaly_type.value for a in anomalies],
        )

        return anomalies

    def _check_response_time(
        self, vendor_id: str, metrics: BehaviorMetrics, now: datetime
    ) -> AnomalyDetection | None:
        current = metrics.current_response_days
        historical = metrics.historical_response_days
        if current is None or historical is None:
            return None
        if current <= historical * self.config.response_time_multiplier:
            return None
        return self._anomaly(
            AnomalyType.UNUSUAL_RESPONSE,
            Severity.MEDIUM,
            f"Response time significantly increased: {current:.1f} days "
            f"vs average {historical:.1f} days",
            0.85,
            vendor_id,
            now,
        )

    def _check_consistency(
        self, vendor_id: str, metrics: BehaviorMetrics, now: datetime
    ) -> AnomalyDetection | None:
        if metrics.consistency is None or metrics.consistency >= self.config.consistency_threshold:
            return None
        return self._anomaly(
            AnomalyType.PATTERN_DEVIATION,
            Severity.HIGH,
            f"Low response consistency detected: {metrics.consistency * 100:.1f}%",
            0.92,
            vendor_id,
            now,
        )

    def _check_risk_spike(
        self, vendor_id: str, metrics: BehaviorMetrics, now: datetime
    ) -> AnomalyDetection | None:
        current = metrics.current_risk_score
        previous = metrics.previous_risk_score
        if current is None or previous is None:
            return None
        increase = current - previous
        if increase <= self.config.risk_spike_threshold:
            return None
        return self._anomaly(
            AnomalyType.RISK_SPIKE,
            Severity.CRITICAL,
            f"Significant risk increase detected: +{increase:g} points "
            f"({previous:g} → {current:g})",
            0.95,
            vendor_id,
            now,
        )

    def _check_compliance(
        self, vendor_id: str, metrics: BehaviorMetrics, now: datetime
    ) -> AnomalyDetection | None:
        fraction = metrics.compliance_fraction
        if fraction is None or fraction >= self.config.compliance_threshold:
            return None
        return self._anomaly(
            AnomalyType.COMPLIANCE_GAP,
            Severity.HIGH,
            f"Compliance gap detected: {fraction * 100:.1f}% compliance score",
            0.88,
            vendor_id,
            now,
        )

    def _anomaly(
        self,
        anomaly_type: AnomalyType,
        severity: Severity,
        description: str,
        confidence: float,
        vendor_id: str,
        now: datetime,
    ) -> AnomalyDetection:
        return AnomalyDetection(
            anomaly_type=anomaly_type,
            severity=severity,
            description=description,
            confidence=confidence,
            affected_entities=(vendor_id,),
            recommendations=ANOMALY_RECOMMENDATIONS[anomaly_type],
            detected_at=now,
        )


def create_anomaly_detector(config: DetectorConfig | None = None) -> AnomalyDetector:
    """Create an anomaly detector.

    Args:
        config: Optional detector configuration.

    Returns:
        Configured AnomalyDetector.
    """
    return AnomalyDetector(config=config)
