"""Risk Intelligence Engine.

Consumer-facing entry point that reads history from a HistoryRepository,
runs the scoring components and writes results back. Every repository
call is bounded by a timeout and retried once immediately on a timeout
or transport failure.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, TypeVar

from vendoriq.config.settings import EngineConfig
from vendoriq.core.exceptions import (
    EntityNotFoundError,
    InputValidationError,
    RepositoryUnavailableError,
)
from vendoriq.core.logging import LogContext, get_logger, log_repository_call
from vendoriq.observability.metrics import (
    observe_operation,
    observe_risk_score,
    observe_vendor_rating,
    record_anomaly,
    record_repository_call,
    record_repository_retry,
)
from vendoriq.repository.base import HistoryRepository
from vendoriq.repository.records import (
    AssessmentRecord,
    AssessmentSource,
    AssetProfile,
    EntityType,
    RelationshipProfile,
    RiskAssessmentRecord,
    VendorProfile,
)
from vendoriq.risk.anomaly_detector import AnomalyDetector
from vendoriq.risk.factor_aggregator import FactorAggregator
from vendoriq.risk.forecast import ForecastEngine
from vendoriq.risk.rating_aggregator import RatingAggregator
from vendoriq.risk.trend_analyzer import PredictionHistory, TrendAnalyzer
from vendoriq.risk.types import (
    AnomalyDetection,
    IndustryBenchmark,
    RiskAssessment,
    RiskPrediction,
    RiskTrends,
    TrendWindow,
    VendorRating,
)
from vendoriq.utils.exceptions import RepositoryError

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RiskSubject:
    """What a risk score is computed for: an asset, a vendor, a relationship, or a mix."""

    asset_id: str | None = None
    vendor_id: str | None = None
    relationship_id: str | None = None

    def validate(self) -> None:
        """Raise InputValidationError unless at least one non-blank id is set."""
        ids = {
            "asset_id": self.asset_id,
            "vendor_id": self.vendor_id,
            "relationship_id": self.relationship_id,
        }
        for name, value in ids.items():
            if value is not None and not value.strip():
                raise InputValidationError(f"{name} must not be blank", field=name)
        if all(value is None for value in ids.values()):
            raise InputValidationError(
                "At least one of asset_id, vendor_id or relationship_id is required",
                field="subject",
            )


def _require_id(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise InputValidationError(f"{field} is required", field=field)
    return value


class RiskIntelligenceEngine:
    """Computes, predicts and aggregates vendor risk over a history repository.

    Components are pure; this class owns all repository access. Independent
    reads fan out with asyncio.gather and the single write happens after
    the computation completes.

    Example:
        ```python
        engine = RiskIntelligenceEngine(repository)
        assessment = await engine.compute_risk_score(RiskSubject(asset_id="a-1"))
        rating = await engine.compute_rating("v-1")
        ```
    """

    def __init__(
        self,
        repository: HistoryRepository,
        config: EngineConfig | None = None,
        factor_aggregator: FactorAggregator | None = None,
        trend_analyzer: TrendAnalyzer | None = None,
        anomaly_detector: AnomalyDetector | None = None,
        forecast_engine: ForecastEngine | None = None,
        rating_aggregator: RatingAggregator | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the engine.

        Args:
            repository: History repository to read from and write to.
            config: Repository access configuration.
            factor_aggregator: Factor aggregator (default configuration if None).
            trend_analyzer: Trend analyzer (default configuration if None).
            anomaly_detector: Anomaly detector (default configuration if None).
            forecast_engine: Forecast engine (default configuration if None).
            rating_aggregator: Rating aggregator (default configuration if None).
            clock: Source of the current time (default: UTC wall clock).
        """
        self.repository = repository
        self.config = config or EngineConfig()
        self.factor_aggregator = factor_aggregator or FactorAggregator()
        self.trend_analyzer = trend_analyzer or TrendAnalyzer()
        self.anomaly_detector = anomaly_detector or AnomalyDetector()
        self.forecast_engine = forecast_engine or ForecastEngine()
        self.rating_aggregator = rating_aggregator or RatingAggregator()
        self._clock = clock or (lambda: datetime.now(UTC))

    # =========================================================================
    # Operations
    # =========================================================================

    async def compute_risk_score(
        self,
        subject: RiskSubject,
        assessed_by: str = "system",
    ) -> RiskAssessment:
        """Score an asset, vendor, relationship or combination and store the result.

        Args:
            subject: Identifiers of the subject profiles to score.
            assessed_by: Recorded assessor.

        Returns:
            Draft RiskAssessment.

        Raises:
            InputValidationError: If no subject id is given.
            EntityNotFoundError: If a named profile does not exist.
            RepositoryUnavailableError: If a profile read or the write fails.
        """
        subject.validate()

        with LogContext(operation="compute_risk_score"), observe_operation("compute_risk_score"):
            lookups: list[tuple[EntityType, str]] = [
                (entity_type, entity_id)
                for entity_type, entity_id in (
                    (EntityType.ASSET, subject.asset_id),
                    (EntityType.VENDOR, subject.vendor_id),
                    (EntityType.RELATIONSHIP, subject.relationship_id),
                )
                if entity_id is not None
            ]
            profiles = await asyncio.gather(
                *(self._get_profile(entity_type, entity_id) for entity_type, entity_id in lookups)
            )
            found = {entity_type: profile for (entity_type, _), profile in zip(lookups, profiles)}

            asset = found.get(EntityType.ASSET)
            vendor = found.get(EntityType.VENDOR)
            relationship = found.get(EntityType.RELATIONSHIP)
            assessment = self.factor_aggregator.assess(
                asset=asset if isinstance(asset, AssetProfile) else None,
                vendor=vendor if isinstance(vendor, VendorProfile) else None,
                relationship=relationship if isinstance(relationship, RelationshipProfile) else None,
                assessed_by=assessed_by,
                now=self._clock(),
            )

            await self._call(
                "put_risk_assessment",
                lambda: self.repository.put_risk_assessment(assessment),
            )
            observe_risk_score(
                assessment.calculated_score, assessment.risk_level.value, "assessment"
            )

        return assessment

    async def predict_risk(
        self,
        vendor_id: str,
        asset_id: str | None = None,
        relationship_id: str | None = None,
    ) -> RiskPrediction:
        """Predict a vendor's risk from its stored score and recent history.

        Args:
            vendor_id: Vendor to predict for.
            asset_id: Asset the prediction is made in the context of, if any.
            relationship_id: Relationship the prediction is made in the context of, if any.

        Returns:
            Stored RiskPrediction.

        Raises:
            InputValidationError: If vendor_id is blank.
            EntityNotFoundError: If the vendor does not exist.
            RepositoryUnavailableError: If the profile read or the write fails.
        """
        vendor_id = _require_id(vendor_id, "vendor_id")

        with LogContext(operation="predict_risk", vendor_id=vendor_id), observe_operation(
            "predict_risk"
        ):
            now = self._clock()
            vendor, assessments, risk_assessments = await asyncio.gather(
                self._get_vendor(vendor_id),
                self._assessment_history(
                    vendor_id, self.config.assessment_history_limit, AssessmentSource.VENDOR
                ),
                self._risk_history(vendor_id, self.config.risk_history_limit),
            )
            self._note_insufficient_history(vendor_id, assessments, risk_assessments)

            history = PredictionHistory(
                vendor=vendor,
                assessments=assessments,
                risk_assessments=risk_assessments,
            )
            prediction = self.trend_analyzer.heuristic_prediction(history, now=now)

            await self._call(
                "put_prediction",
                lambda: self.repository.put_prediction(
                    prediction, vendor_id, asset_id, relationship_id
                ),
            )
            observe_risk_score(prediction.risk_score, prediction.risk_level.value, "prediction")

        return prediction

    async def detect_anomalies(self, vendor_id: str) -> list[AnomalyDetection]:
        """Run behavioral anomaly checks over a vendor's history.

        Args:
            vendor_id: Vendor to check.

        Returns:
            Detected anomalies, stored when non-empty.

        Raises:
            InputValidationError: If vendor_id is blank.
            EntityNotFoundError: If the vendor does not exist.
            RepositoryUnavailableError: If the profile read or the write fails.
        """
        vendor_id = _require_id(vendor_id, "vendor_id")

        with LogContext(operation="detect_anomalies", vendor_id=vendor_id), observe_operation(
            "detect_anomalies"
        ):
            now = self._clock()
            vendor, assessments, risk_assessments = await asyncio.gather(
                self._get_vendor(vendor_id),
                self._assessment_history(
                    vendor_id, self.config.assessment_history_limit, AssessmentSource.VENDOR
                ),
                self._risk_history(vendor_id, self.config.risk_history_limit),
            )
            self._note_insufficient_history(vendor_id, assessments, risk_assessments)

            metrics = self.anomaly_detector.metrics_from_history(
                vendor, assessments, risk_assessments
            )
            anomalies = self.anomaly_detector.detect(vendor_id, metrics, now=now)

            if anomalies:
                await self._call(
                    "put_anomalies",
                    lambda: self.repository.put_anomalies(vendor_id, anomalies),
                )
            for anomaly in anomalies:
                record_anomaly(anomaly.anomaly_type.value, anomaly.severity.value)

        return anomalies

    async def compute_rating(self, vendor_id: str) -> VendorRating:
        """Compute and store a vendor's overall rating.

        Args:
            vendor_id: Vendor to rate.

        Returns:
            Stored VendorRating.

        Raises:
            InputValidationError: If vendor_id is blank.
            EntityNotFoundError: If the vendor does not exist.
            RepositoryUnavailableError: If the profile read or the write fails.
        """
        vendor_id = _require_id(vendor_id, "vendor_id")

        with LogContext(operation="compute_rating", vendor_id=vendor_id), observe_operation(
            "compute_rating"
        ):
            rating = await self._rate(vendor_id)
            await self._call("upsert_rating", lambda: self.repository.upsert_rating(rating))
            observe_vendor_rating(rating.overall_rating)

        return rating

    async def get_rating_breakdown(self, vendor_id: str) -> VendorRating:
        """Return the stored rating, or compute one without storing it.

        Raises:
            InputValidationError: If vendor_id is blank.
            EntityNotFoundError: If there is no stored rating and no such vendor.
        """
        vendor_id = _require_id(vendor_id, "vendor_id")

        with LogContext(operation="get_rating_breakdown", vendor_id=vendor_id), observe_operation(
            "get_rating_breakdown"
        ):
            stored = await self._call("get_rating", lambda: self.repository.get_rating(vendor_id))
            if stored is not None:
                return stored
            return await self._rate(vendor_id)

    async def get_trends(
        self,
        organization_id: str,
        window: TrendWindow | str = TrendWindow.DAYS_90,
    ) -> RiskTrends:
        """Daily risk trend and 30-day forecast for an organization.

        Args:
            organization_id: Organization to report on.
            window: 30d, 90d or 1y.

        Returns:
            RiskTrends for the window ending today.

        Raises:
            InputValidationError: If the window or organization id is invalid.
        """
        organization_id = _require_id(organization_id, "organization_id")
        window = TrendWindow.parse(window)

        with LogContext(operation="get_trends", organization_id=organization_id), observe_operation(
            "get_trends"
        ):
            now = self._clock()
            records = await self._call(
                "get_organization_risk_history",
                lambda: self.repository.get_organization_risk_history(organization_id, now),
                degrade_to=[],
            )
            if not records:
                logger.info(
                    "insufficient_history",
                    organization_id=organization_id,
                    risk_assessments=0,
                )
            return self.forecast_engine.trends(organization_id, window, records, now=now)

    async def get_industry_benchmark(self, industry: str) -> IndustryBenchmark:
        """Rating distribution of approved vendors in an industry.

        Raises:
            InputValidationError: If industry is blank.
            RepositoryUnavailableError: If the ratings cannot be read.
        """
        industry = _require_id(industry, "industry")

        with LogContext(operation="get_industry_benchmark", industry=industry), observe_operation(
            "get_industry_benchmark"
        ):
            ratings = await self._call(
                "get_industry_ratings",
                lambda: self.repository.get_industry_ratings(industry),
            )
            return self.rating_aggregator.benchmark(industry, ratings)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _rate(self, vendor_id: str) -> VendorRating:
        vendor, assessments = await asyncio.gather(
            self._get_vendor(vendor_id),
            self._assessment_history(vendor_id, self.config.rating_history_limit),
        )
        if not assessments:
            logger.info("insufficient_history", vendor_id=vendor_id, assessments=0)
        return self.rating_aggregator.rate(vendor, assessments, now=self._clock())

    async def _get_profile(self, entity_type: EntityType, entity_id: str) -> Any:
        profile = await self._call(
            "get_entity_profile",
            lambda: self.repository.get_entity_profile(entity_type, entity_id),
        )
        if profile is None:
            raise EntityNotFoundError(entity_type.value, entity_id)
        return profile

    async def _get_vendor(self, vendor_id: str) -> VendorProfile:
        return await self._get_profile(EntityType.VENDOR, vendor_id)

    async def _assessment_history(
        self,
        subject_id: str,
        limit: int | None,
        source: AssessmentSource | None = None,
    ) -> list[AssessmentRecord]:
        return await self._call(
            "get_assessment_history",
            lambda: self.repository.get_assessment_history(subject_id, limit, source),
            degrade_to=[],
        )

    async def _risk_history(self, subject_id: str, limit: int) -> list[RiskAssessmentRecord]:
        return await self._call(
            "get_risk_assessment_history",
            lambda: self.repository.get_risk_assessment_history(subject_id, limit),
            degrade_to=[],
        )

    def _note_insufficient_history(
        self,
        vendor_id: str,
        assessments: list[AssessmentRecord],
        risk_assessments: list[RiskAssessmentRecord],
    ) -> None:
        if len(assessments) < 2 or len(risk_assessments) < 2:
            logger.info(
                "insufficient_history",
                vendor_id=vendor_id,
                assessments=len(assessments),
                risk_assessments=len(risk_assessments),
            )

    async def _call(
        self,
        method: str,
        call: Callable[[], Awaitable[T]],
        degrade_to: T | None = None,
    ) -> T:
        """Run one repository call with a timeout and immediate retries.

        Args:
            method: Repository method name, for logs and metrics.
            call: Factory producing a fresh awaitable per attempt.
            degrade_to: Value returned when every attempt timed out. None
                means a timeout is raised like any other failure.

        Raises:
            RepositoryUnavailableError: When all attempts fail.
        """
        attempts = self.config.repository_retries + 1
        timeout = self.config.repository_timeout_seconds
        last_error = ""
        timed_out = False

        for attempt in range(attempts):
            start = time.perf_counter()
            try:
                result = await asyncio.wait_for(call(), timeout=timeout)
            except asyncio.TimeoutError:
                timed_out = True
                last_error = f"Timeout after {timeout}s"
                status = "timeout"
            except RepositoryError as e:
                timed_out = False
                last_error = str(e)
                status = "error"
            else:
                duration = time.perf_counter() - start
                record_repository_call(method, "success", duration)
                log_repository_call(logger, method, duration * 1000, success=True)
                return result

            duration = time.perf_counter() - start
            record_repository_call(method, status, duration)
            log_repository_call(
                logger, method, duration * 1000, success=False, attempt=attempt + 1, error=last_error
            )
            if attempt < attempts - 1:
                record_repository_retry(method, status)

        if timed_out and degrade_to is not None:
            logger.warning(
                "Repository read degraded to empty history",
                method=method,
                attempts=attempts,
                error=last_error,
            )
            return degrade_to

        raise RepositoryUnavailableError(method, last_error)


def create_risk_engine(
    repository: HistoryRepository,
    config: EngineConfig | None = None,
) -> RiskIntelligenceEngine:
    """Create a risk intelligence engine.

    Args:
        repository: History repository implementation.
        config: Optional repository access configuration.

    Returns:
        Configured RiskIntelligenceEngine.
    """
    return RiskIntelligenceEngine(repository, config=config)
