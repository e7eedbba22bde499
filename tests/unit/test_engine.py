"""Unit tests for the RiskIntelligenceEngine over the in-memory repository."""

import asyncio
from collections import defaultdict
from datetime import datetime, timedelta

import pytest

from factories import make_assessment, make_risk_record
from vendoriq.config.settings import EngineConfig
from vendoriq.core.exceptions import (
    EntityNotFoundError,
    InputValidationError,
    RepositoryUnavailableError,
)
from vendoriq.repository import AssessmentSource, InMemoryHistoryRepository, VendorProfile
from vendoriq.risk.engine import RiskIntelligenceEngine, RiskSubject, create_risk_engine
from vendoriq.risk.types import (
    AnomalyType,
    AssessmentType,
    OverallTrend,
    RiskLevel,
    TrendWindow,
)
from vendoriq.utils.exceptions import RepositoryError


class UnreliableRepository(InMemoryHistoryRepository):
    """In-memory repository that fails or stalls chosen methods.

    Args:
        failures: Method name -> number of calls that raise RepositoryError.
        slow: Method names that sleep for ``delay`` seconds on every call.
        delay: Stall duration in seconds.
    """

    def __init__(
        self,
        failures: dict[str, int] | None = None,
        slow: tuple[str, ...] = (),
        delay: float = 1.0,
    ) -> None:
        super().__init__()
        self.failures = dict(failures or {})
        self.slow = set(slow)
        self.delay = delay
        self.calls: dict[str, int] = defaultdict(int)

    async def _disrupt(self, method: str) -> None:
        self.calls[method] += 1
        if self.failures.get(method, 0) > 0:
            self.failures[method] -= 1
            raise RepositoryError(f"{method}: connection reset")
        if method in self.slow:
            await asyncio.sleep(self.delay)

    async def get_entity_profile(self, entity_type, entity_id):
        await self._disrupt("get_entity_profile")
        return await super().get_entity_profile(entity_type, entity_id)

    async def get_assessment_history(self, subject_id, limit, source=None):
        await self._disrupt("get_assessment_history")
        return await super().get_assessment_history(subject_id, limit, source)

    async def get_risk_assessment_history(self, subject_id, limit):
        await self._disrupt("get_risk_assessment_history")
        return await super().get_risk_assessment_history(subject_id, limit)

    async def get_organization_risk_history(self, organization_id, until):
        await self._disrupt("get_organization_risk_history")
        return await super().get_organization_risk_history(organization_id, until)

    async def put_risk_assessment(self, assessment):
        await self._disrupt("put_risk_assessment")
        await super().put_risk_assessment(assessment)


def unreliable_engine(repository: UnreliableRepository, now: datetime) -> RiskIntelligenceEngine:
    """Engine with a short timeout over an unreliable repository."""
    return RiskIntelligenceEngine(
        repository,
        config=EngineConfig(repository_timeout_seconds=0.05),
        clock=lambda: now,
    )


@pytest.fixture
def unreliable_repository(sample_asset, sample_vendor, sample_relationship):
    """Factory for unreliable repositories seeded with the sample profiles."""

    def _make(**kwargs) -> UnreliableRepository:
        repo = UnreliableRepository(**kwargs)
        repo.add_asset(sample_asset)
        repo.add_vendor(sample_vendor)
        repo.add_relationship(sample_relationship)
        return repo

    return _make


# =============================================================================
# compute_risk_score
# =============================================================================


class TestComputeRiskScore:
    """Tests for RiskIntelligenceEngine.compute_risk_score."""

    @pytest.mark.asyncio
    async def test_asset_score_stored(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository, now
    ):
        assessment = await engine.compute_risk_score(RiskSubject(asset_id="asset-1"))

        assert assessment.calculated_score == 78
        assert assessment.risk_level == RiskLevel.HIGH
        assert assessment.assessed_at == now
        assert repository.assessments == [assessment]

        history = await repository.get_risk_assessment_history("asset-1", 10)
        assert [r.score for r in history] == [78]

    @pytest.mark.asyncio
    async def test_combined_subject(self, engine: RiskIntelligenceEngine):
        assessment = await engine.compute_risk_score(
            RiskSubject(asset_id="asset-1", vendor_id="vendor-1", relationship_id="rel-1"),
            assessed_by="analyst",
        )

        assert assessment.assessment_type == AssessmentType.COMBINED_RISK
        assert len(assessment.factors) == 11
        assert assessment.calculated_score == 100
        assert assessment.assessed_by == "analyst"

    @pytest.mark.asyncio
    async def test_missing_profile_stores_nothing(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        with pytest.raises(EntityNotFoundError) as exc_info:
            await engine.compute_risk_score(RiskSubject(asset_id="asset-1", vendor_id="missing"))

        assert exc_info.value.entity_type == "vendor"
        assert exc_info.value.entity_id == "missing"
        assert repository.assessments == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "subject",
        [RiskSubject(), RiskSubject(asset_id="  "), RiskSubject(vendor_id="")],
    )
    async def test_invalid_subject_rejected(self, engine: RiskIntelligenceEngine, subject):
        with pytest.raises(InputValidationError):
            await engine.compute_risk_score(subject)

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, unreliable_repository, now):
        repo = unreliable_repository(failures={"put_risk_assessment": 2})
        engine = unreliable_engine(repo, now)

        with pytest.raises(RepositoryUnavailableError) as exc_info:
            await engine.compute_risk_score(RiskSubject(asset_id="asset-1"))

        assert exc_info.value.operation == "put_risk_assessment"
        assert repo.assessments == []


# =============================================================================
# predict_risk
# =============================================================================


class TestPredictRisk:
    """Tests for RiskIntelligenceEngine.predict_risk."""

    @pytest.mark.asyncio
    async def test_prediction_without_history(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        """Test 55 + 5 (Financial) + 5 (no assessments yet) = 65."""
        prediction = await engine.predict_risk("vendor-1")

        assert prediction.risk_score == 65
        assert prediction.risk_level == RiskLevel.HIGH
        assert prediction.confidence == 0.5
        assert repository.predictions == [(prediction, "vendor-1", None, None)]

    @pytest.mark.asyncio
    async def test_prediction_context_stored(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        prediction = await engine.predict_risk("vendor-1", asset_id="asset-1")
        assert repository.predictions == [(prediction, "vendor-1", "asset-1", None)]

    @pytest.mark.asyncio
    async def test_prediction_uses_history(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository, now
    ):
        for days in (10, 20, 30, 40, 50):
            repository.add_assessment("vendor-1", make_assessment(days, score=80))
        for days, score in ((5, 60), (15, 60), (25, 60)):
            repository.add_risk_assessment(make_risk_record("vendor-1", score, days))

        prediction = await engine.predict_risk("vendor-1")

        assert prediction.confidence == 1.0
        assert prediction.risk_score == 65
        assert prediction.next_assessment_due == now + timedelta(days=90)

    @pytest.mark.asyncio
    async def test_proactive_assessments_not_counted(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        """Test only questionnaires sent to the vendor feed the prediction."""
        for days in (10, 20, 30):
            repository.add_assessment(
                "vendor-1", make_assessment(days, score=20, source=AssessmentSource.PROACTIVE)
            )

        prediction = await engine.predict_risk("vendor-1")

        assert prediction.risk_score == 65
        assert prediction.confidence == 0.5

    @pytest.mark.asyncio
    async def test_unknown_vendor(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        with pytest.raises(EntityNotFoundError):
            await engine.predict_risk("missing")
        assert repository.predictions == []

    @pytest.mark.asyncio
    async def test_blank_vendor_rejected(self, engine: RiskIntelligenceEngine):
        with pytest.raises(InputValidationError) as exc_info:
            await engine.predict_risk(" ")
        assert exc_info.value.field == "vendor_id"


# =============================================================================
# detect_anomalies
# =============================================================================


class TestDetectAnomalies:
    """Tests for RiskIntelligenceEngine.detect_anomalies."""

    @pytest.mark.asyncio
    async def test_partial_compliance_gap(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        anomalies = await engine.detect_anomalies("vendor-1")

        assert [a.anomaly_type for a in anomalies] == [AnomalyType.COMPLIANCE_GAP]
        assert repository.anomalies["vendor-1"] == anomalies

    @pytest.mark.asyncio
    async def test_risk_spike_from_history(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository, now
    ):
        repository.add_risk_assessment(make_risk_record("vendor-1", 75, 1))
        repository.add_risk_assessment(make_risk_record("vendor-1", 50, 10))

        anomalies = await engine.detect_anomalies("vendor-1")

        assert [a.anomaly_type for a in anomalies] == [
            AnomalyType.RISK_SPIKE,
            AnomalyType.COMPLIANCE_GAP,
        ]
        assert all(a.detected_at == now for a in anomalies)
        assert len(repository.anomalies["vendor-1"]) == 2

    @pytest.mark.asyncio
    async def test_combined_assessment_counts_toward_vendor_spike(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        repository.add_risk_assessment(make_risk_record("vendor-1", 40, 5))

        combined = await engine.compute_risk_score(
            RiskSubject(vendor_id="vendor-1", relationship_id="rel-1")
        )
        anomalies = await engine.detect_anomalies("vendor-1")

        assert combined.calculated_score == 100
        history = await repository.get_risk_assessment_history("vendor-1", 10)
        assert [r.score for r in history] == [100, 40]
        assert [a.anomaly_type for a in anomalies] == [
            AnomalyType.RISK_SPIKE,
            AnomalyType.COMPLIANCE_GAP,
        ]

    @pytest.mark.asyncio
    async def test_proactive_assessments_skip_consistency(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        for days, score in ((10, 0), (20, 100), (30, 0)):
            repository.add_assessment(
                "vendor-1",
                make_assessment(days, score=score, source=AssessmentSource.PROACTIVE),
            )

        anomalies = await engine.detect_anomalies("vendor-1")

        assert [a.anomaly_type for a in anomalies] == [AnomalyType.COMPLIANCE_GAP]

    @pytest.mark.asyncio
    async def test_clean_vendor_stores_nothing(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        repository.add_vendor(VendorProfile(vendor_id="vendor-2", compliance_status="compliant"))

        anomalies = await engine.detect_anomalies("vendor-2")

        assert anomalies == []
        assert "vendor-2" not in repository.anomalies


# =============================================================================
# Ratings and Benchmarks
# =============================================================================


class TestRatings:
    """Tests for rating computation, breakdown and benchmarks."""

    @pytest.mark.asyncio
    async def test_compute_rating_upserts(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        """Test 0*0.4 + 60*0.25 + 50*0.15 + 0*0.1 + 30*0.1 = 25.5."""
        rating = await engine.compute_rating("vendor-1")

        assert rating.overall_rating == pytest.approx(25.5)
        assert repository.ratings["vendor-1"] is rating
        assert repository.vendors["vendor-1"].vendor_rating == rating.overall_rating
        assert repository.vendors["vendor-1"].security_posture_score == 30.0

    @pytest.mark.asyncio
    async def test_recompute_replaces_rating(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        first = await engine.compute_rating("vendor-1")
        repository.add_assessment("vendor-1", make_assessment(10, score=90))
        second = await engine.compute_rating("vendor-1")

        assert second.overall_rating > first.overall_rating
        assert repository.ratings["vendor-1"] is second

    @pytest.mark.asyncio
    async def test_rating_reads_whole_history(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        for days in range(10, 110, 10):
            repository.add_assessment("vendor-1", make_assessment(days))
        repository.add_assessment("vendor-1", make_assessment(200, status="sent"))

        rating = await engine.compute_rating("vendor-1")

        assert rating.completion_rate == pytest.approx(90.91)

    @pytest.mark.asyncio
    async def test_breakdown_computed_without_storing(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        rating = await engine.get_rating_breakdown("vendor-1")

        assert rating.overall_rating == pytest.approx(25.5)
        assert repository.ratings == {}

    @pytest.mark.asyncio
    async def test_breakdown_returns_stored_rating(self, engine: RiskIntelligenceEngine):
        stored = await engine.compute_rating("vendor-1")
        assert await engine.get_rating_breakdown("vendor-1") is stored

    @pytest.mark.asyncio
    async def test_breakdown_unknown_vendor(self, engine: RiskIntelligenceEngine):
        with pytest.raises(EntityNotFoundError):
            await engine.get_rating_breakdown("missing")

    @pytest.mark.asyncio
    async def test_industry_benchmark(
        self, engine: RiskIntelligenceEngine, repository: InMemoryHistoryRepository
    ):
        for i, rating in enumerate([60.0, 70.0, 80.0, 90.0]):
            repository.add_vendor(
                VendorProfile(vendor_id=f"fin-{i}", industry="Financial", vendor_rating=rating)
            )
        repository.add_vendor(
            VendorProfile(
                vendor_id="fin-pending", industry="Financial", vendor_rating=10.0, status="pending"
            )
        )
        repository.add_vendor(VendorProfile(vendor_id="retail", industry="Retail", vendor_rating=5.0))

        benchmark = await engine.get_industry_benchmark("Financial")

        assert benchmark.vendor_count == 4
        assert benchmark.average_rating == 75.0
        assert benchmark.median_rating == 75.0

    @pytest.mark.asyncio
    async def test_empty_industry(self, engine: RiskIntelligenceEngine):
        benchmark = await engine.get_industry_benchmark("Aerospace")
        assert benchmark.vendor_count == 0
        assert benchmark.average_rating == 0.0


# =============================================================================
# get_trends
# =============================================================================


class TestTrends:
    """Tests for RiskIntelligenceEngine.get_trends."""

    @pytest.mark.asyncio
    async def test_trends_include_new_scores(self, engine: RiskIntelligenceEngine, now):
        await engine.compute_risk_score(RiskSubject(asset_id="asset-1"))

        trends = await engine.get_trends("org-1", "30d")

        assert trends.window == TrendWindow.DAYS_30
        assert len(trends.trend_data) == 30
        assert trends.trend_data[-1].date == now.date()
        assert trends.trend_data[-1].avg_score == 78.0
        assert trends.trend_data[-1].high_count == 1
        assert len(trends.forecast) == 30

    @pytest.mark.asyncio
    async def test_unknown_organization_is_flat(self, engine: RiskIntelligenceEngine):
        trends = await engine.get_trends("org-unknown")

        assert len(trends.trend_data) == 90
        assert trends.overall_trend == OverallTrend.STABLE
        assert all(p.avg_score == 0.0 for p in trends.trend_data)

    @pytest.mark.asyncio
    async def test_bad_window_rejected_before_repository(self, unreliable_repository, now):
        repo = unreliable_repository()
        engine = unreliable_engine(repo, now)

        with pytest.raises(InputValidationError):
            await engine.get_trends("org-1", "7d")

        assert repo.calls == {}


# =============================================================================
# Repository Resilience
# =============================================================================


class TestRepositoryResilience:
    """Tests for timeouts, retries and degradation."""

    @pytest.mark.asyncio
    async def test_transient_error_retried(self, unreliable_repository, now):
        repo = unreliable_repository(failures={"get_entity_profile": 1})
        engine = unreliable_engine(repo, now)

        prediction = await engine.predict_risk("vendor-1")

        assert prediction.risk_score == 65
        assert repo.calls["get_entity_profile"] == 2

    @pytest.mark.asyncio
    async def test_persistent_error_raises(self, unreliable_repository, now):
        repo = unreliable_repository(failures={"get_entity_profile": 2})
        engine = unreliable_engine(repo, now)

        with pytest.raises(RepositoryUnavailableError) as exc_info:
            await engine.predict_risk("vendor-1")

        assert exc_info.value.operation == "get_entity_profile"
        assert repo.calls["get_entity_profile"] == 2
        assert repo.predictions == []

    @pytest.mark.asyncio
    async def test_slow_history_degrades_to_empty(self, unreliable_repository, now):
        repo = unreliable_repository(slow=("get_assessment_history",), delay=0.5)
        repo.add_assessment("vendor-1", make_assessment(10))
        engine = unreliable_engine(repo, now)

        prediction = await engine.predict_risk("vendor-1")

        assert prediction.risk_score == 65
        assert repo.calls["get_assessment_history"] == 2
        assert len(repo.predictions) == 1

    @pytest.mark.asyncio
    async def test_slow_profile_read_raises(self, unreliable_repository, now):
        repo = unreliable_repository(slow=("get_entity_profile",), delay=0.5)
        engine = unreliable_engine(repo, now)

        with pytest.raises(RepositoryUnavailableError) as exc_info:
            await engine.detect_anomalies("vendor-1")

        assert "Timeout" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_history_transport_error_propagates(self, unreliable_repository, now):
        repo = unreliable_repository(failures={"get_risk_assessment_history": 2})
        engine = unreliable_engine(repo, now)

        with pytest.raises(RepositoryUnavailableError):
            await engine.detect_anomalies("vendor-1")

    @pytest.mark.asyncio
    async def test_slow_trend_history_degrades(self, unreliable_repository, now):
        repo = unreliable_repository(slow=("get_organization_risk_history",), delay=0.5)
        engine = unreliable_engine(repo, now)

        trends = await engine.get_trends("org-1", TrendWindow.DAYS_30)

        assert len(trends.trend_data) == 30
        assert trends.trend_data[-1].avg_score == 0.0


def test_create_risk_engine() -> None:
    repo = InMemoryHistoryRepository()
    engine = create_risk_engine(repo, EngineConfig(repository_retries=0))

    assert engine.repository is repo
    assert engine.config.repository_retries == 0
