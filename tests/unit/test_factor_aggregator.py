"""Unit tests for the FactorAggregator."""

from datetime import UTC, datetime, timedelta

import pytest

from vendoriq.core.exceptions import InputValidationError
from vendoriq.repository.records import AssetProfile, RelationshipProfile, VendorProfile
from vendoriq.risk.factor_aggregator import (
    AggregatorConfig,
    FactorAggregator,
    compliance_requirements_score,
    create_factor_aggregator,
    security_controls_score,
    vendor_factors,
)
from vendoriq.risk.types import (
    AssessmentStatus,
    AssessmentType,
    RiskCategory,
    RiskFactor,
    RiskLevel,
)

NOW = datetime(2026, 3, 1, tzinfo=UTC)


@pytest.fixture
def aggregator() -> FactorAggregator:
    """Create a default factor aggregator."""
    return FactorAggregator()


def make_factor(score: float, weight: float = 0.5, controls: tuple[str, ...] = ()) -> RiskFactor:
    """Helper to create a test factor."""
    return RiskFactor(
        id=f"factor-{score}-{weight}",
        name="Test Factor",
        category=RiskCategory.SECURITY,
        weight=weight,
        score=score,
        mitigation_controls=controls,
    )


# =============================================================================
# Catalog Score Tests
# =============================================================================


class TestCatalogScores:
    """Tests for the catalog scoring functions."""

    @pytest.mark.parametrize(
        "requirements,expected",
        [
            ([], 0.0),
            (["SOX"], 80.0),
            (["PCI_DSS", "GDPR"], 80.0),
            (["CCPA"], 70.0),
            (["ISO27001", "HIPAA", "SOC2"], 60.0),
            (["HIPAA"], 40.0),
        ],
    )
    def test_compliance_requirements_score(self, requirements: list[str], expected: float) -> None:
        assert compliance_requirements_score(requirements) == expected

    @pytest.mark.parametrize(
        "count,expected",
        [(0, 100.0), (1, 60.0), (2, 60.0), (3, 40.0), (4, 40.0), (5, 20.0), (8, 20.0)],
    )
    def test_security_controls_score(self, count: int, expected: float) -> None:
        controls = [f"control-{i}" for i in range(count)]
        assert security_controls_score(controls) == expected

    def test_vendor_risk_score_clamped(self) -> None:
        """Test stored vendor scores outside [0, 100] are clamped, not rejected."""
        factors = vendor_factors(VendorProfile(vendor_id="v", risk_score=140.0))
        assert factors[0].id == "vendor_risk"
        assert factors[0].score == 100.0

    def test_unknown_vendor_status_scores_fifty(self) -> None:
        factors = vendor_factors(VendorProfile(vendor_id="v", compliance_status="unknown"))
        assert factors[1].score == 50.0


# =============================================================================
# Aggregation Tests
# =============================================================================


class TestAggregate:
    """Tests for FactorAggregator.aggregate."""

    def test_empty_factors_score_zero(self, aggregator: FactorAggregator) -> None:
        result = aggregator.aggregate([])
        assert result.score == 0
        assert result.level == RiskLevel.LOW
        assert result.recommendations == []

    def test_weights_are_not_normalized(self, aggregator: FactorAggregator) -> None:
        """Test weights act as direct multipliers, with the sum clamped."""
        result = aggregator.aggregate([make_factor(90, 1.0), make_factor(80, 1.0)])
        assert result.raw_score == 170.0
        assert result.score == 100
        assert result.level == RiskLevel.CRITICAL

    def test_score_is_monotonic_in_factor_score(self, aggregator: FactorAggregator) -> None:
        low = aggregator.aggregate([make_factor(40, 0.5), make_factor(30, 0.5)])
        high = aggregator.aggregate([make_factor(60, 0.5), make_factor(30, 0.5)])
        assert high.score >= low.score

    def test_high_factor_controls_precede_guidance(self, aggregator: FactorAggregator) -> None:
        factors = [
            make_factor(90, 0.5, controls=("Control A", "Control B")),
            make_factor(60, 0.5, controls=("Control C",)),
        ]
        result = aggregator.aggregate(factors)

        assert result.score == 75
        assert result.recommendations == [
            "Control A",
            "Control B",
            "Regular risk monitoring",
            "Quarterly assessments",
            "Enhanced security controls",
        ]

    def test_recommendations_deduplicated(self, aggregator: FactorAggregator) -> None:
        factors = [
            make_factor(95, 0.5, controls=("Implement additional monitoring",)),
            make_factor(95, 0.5, controls=("Implement additional monitoring",)),
        ]
        result = aggregator.aggregate(factors)

        assert result.recommendations.count("Implement additional monitoring") == 1

    def test_mitigation_threshold_configurable(self) -> None:
        aggregator = FactorAggregator(AggregatorConfig(mitigation_threshold=50))
        result = aggregator.aggregate([make_factor(55, 0.5, controls=("Control A",))])
        assert result.recommendations == ["Control A"]


# =============================================================================
# Assessment Tests
# =============================================================================


class TestAssess:
    """Tests for FactorAggregator.assess."""

    def test_worked_asset_example(
        self, aggregator: FactorAggregator, sample_asset: AssetProfile
    ) -> None:
        """Test the documented example: 77.75 rounds to 78, level high."""
        assessment = aggregator.assess(asset=sample_asset, now=NOW)

        assert assessment.calculated_score == 78
        assert assessment.risk_level == RiskLevel.HIGH
        assert assessment.assessment_type == AssessmentType.ASSET_RISK
        assert [f.id for f in assessment.factors] == [
            "asset_criticality",
            "business_impact",
            "data_classification",
            "compliance_requirements",
            "security_controls",
        ]

    def test_worked_asset_recommendations(
        self, aggregator: FactorAggregator, sample_asset: AssetProfile
    ) -> None:
        assessment = aggregator.assess(asset=sample_asset, now=NOW)

        assert assessment.recommendations == [
            "Implement additional monitoring",
            "Regular security assessments",
            "Data encryption",
            "Access controls",
            "Data loss prevention",
            "Regular compliance audits",
            "Policy implementation",
            "Training programs",
            "Additional security controls",
            "Regular security testing",
            "Regular risk monitoring",
            "Quarterly assessments",
            "Enhanced security controls",
        ]

    def test_vendor_assessment(
        self, aggregator: FactorAggregator, sample_vendor: VendorProfile
    ) -> None:
        """Test 55*0.4 + 60*0.3 + 70*0.3 = 61."""
        assessment = aggregator.assess(vendor=sample_vendor, now=NOW)

        assert assessment.calculated_score == 61
        assert assessment.risk_level == RiskLevel.HIGH
        assert assessment.vendor_id == "vendor-1"
        assert assessment.assessment_type == AssessmentType.VENDOR_RISK

    def test_relationship_assessment(
        self, aggregator: FactorAggregator, sample_relationship: RelationshipProfile
    ) -> None:
        """Test 70*0.4 + 70*0.3 + 60*0.3 = 67."""
        assessment = aggregator.assess(relationship=sample_relationship, now=NOW)

        assert assessment.calculated_score == 67
        assert assessment.assessment_type == AssessmentType.RELATIONSHIP_RISK

    def test_combined_assessment_clamped(
        self,
        aggregator: FactorAggregator,
        sample_asset: AssetProfile,
        sample_vendor: VendorProfile,
    ) -> None:
        assessment = aggregator.assess(asset=sample_asset, vendor=sample_vendor, now=NOW)

        assert len(assessment.factors) == 8
        assert assessment.calculated_score == 100
        assert assessment.risk_level == RiskLevel.CRITICAL
        assert assessment.assessment_type == AssessmentType.COMBINED_RISK

    def test_draft_due_in_a_year(
        self, aggregator: FactorAggregator, sample_asset: AssetProfile
    ) -> None:
        assessment = aggregator.assess(asset=sample_asset, assessed_by="analyst", now=NOW)

        assert assessment.status == AssessmentStatus.DRAFT
        assert assessment.assessed_by == "analyst"
        assert assessment.assessed_at == NOW
        assert assessment.next_due == NOW + timedelta(days=365)

    def test_no_subject_rejected(self, aggregator: FactorAggregator) -> None:
        with pytest.raises(InputValidationError):
            aggregator.assess()


def test_create_factor_aggregator() -> None:
    """Test the factory applies the given config."""
    aggregator = create_factor_aggregator(AggregatorConfig(next_due_days=30))
    assert aggregator.config.next_due_days == 30
