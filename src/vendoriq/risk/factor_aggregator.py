"""Factor Aggregator for weighted risk scoring.

This module provides the FactorAggregator that:
1. Builds catalog risk factors from asset, vendor and relationship profiles
2. Aggregates weighted factor scores into a clamped 0-100 score
3. Maps the score to a risk level
4. Generates de-duplicated mitigation recommendations
"""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, Field

from vendoriq.core.exceptions import InputValidationError
from vendoriq.core.logging import get_logger
from vendoriq.repository.records import AssetProfile, RelationshipProfile, VendorProfile
from vendoriq.risk.scoring import (
    band_guidance,
    clamp,
    dedupe,
    round_score,
    score_to_risk_level,
)
from vendoriq.risk.types import (
    AssessmentStatus,
    AssessmentType,
    FactorAggregation,
    RiskAssessment,
    RiskCategory,
    RiskFactor,
)

logger = get_logger(__name__)


# =============================================================================
# Catalog Scores
# =============================================================================


CRITICALITY_SCORES: dict[str, float] = {"critical": 90, "high": 70, "medium": 50, "low": 20}

BUSINESS_IMPACT_SCORES: dict[str, float] = {"critical": 85, "high": 65, "medium": 45, "low": 25}

DATA_CLASSIFICATION_SCORES: dict[str, float] = {
    "restricted": 90,
    "confidential": 70,
    "internal": 40,
    "public": 10,
}

VENDOR_COMPLIANCE_SCORES: dict[str, float] = {
    "compliant": 20,
    "partial": 60,
    "non-compliant": 90,
}
DEFAULT_VENDOR_COMPLIANCE_SCORE = 50.0

HIGH_RISK_INDUSTRIES = frozenset({"Financial", "Healthcare", "Government", "Defense"})
MEDIUM_RISK_INDUSTRIES = frozenset({"Technology", "Energy", "Manufacturing"})

DATA_ACCESS_SCORES: dict[str, float] = {
    "full_access": 90,
    "read_write": 70,
    "read_only": 40,
    "none": 10,
}

INTEGRATION_SCORES: dict[str, float] = {
    "direct_access": 90,
    "database": 80,
    "api": 60,
    "web_service": 50,
    "file_transfer": 40,
    "cloud_service": 30,
}
DEFAULT_ACCESS_SCORE = 50.0


def criticality_score(level: str | None) -> float:
    """Score a criticality level: critical 90, high 70, medium 50, low 20."""
    return CRITICALITY_SCORES.get(level or "", 0.0)


def business_impact_score(level: str | None) -> float:
    return BUSINESS_IMPACT_SCORES.get(level or "", 0.0)


def data_classification_score(level: str | None) -> float:
    return DATA_CLASSIFICATION_SCORES.get(level or "", 0.0)


def compliance_requirements_score(requirements: Sequence[str]) -> float:
    """Score the regulatory burden of an asset's compliance requirements."""
    if not requirements:
        return 0.0
    if "PCI_DSS" in requirements or "SOX" in requirements:
        return 80.0
    if "GDPR" in requirements or "CCPA" in requirements:
        return 70.0
    if len(requirements) > 2:
        return 60.0
    return 40.0


def security_controls_score(controls: Sequence[str]) -> float:
    """Score control coverage; fewer controls means higher risk."""
    if not controls:
        return 100.0
    if len(controls) >= 5:
        return 20.0
    if len(controls) >= 3:
        return 40.0
    return 60.0


def vendor_compliance_score(status: str | None) -> float:
    return VENDOR_COMPLIANCE_SCORES.get(status or "", DEFAULT_VENDOR_COMPLIANCE_SCORE)


def industry_risk_score(industry: str | None) -> float:
    if industry in HIGH_RISK_INDUSTRIES:
        return 70.0
    if industry in MEDIUM_RISK_INDUSTRIES:
        return 40.0
    return 20.0


def data_access_score(level: str | None) -> float:
    return DATA_ACCESS_SCORES.get(level or "", DEFAULT_ACCESS_SCORE)


def integration_score(integration_type: str | None) -> float:
    return INTEGRATION_SCORES.get(integration_type or "", DEFAULT_ACCESS_SCORE)


# =============================================================================
# Factor Builders
# =============================================================================


def asset_factors(asset: AssetProfile) -> list[RiskFactor]:
    """Build the five asset risk factors."""
    return [
        RiskFactor(
            id="asset_criticality",
            name="Asset Criticality",
            category=RiskCategory.OPERATIONAL,
            weight=0.3,
            score=criticality_score(asset.criticality),
            description=f"Asset criticality level: {asset.criticality}",
            evidence=(f"Asset criticality: {asset.criticality}",),
            mitigation_controls=("Implement additional monitoring", "Regular security assessments"),
        ),
        RiskFactor(
            id="business_impact",
            name="Business Impact",
            category=RiskCategory.OPERATIONAL,
            weight=0.25,
            score=business_impact_score(asset.business_impact),
            description=f"Business impact level: {asset.business_impact}",
            evidence=(f"Business impact: {asset.business_impact}",),
            mitigation_controls=("Business continuity planning", "Disaster recovery procedures"),
        ),
        RiskFactor(
            id="data_classification",
            name="Data Classification",
            category=RiskCategory.SECURITY,
            weight=0.2,
            score=data_classification_score(asset.data_classification),
            description=f"Data classification: {asset.data_classification}",
            evidence=(f"Data classification: {asset.data_classification}",),
            mitigation_controls=("Data encryption", "Access controls", "Data loss prevention"),
        ),
        RiskFactor(
            id="compliance_requirements",
            name="Compliance Requirements",
            category=RiskCategory.COMPLIANCE,
            weight=0.15,
            score=compliance_requirements_score(asset.compliance_requirements),
            description=f"Compliance requirements: {', '.join(asset.compliance_requirements)}",
            evidence=tuple(asset.compliance_requirements),
            mitigation_controls=(
                "Regular compliance audits",
                "Policy implementation",
                "Training programs",
            ),
        ),
        RiskFactor(
            id="security_controls",
            name="Security Controls",
            category=RiskCategory.SECURITY,
            weight=0.1,
            score=security_controls_score(asset.security_controls),
            description=f"Security controls implemented: {', '.join(asset.security_controls)}",
            evidence=tuple(asset.security_controls),
            mitigation_controls=("Additional security controls", "Regular security testing"),
        ),
    ]


def vendor_factors(vendor: VendorProfile) -> list[RiskFactor]:
    """Build the three vendor risk factors."""
    # Stored risk scores outside [0, 100] are clamped rather than rejected
    vendor_risk = clamp(vendor.risk_score or 0.0)
    return [
        RiskFactor(
            id="vendor_risk",
            name="Vendor Risk Profile",
            category=RiskCategory.OPERATIONAL,
            weight=0.4,
            score=vendor_risk,
            description=f"Vendor overall risk score: {vendor_risk:g}",
            evidence=(f"Vendor risk score: {vendor_risk:g}",),
            mitigation_controls=("Vendor risk monitoring", "Regular vendor assessments"),
        ),
        RiskFactor(
            id="vendor_compliance",
            name="Vendor Compliance Status",
            category=RiskCategory.COMPLIANCE,
            weight=0.3,
            score=vendor_compliance_score(vendor.compliance_status),
            description=f"Vendor compliance status: {vendor.compliance_status}",
            evidence=(f"Compliance status: {vendor.compliance_status}",),
            mitigation_controls=("Compliance monitoring", "Vendor training", "Regular audits"),
        ),
        RiskFactor(
            id="vendor_industry",
            name="Vendor Industry Risk",
            category=RiskCategory.OPERATIONAL,
            weight=0.3,
            score=industry_risk_score(vendor.industry),
            description=f"Vendor industry: {vendor.industry}",
            evidence=(f"Industry: {vendor.industry}",),
            mitigation_controls=("Industry-specific controls", "Regular monitoring"),
        ),
    ]


def relationship_factors(relationship: RelationshipProfile) -> list[RiskFactor]:
    """Build the three asset-vendor relationship risk factors."""
    return [
        RiskFactor(
            id="relationship_criticality",
            name="Relationship Criticality",
            category=RiskCategory.OPERATIONAL,
            weight=0.4,
            score=criticality_score(relationship.criticality_to_asset),
            description=f"Relationship criticality: {relationship.criticality_to_asset}",
            evidence=(f"Criticality: {relationship.criticality_to_asset}",),
            mitigation_controls=("Regular relationship reviews", "Backup vendor identification"),
        ),
        RiskFactor(
            id="data_access",
            name="Data Access Level",
            category=RiskCategory.SECURITY,
            weight=0.3,
            score=data_access_score(relationship.data_access_level),
            description=f"Data access level: {relationship.data_access_level}",
            evidence=(f"Access level: {relationship.data_access_level}",),
            mitigation_controls=(
                "Access monitoring",
                "Regular access reviews",
                "Principle of least privilege",
            ),
        ),
        RiskFactor(
            id="integration_type",
            name="Integration Type Risk",
            category=RiskCategory.SECURITY,
            weight=0.3,
            score=integration_score(relationship.integration_type),
            description=f"Integration type: {relationship.integration_type}",
            evidence=(f"Integration: {relationship.integration_type}",),
            mitigation_controls=("Secure integration protocols", "Regular security testing"),
        ),
    ]


# =============================================================================
# Configuration
# =============================================================================


class AggregatorConfig(BaseModel):
    """Configuration for the factor aggregator."""

    mitigation_threshold: float = Field(
        default=70.0, ge=0.0, le=100.0, description="Factor score that pulls in its controls"
    )
    next_due_days: int = Field(
        default=365, ge=1, le=3650, description="Days until the next assessment is due"
    )


# =============================================================================
# Factor Aggregator
# =============================================================================


class FactorAggregator:
    """Aggregates weighted risk factors into a single risk score.

    Weights are applied as direct multipliers: a vendor assessment's
    weights sum to 1.0, but a combined asset+vendor assessment sums to
    2.0 and relies on the final clamp to stay within 0-100.

    Example:
        ```python
        aggregator = FactorAggregator()
        assessment = aggregator.assess(asset=asset_profile)
        print(assessment.calculated_score, assessment.risk_level)
        ```
    """

    def __init__(self, config: AggregatorConfig | None = None):
        """Initialize the factor aggregator.

        Args:
            config: Aggregator configuration.
        """
        self.config = config or AggregatorConfig()

    def aggregate(self, factors: Sequence[RiskFactor]) -> FactorAggregation:
        """Aggregate factors into a score, level and recommendations.

        Args:
            factors: Risk factors to combine. May be empty.

        Returns:
            FactorAggregation with the clamped integer score.
        """
        raw = sum(f.contribution for f in factors)
        score = round_score(raw)
        return FactorAggregation(
            score=score,
            level=score_to_risk_level(score),
            raw_score=raw,
            recommendations=self.recommendations(factors, score),
        )

    def recommendations(self, factors: Sequence[RiskFactor], score: int) -> list[str]:
        """Mitigation controls of high-scoring factors followed by band guidance."""
        items: list[str] = []
        for factor in factors:
            if factor.score >= self.config.mitigation_threshold:
                items.extend(factor.mitigation_controls)
        items.extend(band_guidance(score))
        return dedupe(items)

    def assess(
        self,
        asset: AssetProfile | None = None,
        vendor: VendorProfile | None = None,
        relationship: RelationshipProfile | None = None,
        assessed_by: str = "system",
        now: datetime | None = None,
    ) -> RiskAssessment:
        """Build and aggregate catalog factors for the given profiles.

        Args:
            asset: Asset profile, if the asset is a subject.
            vendor: Vendor profile, if the vendor is a subject.
            relationship: Relationship profile, if the relationship is a subject.
            assessed_by: Recorded assessor.
            now: Assessment time (default: current UTC time).

        Returns:
            Draft RiskAssessment.

        Raises:
            InputValidationError: If no profile is given.
        """
        if asset is None and vendor is None and relationship is None:
            raise InputValidationError("At least one assessment subject is required", "subject")

        now = now or datetime.now(UTC)
        factors: list[RiskFactor] = []
        if asset is not None:
            factors.extend(asset_factors(asset))
        if vendor is not None:
            factors.extend(vendor_factors(vendor))
        if relationship is not None:
            factors.extend(relationship_factors(relationship))

        result = self.aggregate(factors)

        assessment = RiskAssessment(
            asset_id=asset.asset_id if asset else None,
            vendor_id=vendor.vendor_id if vendor else None,
            relationship_id=relationship.relationship_id if relationship else None,
            assessment_type=self._assessment_type(asset, vendor, relationship),
            factors=factors,
            calculated_score=result.score,
            risk_level=result.level,
            recommendations=result.recommendations,
            next_due=now + timedelta(days=self.config.next_due_days),
            assessed_by=assessed_by,
            assessed_at=now,
            status=AssessmentStatus.DRAFT,
        )

        logger.info(
            "Risk assessment calculated",
            assessment_type=assessment.assessment_type.value,
            factor_count=len(factors),
            raw_score=round(result.raw_score, 2),
            score=result.score,
            level=result.level.value,
        )

        return assessment

    def _assessment_type(
        self,
        asset: AssetProfile | None,
        vendor: VendorProfile | None,
        relationship: RelationshipProfile | None,
    ) -> AssessmentType:
        present = [
            kind
            for kind, profile in (
                (AssessmentType.ASSET_RISK, asset),
                (AssessmentType.VENDOR_RISK, vendor),
                (AssessmentType.RELATIONSHIP_RISK, relationship),
            )
            if profile is not None
        ]
        if len(present) > 1:
            return AssessmentType.COMBINED_RISK
        return present[0]


def create_factor_aggregator(config: AggregatorConfig | None = None) -> FactorAggregator:
    """Create a factor aggregator.

    Args:
        config: Optional aggregator configuration.

    Returns:
        Configured FactorAggregator.
    """
    return FactorAggregator(config=config)
