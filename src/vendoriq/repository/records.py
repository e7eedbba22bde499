"""Fixed-shape records returned by history repositories."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class EntityType(str, Enum):
    """Kinds of subject a profile can be fetched for."""

    ASSET = "asset"
    VENDOR = "vendor"
    RELATIONSHIP = "relationship"


class AssessmentSource(str, Enum):
    """Where an assessment record originated."""

    VENDOR = "vendor"  # questionnaire sent to the vendor
    PROACTIVE = "proactive"  # internally initiated assessment


COMPLETED_STATUS = "completed"


def as_utc(value: datetime | None) -> datetime | None:
    """Aware UTC datetime; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass
class AssetProfile:
    """Risk-relevant attributes of an asset."""

    asset_id: str
    criticality: str = "medium"
    business_impact: str = "medium"
    data_classification: str = "internal"
    compliance_requirements: list[str] = field(default_factory=list)
    security_controls: list[str] = field(default_factory=list)
    organization_id: str | None = None


@dataclass
class VendorProfile:
    """Risk-relevant attributes of a vendor."""

    vendor_id: str
    name: str = ""
    industry: str | None = None
    compliance_status: str | None = None
    risk_score: float | None = None
    compliance_score: float | None = None
    security_posture_score: float | None = None
    vendor_rating: float | None = None
    status: str = "approved"
    organization_id: str | None = None


@dataclass
class RelationshipProfile:
    """An asset's dependency on a vendor."""

    relationship_id: str
    asset_id: str
    vendor_id: str
    criticality_to_asset: str = "medium"
    data_access_level: str = "none"
    integration_type: str = "api"


EntityProfile = AssetProfile | VendorProfile | RelationshipProfile


@dataclass
class AssessmentRecord:
    """A questionnaire-style assessment of a subject."""

    assessment_id: str
    created_at: datetime
    score: float | None = None
    status: str = "sent"
    source: AssessmentSource = AssessmentSource.VENDOR
    sent_at: datetime | None = None
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        self.created_at = as_utc(self.created_at)
        self.sent_at = as_utc(self.sent_at)
        self.completed_at = as_utc(self.completed_at)

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED_STATUS

    @property
    def response_days(self) -> float | None:
        """Days between sending and completion, None if either is missing."""
        if self.sent_at is None or self.completed_at is None:
            return None
        return (self.completed_at - self.sent_at).total_seconds() / 86400


@dataclass
class RiskAssessmentRecord:
    """A stored risk score for a subject at a point in time."""

    subject_id: str
    score: float
    created_at: datetime

    def __post_init__(self) -> None:
        self.created_at = as_utc(self.created_at)
