"""Abstract history repository consumed by the risk intelligence engine."""

from abc import ABC, abstractmethod
from datetime import datetime

from vendoriq.repository.records import (
    AssessmentRecord,
    AssessmentSource,
    EntityProfile,
    EntityType,
    RiskAssessmentRecord,
)
from vendoriq.risk.types import AnomalyDetection, RiskAssessment, RiskPrediction, VendorRating


class HistoryRepository(ABC):
    """Read and write access to profiles, histories and engine results.

    Implementations raise ``RepositoryError`` for transport failures.
    History methods return records newest first.
    """

    @abstractmethod
    async def get_entity_profile(
        self, entity_type: EntityType, entity_id: str
    ) -> EntityProfile | None:
        """Fetch the profile of an asset, vendor or relationship."""

    @abstractmethod
    async def get_assessment_history(
        self,
        subject_id: str,
        limit: int | None,
        source: AssessmentSource | None = None,
    ) -> list[AssessmentRecord]:
        """Fetch assessments of a subject, newest first.

        Both sources are returned unless ``source`` narrows them; a
        ``limit`` of None returns the whole history.
        """

    @abstractmethod
    async def get_risk_assessment_history(
        self, subject_id: str, limit: int
    ) -> list[RiskAssessmentRecord]:
        """Fetch stored risk scores naming the subject, newest first.

        A combined assessment counts for each of its asset, vendor and
        relationship ids.
        """

    @abstractmethod
    async def get_organization_risk_history(
        self, organization_id: str, until: datetime
    ) -> list[RiskAssessmentRecord]:
        """Fetch every risk score recorded for an organization up to ``until``."""

    @abstractmethod
    async def get_industry_ratings(self, industry: str) -> list[float]:
        """Fetch overall ratings of approved vendors in an industry."""

    @abstractmethod
    async def put_risk_assessment(self, assessment: RiskAssessment) -> None:
        """Store a computed risk assessment."""

    @abstractmethod
    async def put_prediction(
        self,
        prediction: RiskPrediction,
        vendor_id: str,
        asset_id: str | None = None,
        relationship_id: str | None = None,
    ) -> None:
        """Store a risk prediction."""

    @abstractmethod
    async def put_anomalies(self, vendor_id: str, anomalies: list[AnomalyDetection]) -> None:
        """Store detected anomalies."""

    @abstractmethod
    async def upsert_rating(self, rating: VendorRating) -> None:
        """Insert or replace a vendor's rating and mirror it onto the vendor."""

    @abstractmethod
    async def get_rating(self, vendor_id: str) -> VendorRating | None:
        """Fetch a vendor's stored rating, if any."""
