"""In-memory history repository for tests and local use."""

from collections import defaultdict
from datetime import datetime

from vendoriq.repository.base import HistoryRepository
from vendoriq.repository.records import (
    AssessmentRecord,
    AssessmentSource,
    AssetProfile,
    EntityProfile,
    EntityType,
    RelationshipProfile,
    RiskAssessmentRecord,
    VendorProfile,
)
from vendoriq.risk.types import AnomalyDetection, RiskAssessment, RiskPrediction, VendorRating


class InMemoryHistoryRepository(HistoryRepository):
    """Dictionary-backed repository.

    Seed it with the ``add_*`` helpers; engine writes are kept in the
    public ``assessments``, ``predictions``, ``anomalies`` and ``ratings``
    attributes for inspection.

    Example:
        repo = InMemoryHistoryRepository()
        repo.add_vendor(VendorProfile(vendor_id="v-1", industry="Financial"))
        engine = RiskIntelligenceEngine(repo)
    """

    def __init__(self) -> None:
        self.assets: dict[str, AssetProfile] = {}
        self.vendors: dict[str, VendorProfile] = {}
        self.relationships: dict[str, RelationshipProfile] = {}
        self._assessment_history: dict[str, list[AssessmentRecord]] = defaultdict(list)
        # Each risk record with every subject id its assessment named
        self._risk_history: list[tuple[RiskAssessmentRecord, frozenset[str]]] = []

        self.assessments: list[RiskAssessment] = []
        self.predictions: list[tuple[RiskPrediction, str, str | None, str | None]] = []
        self.anomalies: dict[str, list[AnomalyDetection]] = defaultdict(list)
        self.ratings: dict[str, VendorRating] = {}

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    def add_asset(self, profile: AssetProfile) -> None:
        self.assets[profile.asset_id] = profile

    def add_vendor(self, profile: VendorProfile) -> None:
        self.vendors[profile.vendor_id] = profile

    def add_relationship(self, profile: RelationshipProfile) -> None:
        self.relationships[profile.relationship_id] = profile

    def add_assessment(self, subject_id: str, record: AssessmentRecord) -> None:
        self._assessment_history[subject_id].append(record)

    def add_risk_assessment(self, record: RiskAssessmentRecord, *related_ids: str) -> None:
        """Seed a risk score, also listed under ``related_ids``."""
        self._risk_history.append((record, frozenset((record.subject_id, *related_ids))))

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_entity_profile(
        self, entity_type: EntityType, entity_id: str
    ) -> EntityProfile | None:
        entity_type = EntityType(entity_type)
        if entity_type == EntityType.ASSET:
            return self.assets.get(entity_id)
        if entity_type == EntityType.VENDOR:
            return self.vendors.get(entity_id)
        return self.relationships.get(entity_id)

    async def get_assessment_history(
        self,
        subject_id: str,
        limit: int | None,
        source: AssessmentSource | None = None,
    ) -> list[AssessmentRecord]:
        records = sorted(
            (
                record
                for record in self._assessment_history.get(subject_id, [])
                if source is None or record.source == source
            ),
            key=lambda r: r.created_at,
            reverse=True,
        )
        return records[:limit]

    async def get_risk_assessment_history(
        self, subject_id: str, limit: int
    ) -> list[RiskAssessmentRecord]:
        records = sorted(
            (record for record, ids in self._risk_history if subject_id in ids),
            key=lambda r: r.created_at,
            reverse=True,
        )
        return records[:limit]

    async def get_organization_risk_history(
        self, organization_id: str, until: datetime
    ) -> list[RiskAssessmentRecord]:
        records = [
            record
            for record, _ in self._risk_history
            if record.created_at <= until
            and self._organization_of(record.subject_id) == organization_id
        ]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    async def get_industry_ratings(self, industry: str) -> list[float]:
        return [
            vendor.vendor_rating
            for vendor in self.vendors.values()
            if vendor.industry == industry
            and vendor.status == "approved"
            and vendor.vendor_rating is not None
        ]

    async def get_rating(self, vendor_id: str) -> VendorRating | None:
        return self.ratings.get(vendor_id)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def put_risk_assessment(self, assessment: RiskAssessment) -> None:
        self.assessments.append(assessment)
        subject_id = assessment.subject_id
        if subject_id is not None:
            self.add_risk_assessment(
                RiskAssessmentRecord(
                    subject_id=subject_id,
                    score=assessment.calculated_score,
                    created_at=assessment.assessed_at,
                ),
                *(
                    related
                    for related in (assessment.asset_id, assessment.vendor_id)
                    if related is not None
                ),
            )

    async def put_prediction(
        self,
        prediction: RiskPrediction,
        vendor_id: str,
        asset_id: str | None = None,
        relationship_id: str | None = None,
    ) -> None:
        self.predictions.append((prediction, vendor_id, asset_id, relationship_id))

    async def put_anomalies(self, vendor_id: str, anomalies: list[AnomalyDetection]) -> None:
        self.anomalies[vendor_id].extend(anomalies)

    async def upsert_rating(self, rating: VendorRating) -> None:
        self.ratings[rating.vendor_id] = rating
        vendor = self.vendors.get(rating.vendor_id)
        if vendor is not None:
            vendor.vendor_rating = rating.overall_rating
            vendor.security_posture_score = rating.security_posture_score

    def _organization_of(self, subject_id: str) -> str | None:
        if subject_id in self.assets:
            return self.assets[subject_id].organization_id
        if subject_id in self.vendors:
            return self.vendors[subject_id].organization_id
        relationship = self.relationships.get(subject_id)
        if relationship is not None and relationship.asset_id in self.assets:
            return self.assets[relationship.asset_id].organization_id
        return None
