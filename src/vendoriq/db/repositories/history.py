"""SQLAlchemy implementation of the history repository.

Each call opens its own session so the engine can fan reads out
concurrently. SQLAlchemy failures surface as RepositoryError, which the
engine retries once before giving up.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vendoriq.core.logging import get_logger
from vendoriq.db.models import (
    AnomalyDetectionModel,
    AssetModel,
    AssetVendorRelationshipModel,
    RiskAssessmentModel,
    RiskPredictionModel,
    VendorAssessmentModel,
    VendorModel,
    VendorRatingModel,
)
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
from vendoriq.risk.types import (
    AnomalyDetection,
    RatingWeights,
    RiskAssessment,
    RiskPrediction,
    VendorRating,
)
from vendoriq.utils.exceptions import RepositoryError

from .assessment import RiskAssessmentRepository, VendorAssessmentRepository
from .results import AnomalyRepository, PredictionRepository, RatingRepository
from .subject import AssetRepository, RelationshipRepository, VendorRepository

logger = get_logger(__name__)


# =============================================================================
# Row Mapping
# =============================================================================


def asset_profile(row: AssetModel) -> AssetProfile:
    return AssetProfile(
        asset_id=row.asset_id,
        criticality=row.criticality,
        business_impact=row.business_impact,
        data_classification=row.data_classification,
        compliance_requirements=list(row.compliance_requirements or []),
        security_controls=list(row.security_controls or []),
        organization_id=row.organization_id,
    )


def vendor_profile(row: VendorModel) -> VendorProfile:
    return VendorProfile(
        vendor_id=row.vendor_id,
        name=row.name,
        industry=row.industry,
        compliance_status=row.compliance_status,
        risk_score=row.risk_score,
        compliance_score=row.compliance_score,
        security_posture_score=row.security_posture_score,
        vendor_rating=row.vendor_rating,
        status=row.status,
        organization_id=row.organization_id,
    )


def relationship_profile(row: AssetVendorRelationshipModel) -> RelationshipProfile:
    return RelationshipProfile(
        relationship_id=row.relationship_id,
        asset_id=row.asset_id,
        vendor_id=row.vendor_id,
        criticality_to_asset=row.criticality_to_asset,
        data_access_level=row.data_access_level,
        integration_type=row.integration_type,
    )


def assessment_record(row: VendorAssessmentModel) -> AssessmentRecord:
    return AssessmentRecord(
        assessment_id=row.assessment_id,
        score=row.overall_score,
        status=row.status,
        source=AssessmentSource(row.source),
        sent_at=row.sent_at,
        completed_at=row.completed_at,
        created_at=row.created_at,
    )


def risk_assessment_record(row: RiskAssessmentModel) -> RiskAssessmentRecord:
    return RiskAssessmentRecord(
        subject_id=row.subject_id,
        score=float(row.calculated_score),
        created_at=row.assessed_at,
    )


def vendor_rating(row: VendorRatingModel) -> VendorRating:
    weights = (row.rating_breakdown or {}).get("weights")
    return VendorRating(
        vendor_id=row.vendor_id,
        overall_rating=row.overall_rating,
        assessment_score=row.assessment_score,
        compliance_score=row.compliance_score,
        response_time_score=row.response_time_score,
        completion_rate=row.completion_rate,
        security_posture_score=row.security_posture_score,
        weights=RatingWeights(**weights) if weights else RatingWeights(),
        calculated_at=row.calculated_at,
    )


# =============================================================================
# SQL History Repository
# =============================================================================


class SQLHistoryRepository(HistoryRepository):
    """History repository backed by the relational schema.

    Example:
        ```python
        repository = SQLHistoryRepository(get_session_factory())
        engine = RiskIntelligenceEngine(repository)
        ```
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize with a session factory.

        Args:
            session_factory: Factory producing one session per call.
        """
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with self.session_factory() as db:
                yield db
        except SQLAlchemyError as e:
            logger.warning("Repository query failed", operation=operation, error=str(e))
            raise RepositoryError(f"{operation} failed: {e}") from e

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_entity_profile(
        self, entity_type: EntityType, entity_id: str
    ) -> EntityProfile | None:
        entity_type = EntityType(entity_type)
        async with self._session("get_entity_profile") as db:
            if entity_type == EntityType.ASSET:
                asset = await AssetRepository(db).get(entity_id)
                return asset_profile(asset) if asset else None
            if entity_type == EntityType.VENDOR:
                vendor = await VendorRepository(db).get(entity_id)
                return vendor_profile(vendor) if vendor else None
            relationship = await RelationshipRepository(db).get(entity_id)
            return relationship_profile(relationship) if relationship else None

    async def get_assessment_history(
        self,
        subject_id: str,
        limit: int | None,
        source: AssessmentSource | None = None,
    ) -> list[AssessmentRecord]:
        async with self._session("get_assessment_history") as db:
            rows = await VendorAssessmentRepository(db).list_for_vendor(
                subject_id, limit, source.value if source else None
            )
            return [assessment_record(row) for row in rows]

    async def get_risk_assessment_history(
        self, subject_id: str, limit: int
    ) -> list[RiskAssessmentRecord]:
        async with self._session("get_risk_assessment_history") as db:
            rows = await RiskAssessmentRepository(db).list_for_subject(subject_id, limit)
            return [risk_assessment_record(row) for row in rows]

    async def get_organization_risk_history(
        self, organization_id: str, until: datetime
    ) -> list[RiskAssessmentRecord]:
        async with self._session("get_organization_risk_history") as db:
            rows = await RiskAssessmentRepository(db).list_for_organization(
                organization_id, until.astimezone(UTC)
            )
            return [risk_assessment_record(row) for row in rows]

    async def get_industry_ratings(self, industry: str) -> list[float]:
        async with self._session("get_industry_ratings") as db:
            return await VendorRepository(db).list_industry_ratings(industry)

    async def get_rating(self, vendor_id: str) -> VendorRating | None:
        async with self._session("get_rating") as db:
            row = await RatingRepository(db).get(vendor_id)
            return vendor_rating(row) if row else None

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def put_risk_assessment(self, assessment: RiskAssessment) -> None:
        async with self._session("put_risk_assessment") as db:
            organization_id = await self._organization_of(db, assessment)
            await RiskAssessmentRepository(db).create(
                RiskAssessmentModel(
                    assessment_id=assessment.assessment_id,
                    subject_id=assessment.subject_id,
                    organization_id=organization_id,
                    asset_id=assessment.asset_id,
                    vendor_id=assessment.vendor_id,
                    relationship_id=assessment.relationship_id,
                    assessment_type=assessment.assessment_type.value,
                    calculated_score=assessment.calculated_score,
                    risk_level=assessment.risk_level.value,
                    factors=[f.to_dict() for f in assessment.factors],
                    recommendations=list(assessment.recommendations),
                    next_due=assessment.next_due,
                    assessed_by=assessment.assessed_by,
                    status=assessment.status.value,
                    assessed_at=assessment.assessed_at,
                )
            )

    async def put_prediction(
        self,
        prediction: RiskPrediction,
        vendor_id: str,
        asset_id: str | None = None,
        relationship_id: str | None = None,
    ) -> None:
        async with self._session("put_prediction") as db:
            await PredictionRepository(db).create(
                RiskPredictionModel(
                    prediction_id=prediction.prediction_id,
                    vendor_id=vendor_id,
                    asset_id=asset_id,
                    relationship_id=relationship_id,
                    predicted_score=prediction.risk_score,
                    predicted_level=prediction.risk_level.value,
                    confidence=prediction.confidence,
                    factors=[f.to_dict() for f in prediction.factors],
                    recommendations=list(prediction.recommendations),
                    next_assessment_due=prediction.next_assessment_due,
                    model_id=prediction.model_id,
                    created_at=prediction.predicted_at,
                )
            )

    async def put_anomalies(self, vendor_id: str, anomalies: list[AnomalyDetection]) -> None:
        if not anomalies:
            return
        async with self._session("put_anomalies") as db:
            await AnomalyRepository(db).create_many(
                [
                    AnomalyDetectionModel(
                        anomaly_id=anomaly.anomaly_id,
                        vendor_id=vendor_id,
                        anomaly_type=anomaly.anomaly_type.value,
                        severity=anomaly.severity.value,
                        description=anomaly.description,
                        confidence=anomaly.confidence,
                        affected_entities=list(anomaly.affected_entities),
                        recommendations=list(anomaly.recommendations),
                        model_id=anomaly.model_id,
                        detected_at=anomaly.detected_at,
                    )
                    for anomaly in anomalies
                ]
            )

    async def upsert_rating(self, rating: VendorRating) -> None:
        values = {
            "overall_rating": rating.overall_rating,
            "assessment_score": rating.assessment_score,
            "compliance_score": rating.compliance_score,
            "response_time_score": rating.response_time_score,
            "completion_rate": rating.completion_rate,
            "security_posture_score": rating.security_posture_score,
            "rating_breakdown": rating.breakdown(),
            "calculated_at": rating.calculated_at,
        }
        async with self._session("upsert_rating") as db:
            await RatingRepository(db).upsert(rating.vendor_id, values, commit=False)

            vendor = await VendorRepository(db).get(rating.vendor_id)
            if vendor is not None:
                vendor.vendor_rating = rating.overall_rating
                vendor.security_posture_score = rating.security_posture_score
            await db.commit()

    async def _organization_of(self, db: AsyncSession, assessment: RiskAssessment) -> str | None:
        if assessment.asset_id is not None:
            asset = await AssetRepository(db).get(assessment.asset_id)
            if asset is not None:
                return asset.organization_id
        if assessment.vendor_id is not None:
            vendor = await VendorRepository(db).get(assessment.vendor_id)
            if vendor is not None:
                return vendor.organization_id
        if assessment.relationship_id is not None:
            relationship = await RelationshipRepository(db).get(assessment.relationship_id)
            if relationship is not None:
                asset = await AssetRepository(db).get(relationship.asset_id)
                return asset.organization_id if asset else None
        return None
