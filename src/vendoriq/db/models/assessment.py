"""Assessment history models."""

from datetime import datetime

from sqlalchemy import Float, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, PortableJSON, UTCDateTime, id_column


class VendorAssessmentModel(Base):
    """A questionnaire-style assessment of a vendor.

    ``source`` distinguishes questionnaires sent to the vendor from
    internally initiated (proactive) assessments.
    """

    __tablename__ = "vendor_assessments"

    assessment_id: Mapped[str] = id_column()
    vendor_id: Mapped[str] = mapped_column(String(36), nullable=False)
    source: Mapped[str] = mapped_column(String(20), nullable=False, default="vendor")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="sent")
    overall_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), nullable=False
    )

    __table_args__ = (Index("idx_vendor_assessment_vendor_created", "vendor_id", "created_at"),)

    def __repr__(self) -> str:
        return f"<VendorAssessment(id={self.assessment_id}, status={self.status})>"


class RiskAssessmentModel(Base):
    """A computed risk assessment.

    ``subject_id`` is the most specific subject (relationship, vendor,
    then asset); history reads match any of the three id columns.
    ``organization_id`` is resolved when the row is written, so trend
    queries need no joins.
    """

    __tablename__ = "risk_assessments"

    assessment_id: Mapped[str] = id_column()
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)
    organization_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    asset_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    vendor_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    relationship_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    assessment_type: Mapped[str] = mapped_column(String(30), nullable=False)
    calculated_score: Mapped[int] = mapped_column(Integer, nullable=False)
    risk_level: Mapped[str] = mapped_column(String(20), nullable=False)
    factors: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)
    recommendations: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)
    next_due: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    assessed_by: Mapped[str] = mapped_column(String(255), nullable=False, default="system")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    assessed_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_risk_assessment_subject", "subject_id", "assessed_at"),
        Index("idx_risk_assessment_asset", "asset_id", "assessed_at"),
        Index("idx_risk_assessment_vendor", "vendor_id", "assessed_at"),
        Index("idx_risk_assessment_relationship", "relationship_id", "assessed_at"),
        Index("idx_risk_assessment_org", "organization_id", "assessed_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<RiskAssessment(id={self.assessment_id}, subject={self.subject_id}, "
            f"score={self.calculated_score})>"
        )
