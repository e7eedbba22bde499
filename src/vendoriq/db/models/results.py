"""Engine output models: predictions, anomalies and ratings."""

from datetime import datetime

from sqlalchemy import Float, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, PortableJSON, TimestampMixin, UTCDateTime, id_column


class RiskPredictionModel(Base):
    """A stored heuristic risk prediction."""

    __tablename__ = "risk_predictions"

    prediction_id: Mapped[str] = id_column()
    vendor_id: Mapped[str] = mapped_column(String(36), nullable=False)
    asset_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    relationship_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    predicted_score: Mapped[int] = mapped_column(Integer, nullable=False)
    predicted_level: Mapped[str] = mapped_column(String(20), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    factors: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)
    recommendations: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)
    next_assessment_due: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    model_id: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), nullable=False
    )

    __table_args__ = (Index("idx_prediction_vendor", "vendor_id", "created_at"),)


class AnomalyDetectionModel(Base):
    """A detected behavioral anomaly. Rows are never updated."""

    __tablename__ = "anomaly_detections"

    anomaly_id: Mapped[str] = id_column()
    vendor_id: Mapped[str] = mapped_column(String(36), nullable=False)
    anomaly_type: Mapped[str] = mapped_column(String(30), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    affected_entities: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)
    recommendations: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)
    model_id: Mapped[str] = mapped_column(String(50), nullable=False)
    detected_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_anomaly_vendor", "vendor_id", "detected_at"),
        Index("idx_anomaly_type", "anomaly_type"),
    )


class VendorRatingModel(Base, TimestampMixin):
    """A vendor's current rating. One row per vendor, updated in place."""

    __tablename__ = "vendor_ratings"

    vendor_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    overall_rating: Mapped[float] = mapped_column(Float, nullable=False)
    assessment_score: Mapped[float] = mapped_column(Float, nullable=False)
    compliance_score: Mapped[float] = mapped_column(Float, nullable=False)
    response_time_score: Mapped[float] = mapped_column(Float, nullable=False)
    completion_rate: Mapped[float] = mapped_column(Float, nullable=False)
    security_posture_score: Mapped[float] = mapped_column(Float, nullable=False)
    rating_breakdown: Mapped[dict] = mapped_column(PortableJSON(), nullable=False, default=dict)
    calculated_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    def __repr__(self) -> str:
        return f"<VendorRating(vendor={self.vendor_id}, rating={self.overall_rating})>"
