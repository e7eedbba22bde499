"""Database models for VendorIQ."""

from .assessment import RiskAssessmentModel, VendorAssessmentModel
from .base import Base, PortableJSON, TimestampMixin, UTCDateTime, id_column, new_id
from .results import AnomalyDetectionModel, RiskPredictionModel, VendorRatingModel
from .subject import AssetModel, AssetVendorRelationshipModel, VendorModel

__all__ = [
    "Base",
    "PortableJSON",
    "TimestampMixin",
    "UTCDateTime",
    "id_column",
    "new_id",
    "VendorModel",
    "AssetModel",
    "AssetVendorRelationshipModel",
    "VendorAssessmentModel",
    "RiskAssessmentModel",
    "RiskPredictionModel",
    "AnomalyDetectionModel",
    "VendorRatingModel",
]
