"""Database repositories for clean data access."""

from .assessment import RiskAssessmentRepository, VendorAssessmentRepository
from .base import BaseRepository
from .history import SQLHistoryRepository
from .results import AnomalyRepository, PredictionRepository, RatingRepository
from .subject import AssetRepository, RelationshipRepository, VendorRepository

__all__ = [
    "BaseRepository",
    "SQLHistoryRepository",
    "AssetRepository",
    "RelationshipRepository",
    "VendorRepository",
    "VendorAssessmentRepository",
    "RiskAssessmentRepository",
    "AnomalyRepository",
    "PredictionRepository",
    "RatingRepository",
]
