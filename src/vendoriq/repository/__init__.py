"""History repository interface, records and in-memory implementation."""

from vendoriq.repository.base import HistoryRepository
from vendoriq.repository.memory import InMemoryHistoryRepository
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

__all__ = [
    "HistoryRepository",
    "InMemoryHistoryRepository",
    "AssessmentRecord",
    "AssessmentSource",
    "AssetProfile",
    "EntityProfile",
    "EntityType",
    "RelationshipProfile",
    "RiskAssessmentRecord",
    "VendorProfile",
]
