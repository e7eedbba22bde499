"""Repositories for engine outputs."""

from typing import Any

from vendoriq.db.models import AnomalyDetectionModel, RiskPredictionModel, VendorRatingModel

from .base import BaseRepository


class PredictionRepository(BaseRepository[RiskPredictionModel, str]):
    pass


class AnomalyRepository(BaseRepository[AnomalyDetectionModel, str]):
    pass


class RatingRepository(BaseRepository[VendorRatingModel, str]):
    """One current rating row per vendor."""

    async def upsert(
        self, vendor_id: str, values: dict[str, Any], *, commit: bool = True
    ) -> VendorRatingModel:
        """Replace the vendor's rating row, inserting it on first use."""
        existing = await self.get(vendor_id)
        if existing is None:
            return await self.create(VendorRatingModel(vendor_id=vendor_id, **values), commit=commit)
        return await self.update(existing, values, commit=commit)
