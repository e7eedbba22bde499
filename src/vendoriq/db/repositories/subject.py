"""Repositories for vendors, assets and asset-vendor relationships."""

from sqlalchemy import select

from vendoriq.db.models import AssetModel, AssetVendorRelationshipModel, VendorModel

from .base import BaseRepository


class VendorRepository(BaseRepository[VendorModel, str]):
    """Vendor access plus industry rating queries."""

    async def list_industry_ratings(self, industry: str) -> list[float]:
        """Ratings of approved vendors in an industry that have one."""
        stmt = select(VendorModel.vendor_rating).where(
            VendorModel.industry == industry,
            VendorModel.status == "approved",
            VendorModel.vendor_rating.is_not(None),
        )
        return [float(r) for r in await self._all(stmt)]


class AssetRepository(BaseRepository[AssetModel, str]):
    pass


class RelationshipRepository(BaseRepository[AssetVendorRelationshipModel, str]):
    pass
