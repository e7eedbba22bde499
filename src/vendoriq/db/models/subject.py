"""Assessment subject models: vendors, assets and their relationships."""

from sqlalchemy import Float, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, PortableJSON, TimestampMixin, id_column


class VendorModel(Base, TimestampMixin):
    """A third-party vendor and its latest stored risk attributes."""

    __tablename__ = "vendors"

    vendor_id: Mapped[str] = id_column()
    organization_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    compliance_status: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="approved")

    # Stored scores (0-100)
    risk_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    compliance_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    security_posture_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    vendor_rating: Mapped[float | None] = mapped_column(Float, nullable=True)

    __table_args__ = (
        Index("idx_vendor_organization", "organization_id"),
        Index("idx_vendor_industry_status", "industry", "status"),
    )

    def __repr__(self) -> str:
        return f"<Vendor(id={self.vendor_id}, name={self.name})>"


class AssetModel(Base, TimestampMixin):
    """An organization asset that vendors may have access to."""

    __tablename__ = "assets"

    asset_id: Mapped[str] = id_column()
    organization_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    criticality: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    business_impact: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    data_classification: Mapped[str] = mapped_column(
        String(20), nullable=False, default="internal"
    )
    compliance_requirements: Mapped[list] = mapped_column(
        PortableJSON(), nullable=False, default=list
    )
    security_controls: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)

    __table_args__ = (Index("idx_asset_organization", "organization_id"),)

    def __repr__(self) -> str:
        return f"<Asset(id={self.asset_id}, criticality={self.criticality})>"


class AssetVendorRelationshipModel(Base, TimestampMixin):
    """An asset's dependency on a vendor."""

    __tablename__ = "asset_vendor_relationships"

    relationship_id: Mapped[str] = id_column()
    asset_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("assets.asset_id", ondelete="CASCADE"), nullable=False
    )
    vendor_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vendors.vendor_id", ondelete="CASCADE"), nullable=False
    )
    criticality_to_asset: Mapped[str] = mapped_column(
        String(20), nullable=False, default="medium"
    )
    data_access_level: Mapped[str] = mapped_column(String(20), nullable=False, default="none")
    integration_type: Mapped[str] = mapped_column(String(50), nullable=False, default="api")

    __table_args__ = (
        Index("idx_relationship_asset", "asset_id"),
        Index("idx_relationship_vendor", "vendor_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<AssetVendorRelationship(id={self.relationship_id}, "
            f"asset={self.asset_id}, vendor={self.vendor_id})>"
        )
