"""Repositories for assessment and risk assessment history."""

from datetime import datetime

from sqlalchemy import or_, select

from vendoriq.db.models import RiskAssessmentModel, VendorAssessmentModel

from .base import BaseRepository


class VendorAssessmentRepository(BaseRepository[VendorAssessmentModel, str]):
    """Questionnaire history of vendors."""

    async def list_for_vendor(
        self, vendor_id: str, limit: int | None, source: str | None = None
    ) -> list[VendorAssessmentModel]:
        """Assessments of a vendor, newest first.

        Both sources unless ``source`` is given; no limit when ``limit`` is None.
        """
        stmt = select(VendorAssessmentModel).where(VendorAssessmentModel.vendor_id == vendor_id)
        if source is not None:
            stmt = stmt.where(VendorAssessmentModel.source == source)
        stmt = stmt.order_by(VendorAssessmentModel.created_at.desc()).limit(limit)
        return await self._all(stmt)


class RiskAssessmentRepository(BaseRepository[RiskAssessmentModel, str]):
    """Computed risk assessments."""

    async def list_for_subject(self, subject_id: str, limit: int) -> list[RiskAssessmentModel]:
        """Risk assessments naming a subject in any id column, newest first."""
        stmt = (
            select(RiskAssessmentModel)
            .where(
                or_(
                    RiskAssessmentModel.asset_id == subject_id,
                    RiskAssessmentModel.vendor_id == subject_id,
                    RiskAssessmentModel.relationship_id == subject_id,
                )
            )
            .order_by(RiskAssessmentModel.assessed_at.desc())
            .limit(limit)
        )
        return await self._all(stmt)

    async def list_for_organization(
        self, organization_id: str, until: datetime
    ) -> list[RiskAssessmentModel]:
        """Risk assessments of an organization up to ``until``, newest first."""
        stmt = (
            select(RiskAssessmentModel)
            .where(
                RiskAssessmentModel.organization_id == organization_id,
                RiskAssessmentModel.assessed_at <= until,
            )
            .order_by(RiskAssessmentModel.assessed_at.desc())
        )
        return await self._all(stmt)
