"""Base repository for the risk tables.

Each repository wraps one ORM model and a caller-owned session. The
caller decides transaction boundaries; ``commit=False`` only flushes so
several writes can share one commit.

Usage:
    from vendoriq.db.repositories.base import BaseRepository

    class VendorRepository(BaseRepository[VendorModel, str]):
        pass

    vendor = await VendorRepository(db).get(vendor_id)
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from vendoriq.db.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)
PKType = TypeVar("PKType", bound=int | str)


class BaseRepository(Generic[ModelType, PKType]):
    """Generic keyed access to one model.

    The model class is taken from the first generic argument of the
    subclass, so ``class RatingRepository(BaseRepository[VendorRatingModel, str])``
    needs no further wiring.
    """

    model: type[ModelType]

    def __init__(self, db: AsyncSession):
        self.db = db

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", ()):
            args = getattr(base, "__args__", ())
            if args and isinstance(args[0], type) and issubclass(args[0], Base):
                cls.model = args[0]
                break

    async def get(self, pk: PKType) -> ModelType | None:
        """Row with the given primary key, or None."""
        return await self.db.get(self.model, pk)

    async def create(self, obj: ModelType, *, commit: bool = True) -> ModelType:
        """Insert one row."""
        self.db.add(obj)
        await self._finish(commit)
        return obj

    async def create_many(
        self, objs: Sequence[ModelType], *, commit: bool = True
    ) -> list[ModelType]:
        """Insert several rows in one flush."""
        self.db.add_all(objs)
        await self._finish(commit)
        return list(objs)

    async def update(
        self, obj: ModelType, values: dict[str, Any], *, commit: bool = True
    ) -> ModelType:
        """Overwrite mapped attributes of a loaded row; unknown keys are ignored."""
        columns = self.model.__mapper__.columns.keys()
        for name, value in values.items():
            if name in columns:
                setattr(obj, name, value)
        await self._finish(commit)
        return obj

    async def _all(self, stmt: Select) -> list[Any]:
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _finish(self, commit: bool) -> None:
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()
