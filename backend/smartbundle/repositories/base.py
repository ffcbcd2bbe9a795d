"""
Base repository shared by the shop, bundle and analytics repositories.
"""
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from smartbundle.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Common writes and tenant-scoped counting.

    Subclasses set `model`. Repositories flush but never commit; the request
    session commits once the handler returns.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, obj_in: dict[str, Any]) -> ModelType:
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.flush()
        return db_obj

    async def update(
        self,
        db_obj: ModelType,
        obj_in: dict[str, Any],
    ) -> ModelType:
        """Apply a partial update; None values leave the field unchanged."""
        for field, value in obj_in.items():
            if value is not None:
                setattr(db_obj, field, value)
        await self.session.flush()
        return db_obj

    async def count_where(self, *criteria: ColumnElement[bool]) -> int:
        stmt = select(func.count()).select_from(self.model).where(*criteria)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def delete_where(self, model: type[Base], *criteria: ColumnElement[bool]) -> int:
        """Bulk delete rows of any model; returns the number removed."""
        result = await self.session.execute(delete(model).where(*criteria))
        return result.rowcount or 0
