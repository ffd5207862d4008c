from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from serene.crud.base import OwnedCRUDBase
from serene.models.core import Mood as MoodModel
from serene.schemas import MoodCreate


class CRUDMood(OwnedCRUDBase[MoodModel, MoodCreate, MoodCreate]):
    """CRUD operations for mood ratings. Moods are append-only."""

    async def get_by_owner_in_range(
        self, db: AsyncSession, *, owner_id: int, start: datetime, end: datetime
    ) -> list[MoodModel]:
        """Moods of an owner created within [start, end], oldest first."""
        stmt = (
            select(MoodModel)
            .where(
                MoodModel.user_id == owner_id,
                MoodModel.created_at >= start,
                MoodModel.created_at <= end,
            )
            .order_by(MoodModel.created_at.asc(), MoodModel.id.asc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())


mood = CRUDMood(MoodModel)
