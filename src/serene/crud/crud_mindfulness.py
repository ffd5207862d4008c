from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from serene.crud.base import CRUDBase
from serene.models.core import MindfulnessSession as MindfulnessSessionModel
from serene.schemas import MindfulnessSessionCreate


class CRUDMindfulnessSession(
    CRUDBase[MindfulnessSessionModel, MindfulnessSessionCreate, MindfulnessSessionCreate]
):
    """Read access to the mindfulness catalog, plus bulk seeding."""

    async def get_catalog(self, db: AsyncSession, *, include_premium: bool) -> list[MindfulnessSessionModel]:
        stmt = select(MindfulnessSessionModel).order_by(MindfulnessSessionModel.id)
        if not include_premium:
            stmt = stmt.where(MindfulnessSessionModel.is_premium.is_(False))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def create_many(self, db: AsyncSession, *, items: list[dict]) -> list[MindfulnessSessionModel]:
        objs = [MindfulnessSessionModel(**item) for item in items]
        db.add_all(objs)
        await db.commit()
        for obj in objs:
            await db.refresh(obj)
        return objs


mindfulness_session = CRUDMindfulnessSession(MindfulnessSessionModel)
