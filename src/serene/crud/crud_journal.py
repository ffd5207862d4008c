from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from serene.core.errors import NotFound
from serene.crud.base import OwnedCRUDBase
from serene.models.core import Journal as JournalModel
from serene.schemas import JournalCreate, JournalUpdate


class CRUDJournal(OwnedCRUDBase[JournalModel, JournalCreate, JournalUpdate]):
    """CRUD operations for journal entries."""

    async def update_by_id(self, db: AsyncSession, *, id: int, partial: Dict[str, Any]) -> JournalModel:
        db_obj = await self.get(db, id=id)
        if not db_obj:
            raise NotFound("Journal not found")
        return await self.update(db, db_obj=db_obj, obj_in=partial)


journal = CRUDJournal(JournalModel)
