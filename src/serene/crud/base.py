from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from serene.models.base import Base

SQLModelType = TypeVar("SQLModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

# never writable through a generic update
PROTECTED_FIELDS = frozenset({"id", "user_id", "created_at"})


class CRUDBase(Generic[SQLModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, sql_model: Type[SQLModelType]):
        """
        CRUD object with default methods to Create, Read, Update, Delete (CRUD).
        **Parameters**
        * `sql_model`: A SQLAlchemy model class
        """
        self.sql_model = sql_model

    @staticmethod
    def _as_dict(obj_in: Union[BaseModel, Dict[str, Any]], **kwargs) -> Dict[str, Any]:
        if isinstance(obj_in, BaseModel):
            return obj_in.model_dump(**kwargs)
        return dict(obj_in)

    async def count(self, db: AsyncSession) -> int:
        """Count all objects."""
        stmt = select(func.count()).select_from(self.sql_model)
        result = await db.execute(stmt)
        return result.scalar_one()

    async def get(self, db: AsyncSession, *, id: int) -> Optional[SQLModelType]:
        """Get a single object by ID."""
        return await db.get(self.sql_model, id)

    async def create(
        self, db: AsyncSession, *, obj_in: Union[CreateSchemaType, Dict[str, Any]], **extra: Any
    ) -> SQLModelType:
        """Create a new object."""
        obj_in_data = self._as_dict(obj_in)
        obj_in_data.update(extra)
        db_obj = self.sql_model(**obj_in_data)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: SQLModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
    ) -> SQLModelType:
        """Merge the set fields of ``obj_in`` into ``db_obj``."""
        update_data = self._as_dict(obj_in, exclude_unset=True)
        for field, value in update_data.items():
            if field in PROTECTED_FIELDS:
                continue
            setattr(db_obj, field, value)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def remove(self, db: AsyncSession, *, id: int) -> bool:
        """Remove an object. Returns False when there was nothing to remove."""
        obj = await self.get(db, id=id)
        if not obj:
            return False
        await db.delete(obj)
        await db.commit()
        return True


class OwnedCRUDBase(CRUDBase[SQLModelType, CreateSchemaType, UpdateSchemaType]):
    """CRUD for rows carrying a ``user_id`` owner reference."""

    async def get_by_owner(self, db: AsyncSession, *, owner_id: int) -> List[SQLModelType]:
        """Get all rows for an owner, newest first."""
        stmt = (
            select(self.sql_model)
            .where(self.sql_model.user_id == owner_id)
            .order_by(self.sql_model.created_at.desc(), self.sql_model.id.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())
