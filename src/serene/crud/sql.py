from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from serene.crud.crud_journal import journal as crud_journal
from serene.crud.crud_mindfulness import mindfulness_session as crud_mindfulness
from serene.crud.crud_mood import mood as crud_mood
from serene.crud.crud_user import user as crud_user
from serene.crud.storage import Storage
from serene.models import Journal, MindfulnessSession, Mood, User


class SqlStorage(Storage):
    """Relational backing bound to one request's database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Users

    async def get_user(self, user_id: int) -> Optional[User]:
        return await crud_user.get(self.db, id=user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await crud_user.get_by_username(self.db, username=username)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await crud_user.get_by_email(self.db, email=email)

    async def get_user_by_subscription_id(self, subscription_id: str) -> Optional[User]:
        return await crud_user.get_by_subscription_id(self.db, subscription_id=subscription_id)

    async def create_user(self, *, username: str, password_hash: str, email: str) -> User:
        return await crud_user.create_user(self.db, username=username, password_hash=password_hash, email=email)

    async def update_user_profile(self, user_id: int, fields: Dict[str, Any]) -> User:
        return await crud_user.update_profile(self.db, user_id=user_id, fields=fields)

    async def update_user_password(self, user_id: int, password_hash: str) -> User:
        return await crud_user.update_password(self.db, user_id=user_id, password_hash=password_hash)

    async def set_user_premium(self, user_id: int, is_premium: bool) -> User:
        return await crud_user.set_premium(self.db, user_id=user_id, is_premium=is_premium)

    async def set_user_billing(
        self, user_id: int, *, customer_id: Optional[str], subscription_id: Optional[str]
    ) -> User:
        return await crud_user.set_billing(
            self.db, user_id=user_id, customer_id=customer_id, subscription_id=subscription_id
        )

    # Journals

    async def get_journal(self, journal_id: int) -> Optional[Journal]:
        return await crud_journal.get(self.db, id=journal_id)

    async def list_journals(self, owner_id: int) -> List[Journal]:
        return await crud_journal.get_by_owner(self.db, owner_id=owner_id)

    async def create_journal(self, owner_id: int, data: Dict[str, Any]) -> Journal:
        return await crud_journal.create(self.db, obj_in=data, user_id=owner_id)

    async def update_journal(self, journal_id: int, partial: Dict[str, Any]) -> Journal:
        return await crud_journal.update_by_id(self.db, id=journal_id, partial=partial)

    async def delete_journal(self, journal_id: int) -> bool:
        return await crud_journal.remove(self.db, id=journal_id)

    # Moods

    async def get_mood(self, mood_id: int) -> Optional[Mood]:
        return await crud_mood.get(self.db, id=mood_id)

    async def list_moods(self, owner_id: int) -> List[Mood]:
        return await crud_mood.get_by_owner(self.db, owner_id=owner_id)

    async def list_moods_in_range(self, owner_id: int, start: datetime, end: datetime) -> List[Mood]:
        return await crud_mood.get_by_owner_in_range(self.db, owner_id=owner_id, start=start, end=end)

    async def create_mood(self, owner_id: int, data: Dict[str, Any]) -> Mood:
        return await crud_mood.create(self.db, obj_in=data, user_id=owner_id)

    # Mindfulness catalog

    async def list_mindfulness_sessions(self, include_premium: bool) -> List[MindfulnessSession]:
        return await crud_mindfulness.get_catalog(self.db, include_premium=include_premium)

    async def get_mindfulness_session(self, session_id: int) -> Optional[MindfulnessSession]:
        return await crud_mindfulness.get(self.db, id=session_id)

    async def count_mindfulness_sessions(self) -> int:
        return await crud_mindfulness.count(self.db)

    async def add_mindfulness_sessions(self, items: Iterable[Dict[str, Any]]) -> List[MindfulnessSession]:
        return await crud_mindfulness.create_many(self.db, items=list(items))
