from datetime import datetime, timezone
from itertools import count
from typing import Any, Dict, Iterable, List, Optional

from serene.core.errors import DomainConflict, NotFound
from serene.crud.base import PROTECTED_FIELDS
from serene.crud.storage import Storage
from serene.models import Journal, MindfulnessSession, Mood, User
from serene.models.base import utcnow


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class MemoryStorage(Storage):
    """Dict-backed store for tests and local experiments.

    Rows are plain (detached) model instances. Every mutation runs without
    awaiting in between, so on one event loop a check-then-insert cannot
    interleave with another request.
    """

    def __init__(self, clock=utcnow):
        self.clock = clock
        self.users: Dict[int, User] = {}
        self.journals: Dict[int, Journal] = {}
        self.moods: Dict[int, Mood] = {}
        self.mindfulness_sessions: Dict[int, MindfulnessSession] = {}
        # subscription id -> user id
        self.subscription_index: Dict[str, int] = {}
        self._user_ids = count(1)
        self._journal_ids = count(1)
        self._mood_ids = count(1)
        self._session_ids = count(1)

    # Users

    async def get_user(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def _find_user(self, attr: str, value: str) -> Optional[User]:
        value = value.lower()
        return next((u for u in self.users.values() if getattr(u, attr).lower() == value), None)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return self._find_user("username", username)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return self._find_user("email", email)

    async def get_user_by_subscription_id(self, subscription_id: str) -> Optional[User]:
        user_id = self.subscription_index.get(subscription_id)
        return self.users.get(user_id) if user_id is not None else None

    async def create_user(self, *, username: str, password_hash: str, email: str) -> User:
        if self._find_user("username", username):
            raise DomainConflict("Username already exists")
        if self._find_user("email", email):
            raise DomainConflict("Email already exists")
        user = User(
            id=next(self._user_ids),
            username=username,
            password=password_hash,
            email=email,
            is_premium=False,
            billing_customer_id=None,
            billing_subscription_id=None,
            created_at=self.clock(),
        )
        self.users[user.id] = user
        return user

    def _require_user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    async def update_user_profile(self, user_id: int, fields: Dict[str, Any]) -> User:
        user = self._require_user(user_id)
        for attr in ("username", "email"):
            value = fields.get(attr)
            if value is None:
                continue
            holder = self._find_user(attr, value)
            if holder is not None and holder.id != user.id:
                raise DomainConflict(f"{attr.capitalize()} already exists")
        for attr in ("username", "email"):
            if fields.get(attr) is not None:
                setattr(user, attr, fields[attr])
        return user

    async def update_user_password(self, user_id: int, password_hash: str) -> User:
        user = self._require_user(user_id)
        user.password = password_hash
        return user

    async def set_user_premium(self, user_id: int, is_premium: bool) -> User:
        user = self._require_user(user_id)
        user.is_premium = is_premium
        return user

    async def set_user_billing(
        self, user_id: int, *, customer_id: Optional[str], subscription_id: Optional[str]
    ) -> User:
        user = self._require_user(user_id)
        if subscription_id is not None:
            holder_id = self.subscription_index.get(subscription_id)
            if holder_id is not None and holder_id != user.id:
                raise DomainConflict("Subscription is already linked to another user")
        if user.billing_subscription_id is not None:
            self.subscription_index.pop(user.billing_subscription_id, None)
        user.billing_customer_id = customer_id
        user.billing_subscription_id = subscription_id
        if subscription_id is not None:
            self.subscription_index[subscription_id] = user.id
        return user

    # Journals

    async def get_journal(self, journal_id: int) -> Optional[Journal]:
        return self.journals.get(journal_id)

    async def list_journals(self, owner_id: int) -> List[Journal]:
        rows = [j for j in self.journals.values() if j.user_id == owner_id]
        return sorted(rows, key=lambda j: (_as_utc(j.created_at), j.id), reverse=True)

    async def create_journal(self, owner_id: int, data: Dict[str, Any]) -> Journal:
        journal = Journal(
            id=next(self._journal_ids),
            user_id=owner_id,
            title=data["title"],
            content=data["content"],
            mood=data["mood"],
            created_at=self.clock(),
        )
        self.journals[journal.id] = journal
        return journal

    async def update_journal(self, journal_id: int, partial: Dict[str, Any]) -> Journal:
        journal = self.journals.get(journal_id)
        if journal is None:
            raise NotFound("Journal not found")
        for field, value in partial.items():
            if field not in PROTECTED_FIELDS:
                setattr(journal, field, value)
        return journal

    async def delete_journal(self, journal_id: int) -> bool:
        return self.journals.pop(journal_id, None) is not None

    # Moods

    async def get_mood(self, mood_id: int) -> Optional[Mood]:
        return self.moods.get(mood_id)

    async def list_moods(self, owner_id: int) -> List[Mood]:
        rows = [m for m in self.moods.values() if m.user_id == owner_id]
        return sorted(rows, key=lambda m: (_as_utc(m.created_at), m.id), reverse=True)

    async def list_moods_in_range(self, owner_id: int, start: datetime, end: datetime) -> List[Mood]:
        start, end = _as_utc(start), _as_utc(end)
        rows = [
            m for m in self.moods.values()
            if m.user_id == owner_id and start <= _as_utc(m.created_at) <= end
        ]
        return sorted(rows, key=lambda m: (_as_utc(m.created_at), m.id))

    async def create_mood(self, owner_id: int, data: Dict[str, Any]) -> Mood:
        mood = Mood(
            id=next(self._mood_ids),
            user_id=owner_id,
            rating=data["rating"],
            note=data.get("note"),
            created_at=self.clock(),
        )
        self.moods[mood.id] = mood
        return mood

    # Mindfulness catalog

    async def list_mindfulness_sessions(self, include_premium: bool) -> List[MindfulnessSession]:
        sessions = sorted(self.mindfulness_sessions.values(), key=lambda s: s.id)
        if include_premium:
            return sessions
        return [s for s in sessions if not s.is_premium]

    async def get_mindfulness_session(self, session_id: int) -> Optional[MindfulnessSession]:
        return self.mindfulness_sessions.get(session_id)

    async def count_mindfulness_sessions(self) -> int:
        return len(self.mindfulness_sessions)

    async def add_mindfulness_sessions(self, items: Iterable[Dict[str, Any]]) -> List[MindfulnessSession]:
        created = []
        for item in items:
            session = MindfulnessSession(id=next(self._session_ids), created_at=self.clock(), **item)
            self.mindfulness_sessions[session.id] = session
            created.append(session)
        return created
