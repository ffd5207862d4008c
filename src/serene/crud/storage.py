"""Persistence interface consumed by the request handlers.

Handlers receive a ``Storage`` through the ``get_storage`` dependency and never
import a backing store directly. ``SqlStorage`` is the relational backing;
``MemoryStorage`` keeps everything in dicts for tests.

The store is not a security boundary: lookups by id return rows regardless of
owner, and the guard decides what the principal may see.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from serene.models import Journal, MindfulnessSession, Mood, User


class Storage(ABC):

    # Users

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Case-insensitive username lookup."""

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive email lookup."""

    @abstractmethod
    async def get_user_by_subscription_id(self, subscription_id: str) -> Optional[User]:
        """Resolve a billing subscription id through the secondary index."""

    @abstractmethod
    async def create_user(self, *, username: str, password_hash: str, email: str) -> User:
        """Insert a user. Raises DomainConflict if the username or email is taken."""

    @abstractmethod
    async def update_user_profile(self, user_id: int, fields: Dict[str, Any]) -> User:
        """Change username and/or email. Raises NotFound or DomainConflict."""

    @abstractmethod
    async def update_user_password(self, user_id: int, password_hash: str) -> User:
        ...

    @abstractmethod
    async def set_user_premium(self, user_id: int, is_premium: bool) -> User:
        ...

    @abstractmethod
    async def set_user_billing(
        self, user_id: int, *, customer_id: Optional[str], subscription_id: Optional[str]
    ) -> User:
        """Store billing identifiers and keep the subscription index current."""

    # Journals

    @abstractmethod
    async def get_journal(self, journal_id: int) -> Optional[Journal]:
        ...

    @abstractmethod
    async def list_journals(self, owner_id: int) -> List[Journal]:
        """Journals of one owner, newest first."""

    @abstractmethod
    async def create_journal(self, owner_id: int, data: Dict[str, Any]) -> Journal:
        ...

    @abstractmethod
    async def update_journal(self, journal_id: int, partial: Dict[str, Any]) -> Journal:
        """Merge ``partial``; ``id`` and ``user_id`` are ignored. Raises NotFound."""

    @abstractmethod
    async def delete_journal(self, journal_id: int) -> bool:
        ...

    # Moods

    @abstractmethod
    async def get_mood(self, mood_id: int) -> Optional[Mood]:
        ...

    @abstractmethod
    async def list_moods(self, owner_id: int) -> List[Mood]:
        """Moods of one owner, newest first."""

    @abstractmethod
    async def list_moods_in_range(self, owner_id: int, start: datetime, end: datetime) -> List[Mood]:
        """Moods created within [start, end], oldest first for charting."""

    @abstractmethod
    async def create_mood(self, owner_id: int, data: Dict[str, Any]) -> Mood:
        ...

    # Mindfulness catalog

    @abstractmethod
    async def list_mindfulness_sessions(self, include_premium: bool) -> List[MindfulnessSession]:
        ...

    @abstractmethod
    async def get_mindfulness_session(self, session_id: int) -> Optional[MindfulnessSession]:
        ...

    @abstractmethod
    async def count_mindfulness_sessions(self) -> int:
        ...

    @abstractmethod
    async def add_mindfulness_sessions(self, items: Iterable[Dict[str, Any]]) -> List[MindfulnessSession]:
        ...
