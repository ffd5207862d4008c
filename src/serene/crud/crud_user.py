import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from serene.core.errors import DomainConflict, NotFound
from serene.crud.base import CRUDBase
from serene.models.core import User as UserModel
from serene.schemas import UserCreate, UserProfileUpdate

logger = logging.getLogger(__name__)


def conflict_from_integrity_error(exc: IntegrityError) -> DomainConflict:
    """Translate a unique-index violation on users into a readable conflict."""
    detail = str(exc.orig).lower()
    if "email" in detail:
        return DomainConflict("Email already exists")
    if "subscription" in detail:
        return DomainConflict("Subscription is already linked to another user")
    return DomainConflict("Username already exists")


class CRUDUser(CRUDBase[UserModel, UserCreate, UserProfileUpdate]):
    """CRUD operations for user management."""

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[UserModel]:
        """Get a user by email, ignoring case."""
        stmt = select(UserModel).where(func.lower(UserModel.email) == email.lower())
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[UserModel]:
        """Get a user by username, ignoring case."""
        stmt = select(UserModel).where(func.lower(UserModel.username) == username.lower())
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_subscription_id(self, db: AsyncSession, *, subscription_id: str) -> Optional[UserModel]:
        """Get a user by billing subscription id (indexed column)."""
        stmt = select(UserModel).where(UserModel.billing_subscription_id == subscription_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def _commit_user(self, db: AsyncSession, user: UserModel) -> UserModel:
        db.add(user)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise conflict_from_integrity_error(e)
        await db.refresh(user)
        return user

    async def create_user(self, db: AsyncSession, *, username: str, password_hash: str, email: str) -> UserModel:
        """Create a user; the unique indexes settle concurrent registrations."""
        if await self.get_by_username(db, username=username):
            raise DomainConflict("Username already exists")
        if await self.get_by_email(db, email=email):
            raise DomainConflict("Email already exists")
        user = UserModel(username=username, password=password_hash, email=email, is_premium=False)
        return await self._commit_user(db, user)

    async def _get_or_404(self, db: AsyncSession, user_id: int) -> UserModel:
        user = await self.get(db, id=user_id)
        if not user:
            raise NotFound("User not found")
        return user

    async def update_profile(self, db: AsyncSession, *, user_id: int, fields: Dict[str, Any]) -> UserModel:
        user = await self._get_or_404(db, user_id)
        username = fields.get("username")
        if username is not None and username.lower() != user.username.lower():
            if await self.get_by_username(db, username=username):
                raise DomainConflict("Username already exists")
        email = fields.get("email")
        if email is not None and email.lower() != user.email.lower():
            if await self.get_by_email(db, email=email):
                raise DomainConflict("Email already exists")
        if username is not None:
            user.username = username
        if email is not None:
            user.email = email
        return await self._commit_user(db, user)

    async def update_password(self, db: AsyncSession, *, user_id: int, password_hash: str) -> UserModel:
        user = await self._get_or_404(db, user_id)
        user.password = password_hash
        return await self._commit_user(db, user)

    async def set_premium(self, db: AsyncSession, *, user_id: int, is_premium: bool) -> UserModel:
        user = await self._get_or_404(db, user_id)
        user.is_premium = is_premium
        return await self._commit_user(db, user)

    async def set_billing(
        self,
        db: AsyncSession,
        *,
        user_id: int,
        customer_id: Optional[str],
        subscription_id: Optional[str],
    ) -> UserModel:
        user = await self._get_or_404(db, user_id)
        if subscription_id is not None:
            holder = await self.get_by_subscription_id(db, subscription_id=subscription_id)
            if holder is not None and holder.id != user.id:
                raise DomainConflict("Subscription is already linked to another user")
        user.billing_customer_id = customer_id
        user.billing_subscription_id = subscription_id
        return await self._commit_user(db, user)


user = CRUDUser(UserModel)
