import logging
from typing import Optional

from serene.core.errors import DomainConflict, Unauthenticated, ValidationFailed
from serene.core.security import hash_password, verify_password
from serene.crud.storage import Storage
from serene.models import User
from serene.schemas import PasswordUpdate, UserCreate, UserProfileUpdate


class AuthService:
    """Registration, login and credential changes against a ``Storage``."""

    def __init__(self, storage: Storage):
        self.storage = storage
        self.logger = logging.getLogger(__name__)

    async def register_user(self, data: UserCreate) -> User:
        """Register a new user.

        Args:
            data: Validated registration payload

        Returns:
            User: The persisted user (not premium)

        Raises:
            DomainConflict: If the username or email is already taken
        """
        user = await self.storage.create_user(
            username=data.username,
            password_hash=hash_password(data.password),
            email=data.email,
        )
        self.logger.info(f"Registered user {user.id} ({user.username})")
        return user

    async def authenticate_user(self, username: str, password: str) -> User:
        """Check credentials. The error does not reveal whether the account exists."""
        user = await self.storage.get_user_by_username(username)
        if user is None or not verify_password(password, user.password):
            self.logger.info(f"Failed login for username {username!r}")
            raise Unauthenticated("Invalid username or password")
        return user

    async def update_profile(self, user: User, data: UserProfileUpdate) -> User:
        """Change username and/or email of ``user``.

        Raises:
            ValidationFailed: If neither field is given
            DomainConflict: If the new username or email belongs to someone else
        """
        fields = data.model_dump(exclude_unset=True, exclude_none=True)
        if not fields:
            raise ValidationFailed("No fields to update")
        updated = await self.storage.update_user_profile(user.id, fields)
        self.logger.info(f"Updated profile of user {user.id}: {sorted(fields)}")
        return updated

    async def change_password(self, user: User, data: PasswordUpdate) -> User:
        """Replace the password after verifying the current one.

        Raises:
            DomainConflict: If the current password does not match
        """
        current: Optional[User] = await self.storage.get_user(user.id)
        if current is None or not verify_password(data.current_password, current.password):
            raise DomainConflict("Current password is incorrect")
        updated = await self.storage.update_user_password(user.id, hash_password(data.new_password))
        self.logger.info(f"Password changed for user {user.id}")
        return updated
