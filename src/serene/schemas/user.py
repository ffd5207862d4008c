from typing import Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from .base import BaseSchema, BaseResponseSchema, reject_null


class UserPublic(BaseResponseSchema):
    """User as returned to its owner. The password hash never leaves the server."""
    username: str
    email: str
    is_premium: bool = False
    billing_customer_id: Optional[str] = None
    billing_subscription_id: Optional[str] = None


class UserCreate(BaseSchema):
    """Registration payload."""
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)
    email: EmailStr


class UserLogin(BaseSchema):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserProfileUpdate(BaseSchema):
    """Profile change; at least one field must be present."""
    username: Optional[str] = Field(default=None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None

    @field_validator("username", "email")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)


class PasswordUpdate(BaseSchema):
    current_password: str = Field(min_length=6)
    new_password: str = Field(min_length=6)
    confirm_password: str = Field(min_length=6)

    @model_validator(mode="after")
    def passwords_match(self) -> "PasswordUpdate":
        if self.new_password != self.confirm_password:
            raise ValueError("New password and confirm password do not match")
        return self
