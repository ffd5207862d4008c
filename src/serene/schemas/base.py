from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with common fields.

    Fields are exposed in camelCase on the wire (``createdAt``, ``isPremium``)
    and accepted in either spelling on input.
    """
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TimestampSchema(BaseSchema):
    """Schema with a creation timestamp."""
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive values; everything is stored in UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class IDSchema(BaseSchema):
    """Schema with ID field."""
    id: int


class BaseResponseSchema(TimestampSchema, IDSchema):
    """Base response schema with ID and timestamp fields."""
    pass


class MessageResponse(BaseSchema):
    message: str


def reject_null(v: Optional[object]) -> object:
    """Partial updates may omit a field but may not null it out."""
    if v is None:
        raise ValueError("may not be null")
    return v
