from typing import Annotated, Optional

from pydantic import Field, field_validator

from .base import BaseSchema, BaseResponseSchema, reject_null

# 1 rough, 2 low, 3 okay, 4 good, 5 great
MoodScore = Annotated[int, Field(ge=1, le=5, strict=True)]


class JournalBase(BaseSchema):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    mood: MoodScore


class JournalCreate(JournalBase):
    """Schema for creating a journal entry. The owner comes from the session."""
    pass


class JournalUpdate(BaseSchema):
    """Partial journal update. ``id`` and ``userId`` are not accepted."""
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    mood: Optional[MoodScore] = None

    @field_validator("title", "content", "mood")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)


class JournalResponse(JournalBase, BaseResponseSchema):
    user_id: int
