from typing import Optional

from pydantic import Field

from .base import BaseSchema, BaseResponseSchema
from .journal import MoodScore


class MoodCreate(BaseSchema):
    rating: MoodScore
    note: Optional[str] = None


class MoodResponse(BaseResponseSchema):
    user_id: int
    rating: int
    note: Optional[str] = Field(default=None)
