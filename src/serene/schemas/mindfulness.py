from pydantic import Field

from .base import BaseSchema, BaseResponseSchema


class MindfulnessSessionBase(BaseSchema):
    title: str
    description: str
    audio_url: str
    image_url: str
    duration: int = Field(gt=0, description="Length in seconds")
    is_premium: bool = False


class MindfulnessSessionCreate(MindfulnessSessionBase):
    """Catalog entry as read from the seed file."""
    pass


class MindfulnessSessionResponse(MindfulnessSessionBase, BaseResponseSchema):
    pass
