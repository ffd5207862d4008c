from pydantic import BaseModel

from .base import BaseSchema


class Token(BaseModel):
    """Token schema for OAuth2 password-flow clients."""
    access_token: str
    token_type: str = "bearer"


class PremiumActivationResponse(BaseSchema):
    success: bool
    message: str


class WebhookAck(BaseSchema):
    received: bool = True
