from .base import BaseSchema, TimestampSchema, IDSchema, BaseResponseSchema, MessageResponse
from .user import UserPublic, UserCreate, UserLogin, UserProfileUpdate, PasswordUpdate
from .journal import JournalCreate, JournalUpdate, JournalResponse
from .mood import MoodCreate, MoodResponse
from .mindfulness import MindfulnessSessionCreate, MindfulnessSessionResponse
from .auth import Token, PremiumActivationResponse, WebhookAck
