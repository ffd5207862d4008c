from .base import Base
from .core import User, Journal, Mood, MindfulnessSession

__all__ = [
    "Base",
    "User",
    "Journal",
    "Mood",
    "MindfulnessSession",
]
