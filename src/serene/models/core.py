from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import relationship

from .base import Base


class User(Base):
    """Credential store row: login data, premium flag and billing identifiers."""
    __tablename__ = "users"

    username = Column(String(50), nullable=False)
    password = Column(String, nullable=False)
    email = Column(String, nullable=False)
    is_premium = Column(Boolean, default=False, nullable=False)
    billing_customer_id = Column(String, nullable=True)
    billing_subscription_id = Column(String, nullable=True, unique=True, index=True)

    # Relationships
    journals = relationship("Journal", back_populates="user", passive_deletes=True)
    moods = relationship("Mood", back_populates="user", passive_deletes=True)


# case-insensitive uniqueness, enforced by the database
Index("ix_users_username_lower", func.lower(User.username), unique=True)
Index("ix_users_email_lower", func.lower(User.email), unique=True)


class Journal(Base):
    """Journal entry owned by a user."""
    __tablename__ = "journals"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    mood = Column(Integer, nullable=False)  # 1 rough .. 5 great

    user = relationship("User", back_populates="journals")


class Mood(Base):
    """Daily mood rating owned by a user."""
    __tablename__ = "moods"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    note = Column(Text, nullable=True)

    user = relationship("User", back_populates="moods")


class MindfulnessSession(Base):
    """Guided audio session in the global catalog."""
    __tablename__ = "mindfulness_sessions"

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    audio_url = Column(String, nullable=False)
    image_url = Column(String, nullable=False)
    duration = Column(Integer, nullable=False)  # seconds
    is_premium = Column(Boolean, default=False, nullable=False)
