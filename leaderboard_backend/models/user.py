"""
User and account token models
"""

import enum
import uuid

from sqlalchemy import Column, Enum, ForeignKey, Index, String, Uuid, func
from sqlalchemy.orm import relationship

from leaderboard_backend.core.database import Base, UTCDateTime


class UserRole(enum.Enum):
    """User roles"""
    REGISTERED = "registered"
    CONFIRMED = "confirmed"
    ADMINISTRATOR = "administrator"
    BANNED = "banned"


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(25), nullable=False)
    email = Column(String, nullable=False)
    password = Column(String, nullable=False)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.REGISTERED)

    created_at = Column(UTCDateTime, nullable=False)

    runs = relationship("Run", back_populates="user")
    confirmations = relationship("AccountConfirmation", back_populates="user")
    recoveries = relationship("AccountRecovery", back_populates="user")

    # Usernames and emails are unique regardless of case
    __table_args__ = (
        Index("ix_users_username_lower", func.lower(username), unique=True),
        Index("ix_users_email_lower", func.lower(email), unique=True),
    )


class AccountConfirmation(Base):
    """Single-use token that moves a registered user to confirmed"""
    __tablename__ = "account_confirmations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(UTCDateTime, nullable=False)
    expires_at = Column(UTCDateTime, nullable=False)
    used_at = Column(UTCDateTime, nullable=True)

    user = relationship("User", back_populates="confirmations")


class AccountRecovery(Base):
    """Single-use token that allows a password reset"""
    __tablename__ = "account_recoveries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(UTCDateTime, nullable=False)
    expires_at = Column(UTCDateTime, nullable=False)
    used_at = Column(UTCDateTime, nullable=True)

    user = relationship("User", back_populates="recoveries")
