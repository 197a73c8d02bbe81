"""
User model for authentication and the friends graph.
"""

import uuid
from enum import Enum
from typing import List, Optional

from sqlalchemy import Boolean, CheckConstraint, Index, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel
from .types import GUIDListType


class AuthProvider(str, Enum):
    """How the account signs in."""

    EMAIL = "email"
    GOOGLE = "google"


class User(BaseModel):
    """User account with email/password or Google sign-in."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # null for accounts created through Google sign-in
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar: Mapped[str] = mapped_column(Text, default="", nullable=False)
    bio: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    is_private: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    google_id: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    auth_provider: Mapped[str] = mapped_column(
        String(20), default=AuthProvider.EMAIL.value, nullable=False
    )
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Friends graph. Symmetry is kept by the service layer writing both users.
    friends: Mapped[List[uuid.UUID]] = mapped_column(GUIDListType, default=list, nullable=False)
    friend_requests: Mapped[List[uuid.UUID]] = mapped_column(
        GUIDListType, default=list, nullable=False
    )  # incoming
    sent_friend_requests: Mapped[List[uuid.UUID]] = mapped_column(
        GUIDListType, default=list, nullable=False
    )  # outgoing

    __table_args__ = (
        CheckConstraint("length(bio) <= 200", name="ck_users_bio_len"),
        CheckConstraint("auth_provider IN ('email', 'google')", name="ck_users_auth_provider"),
        Index("idx_users_email", "email"),
        Index("idx_users_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<User(email='{self.email}')>"

    @classmethod
    def normalize_email(cls, email: str) -> str:
        """Lower-case and trim an email address."""
        clean = email.strip().lower()
        if not clean:
            raise ValueError("Email cannot be empty")
        return clean

    @property
    def friends_count(self) -> int:
        return len(self.friends or [])

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)

    def is_friend_with(self, user_id: uuid.UUID) -> bool:
        return user_id in (self.friends or [])

    def has_sent_request_to(self, user_id: uuid.UUID) -> bool:
        return user_id in (self.sent_friend_requests or [])

    def has_request_from(self, user_id: uuid.UUID) -> bool:
        return user_id in (self.friend_requests or [])


# Give new instances empty lists right away, not only after flush
@event.listens_for(User, "init", propagate=True)
def _init_user_lists(target, args, kwargs):
    for attr in ("friends", "friend_requests", "sent_friend_requests"):
        if attr not in kwargs:
            setattr(target, attr, [])


@event.listens_for(User, "before_insert", propagate=True)
def _normalize_email_before_insert(mapper, connection, target: User):
    target.email = User.normalize_email(target.email)


@event.listens_for(User, "before_update", propagate=True)
def _normalize_email_before_update(mapper, connection, target: User):
    target.email = User.normalize_email(target.email)
