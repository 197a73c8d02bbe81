"""
Unit tests for User model.
"""

import uuid
from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from notu.core.models import AuthProvider, User


class TestUserModel:
    """Test User model functionality."""

    async def test_create_user(self, test_session):
        user = User(email="Budi@Example.com ", name="Budi", password_hash="hashed")

        test_session.add(user)
        await test_session.commit()
        await test_session.refresh(user)

        assert isinstance(user.id, uuid.UUID)
        # normalized on insert
        assert user.email == "budi@example.com"
        assert user.name == "Budi"
        assert isinstance(user.created_at, datetime)
        assert isinstance(user.updated_at, datetime)

    async def test_user_defaults(self, test_session):
        user = User(email="minimal@example.com", name="Minimal")

        test_session.add(user)
        await test_session.commit()
        await test_session.refresh(user)

        assert user.password_hash is None
        assert user.avatar == ""
        assert user.bio == ""
        assert user.is_private is False
        assert user.google_id is None
        assert user.auth_provider == AuthProvider.EMAIL.value
        assert user.refresh_token is None
        assert user.friends == []
        assert user.friend_requests == []
        assert user.sent_friend_requests == []

    def test_lists_available_before_flush(self):
        user = User(email="fresh@example.com", name="Fresh")
        assert user.friends == []
        assert user.friends_count == 0

    async def test_email_unique(self, test_session):
        test_session.add(User(email="dup@example.com", name="One"))
        await test_session.commit()

        test_session.add(User(email="DUP@example.com", name="Two"))
        with pytest.raises(IntegrityError):
            await test_session.commit()

    async def test_friend_lists_roundtrip(self, test_session):
        friend_id = uuid.uuid4()
        requester_id = uuid.uuid4()
        user = User(
            email="graph@example.com",
            name="Graph",
            friends=[friend_id],
            friend_requests=[requester_id],
        )
        test_session.add(user)
        await test_session.commit()
        await test_session.refresh(user)

        assert user.friends == [friend_id]
        assert user.is_friend_with(friend_id)
        assert user.has_request_from(requester_id)
        assert not user.has_sent_request_to(requester_id)
        assert user.friends_count == 1

    async def test_reassigned_list_is_persisted(self, test_session):
        user = User(email="reassign@example.com", name="Reassign")
        test_session.add(user)
        await test_session.commit()

        other = uuid.uuid4()
        user.sent_friend_requests = user.sent_friend_requests + [other]
        await test_session.commit()
        await test_session.refresh(user)

        assert user.sent_friend_requests == [other]

    def test_normalize_email(self):
        assert User.normalize_email("  Siti@Mail.COM ") == "siti@mail.com"
        with pytest.raises(ValueError):
            User.normalize_email("   ")

    def test_has_password(self):
        assert User(email="a@b.c", name="A", password_hash="x").has_password
        assert not User(email="a@b.c", name="A").has_password

    def test_user_repr(self):
        assert repr(User(email="repr@example.com", name="Repr")) == "<User(email='repr@example.com')>"
