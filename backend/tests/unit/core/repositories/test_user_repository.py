"""
Unit tests for UserRepository.
"""

import uuid

from notu.core.repositories.user_repository import UserRepository


class TestUserRepository:
    """Test UserRepository functionality."""

    async def test_create_and_get_user(self, test_session):
        repo = UserRepository(test_session)
        user = await repo.create_user(
            {"email": "siti@example.com", "name": "Siti", "password_hash": "hashed"}
        )

        assert isinstance(user.id, uuid.UUID)
        assert (await repo.get_by_id(user.id)).email == "siti@example.com"
        assert await repo.get_by_id(uuid.uuid4()) is None

    async def test_get_by_email_ignores_case(self, test_session, test_user):
        repo = UserRepository(test_session)

        found = await repo.get_by_email("  BUDI@example.com ")
        assert found is not None
        assert found.id == test_user.id
        assert await repo.get_by_email("nobody@example.com") is None

    async def test_is_email_taken(self, test_session, test_user):
        repo = UserRepository(test_session)
        assert await repo.is_email_taken("Budi@Example.com") is True
        assert await repo.is_email_taken("free@example.com") is False

    async def test_get_by_ids_ordered_by_name(self, test_session, make_user):
        repo = UserRepository(test_session)
        zaki = await make_user(name="Zaki")
        ani = await make_user(name="Ani")

        users = await repo.get_by_ids([zaki.id, uuid.uuid4(), ani.id])
        assert [u.name for u in users] == ["Ani", "Zaki"]
        assert await repo.get_by_ids([]) == []

    async def test_update_user(self, test_session, test_user):
        repo = UserRepository(test_session)

        updated = await repo.update_user(test_user.id, {"bio": "Halo", "is_private": True})
        assert updated.bio == "Halo"
        assert updated.is_private is True
        assert await repo.update_user(uuid.uuid4(), {"bio": "x"}) is None

    async def test_save_multiple_users(self, test_session, make_user):
        repo = UserRepository(test_session)
        a = await make_user(name="A")
        b = await make_user(name="B")

        a.friends = [b.id]
        b.friends = [a.id]
        await repo.save(a, b)

        assert (await repo.get_by_id(a.id)).friends == [b.id]
        assert (await repo.get_by_id(b.id)).friends == [a.id]

    async def test_search_users(self, test_session, make_user, test_user):
        repo = UserRepository(test_session)
        await make_user(name="Budiman", email="budiman@example.com")
        await make_user(name="Citra", email="citra.budi@example.com")
        await make_user(name="Dewi", email="dewi@example.com")

        results = await repo.search_users("BUDI", exclude_id=test_user.id)
        assert [u.name for u in results] == ["Budiman", "Citra"]

    async def test_search_users_escapes_wildcards(self, test_session, make_user, test_user):
        repo = UserRepository(test_session)
        await make_user(name="Eka")

        assert await repo.search_users("%", exclude_id=test_user.id) == []

    async def test_search_users_limit(self, test_session, make_user, test_user):
        repo = UserRepository(test_session)
        for i in range(5):
            await make_user(name=f"Teman {i}")

        assert len(await repo.search_users("teman", exclude_id=test_user.id, limit=3)) == 3

