"""
Unit tests for NoteService.
"""

import uuid

import pytest
from fastapi import HTTPException

from conftest import PNG_BYTES, PNG_DATA_URI
from notu.core.schemas.notes import NoteCreate, NoteImageInput, NoteUpdate
from notu.core.services.note_service import NoteService, new_image_id
from notu.core.storage import StorageError


@pytest.fixture
def service(test_session, fake_storage):
    return NoteService(test_session, fake_storage)


@pytest.fixture
async def friend(make_user, test_user, test_session):
    """A user who is friends with test_user."""
    siti = await make_user(name="Siti", email="siti@example.com", friends=[test_user.id])
    test_user.friends = [siti.id]
    await test_session.commit()
    return siti


def test_new_image_ids_are_unique():
    ids = [new_image_id() for _ in range(50)]
    assert len(set(ids)) == 50
    assert all(i.isdigit() for i in ids)


class TestCreateAndGet:
    async def test_create_defaults(self, service, test_user):
        note = await service.create_note(test_user.id, NoteCreate())

        assert note.title == "Untitled"
        assert note.content == ""
        assert note.color == "#E9D5FF"
        assert note.images == []
        assert note.is_public is True
        assert note.likes_count == 0
        assert note.owner_id == test_user.id

    async def test_blank_title_becomes_default(self, service, test_user):
        note = await service.create_note(test_user.id, NoteCreate(title="   "))
        assert note.title == "Untitled"

    async def test_create_uploads_data_uri_images(self, service, test_user, fake_storage):
        note = await service.create_note(
            test_user.id,
            NoteCreate(title="Foto", images=[NoteImageInput(url=PNG_DATA_URI)]),
        )

        assert len(note.images) == 1
        image = note.images[0]
        assert image.url == "https://img.test/fake-1.png"
        assert image.public_id == "fake-1"
        assert image.id
        assert fake_storage.saved["fake-1"] == PNG_BYTES

    async def test_create_rejects_bad_image(self, service, test_user):
        with pytest.raises(HTTPException) as exc_info:
            await service.create_note(
                test_user.id,
                NoteCreate(images=[NoteImageInput(url="data:text/plain;base64,aGFsbw==")]),
            )
        assert exc_info.value.status_code == 400

    async def test_storage_failure_is_bad_gateway(self, service, test_user, fake_storage, monkeypatch):
        async def broken(data, content_type):
            raise StorageError("down")

        monkeypatch.setattr(fake_storage, "_store", broken)

        with pytest.raises(HTTPException) as exc_info:
            await service.upload_image(PNG_DATA_URI)
        assert exc_info.value.status_code == 502
        assert exc_info.value.detail == "Failed to upload image"

    async def test_client_public_ids_ignored(self, service, test_user):
        note = await service.create_note(
            test_user.id,
            NoteCreate(
                images=[
                    NoteImageInput(url="https://img.test/other.png", public_id="someone-elses"),
                    NoteImageInput(url="https://img.test/mine.png", public_id="mine"),
                ]
            ),
        )
        assert note.images[0].public_id is None
        assert note.images[1].public_id is None

    async def test_get_note_owner_only(self, service, test_user, make_user, make_note):
        note = await make_note(test_user)
        other = await make_user(name="Lain")

        assert (await service.get_note(note.id, test_user.id)).id == note.id
        with pytest.raises(HTTPException) as exc_info:
            await service.get_note(note.id, other.id)
        assert exc_info.value.status_code == 404


class TestUpdate:
    async def test_partial_update(self, service, test_user, make_note):
        note = await make_note(test_user, title="Lama", content="isi", color="#FDE68A")

        updated = await service.update_note(note.id, test_user.id, NoteUpdate(content="isi baru"))

        assert updated.title == "Lama"
        assert updated.color == "#FDE68A"
        assert updated.content == "isi baru"

    async def test_archive_via_update(self, service, test_user, make_note):
        note = await make_note(test_user)
        updated = await service.update_note(note.id, test_user.id, NoteUpdate(is_archived=True))
        assert updated.is_archived is True

    async def test_removed_images_are_deleted(self, service, test_user, fake_storage):
        note = await service.create_note(
            test_user.id,
            NoteCreate(images=[NoteImageInput(url=PNG_DATA_URI), NoteImageInput(url=PNG_DATA_URI)]),
        )
        keep = note.images[1]

        updated = await service.update_note(
            note.id,
            test_user.id,
            NoteUpdate(images=[NoteImageInput(id=keep.id, url=keep.url, public_id=keep.public_id)]),
        )

        assert [img.public_id for img in updated.images] == [keep.public_id]
        assert fake_storage.deleted == [note.images[0].public_id]

    async def test_existing_public_id_kept_when_client_omits_it(self, service, test_user):
        note = await service.create_note(test_user.id, NoteCreate(images=[NoteImageInput(url=PNG_DATA_URI)]))
        image = note.images[0]

        updated = await service.update_note(
            note.id, test_user.id, NoteUpdate(images=[NoteImageInput(id=image.id, url=image.url)])
        )
        assert updated.images[0].public_id == image.public_id

    async def test_cannot_delete_another_users_image(self, service, test_user, make_user, fake_storage):
        owner_note = await service.create_note(
            test_user.id, NoteCreate(images=[NoteImageInput(url=PNG_DATA_URI)])
        )
        original = owner_note.images[0]
        other = await make_user(name="Lain")

        # the URL carries the storage id, and the client names it outright
        note = await service.create_note(
            other.id,
            NoteCreate(images=[NoteImageInput(id=original.id, url=original.url, public_id=original.public_id)]),
        )
        assert note.images[0].public_id is None

        await service.update_note(note.id, other.id, NoteUpdate(images=[]))
        await service.delete_note(note.id, other.id, permanent=True)

        assert fake_storage.deleted == []
        assert original.public_id in fake_storage.saved

    async def test_update_missing_note(self, service, test_user):
        with pytest.raises(HTTPException) as exc_info:
            await service.update_note(uuid.uuid4(), test_user.id, NoteUpdate(title="x"))
        assert exc_info.value.status_code == 404


class TestTrash:
    async def test_soft_delete_and_restore(self, service, test_user, make_note):
        note = await make_note(test_user)

        result = await service.delete_note(note.id, test_user.id)
        assert result.message == "Note moved to trash"

        trash = await service.list_user_notes(test_user.id, deleted=True)
        assert [n.id for n in trash.items] == [note.id]
        assert trash.items[0].deleted_at is not None

        result = await service.restore_note(note.id, test_user.id)
        assert result.message == "Note restored successfully"

        active = await service.list_user_notes(test_user.id)
        assert [n.id for n in active.items] == [note.id]
        assert active.items[0].deleted_at is None

    async def test_restore_requires_trashed_note(self, service, test_user, make_note):
        note = await make_note(test_user)
        with pytest.raises(HTTPException) as exc_info:
            await service.restore_note(note.id, test_user.id)
        assert exc_info.value.detail == "Note not found in trash"

    async def test_permanent_delete_removes_images(self, service, test_user, fake_storage):
        note = await service.create_note(test_user.id, NoteCreate(images=[NoteImageInput(url=PNG_DATA_URI)]))

        result = await service.delete_note(note.id, test_user.id, permanent=True)

        assert result.message == "Note permanently deleted"
        assert fake_storage.deleted == ["fake-1"]
        with pytest.raises(HTTPException):
            await service.get_note(note.id, test_user.id)

    async def test_delete_survives_storage_errors(self, service, test_user, fake_storage, monkeypatch):
        note = await service.create_note(test_user.id, NoteCreate(images=[NoteImageInput(url=PNG_DATA_URI)]))

        async def broken(public_id):
            raise StorageError("down")

        monkeypatch.setattr(fake_storage, "delete", broken)

        result = await service.delete_note(note.id, test_user.id, permanent=True)
        assert result.message == "Note permanently deleted"

    async def test_empty_trash(self, service, test_user, make_note, fake_storage):
        await make_note(
            test_user,
            is_deleted=True,
            images=[{"id": "1", "url": "https://img.test/a.png", "public_id": "a"}],
        )
        await make_note(test_user, is_deleted=True)
        kept = await make_note(test_user)

        result = await service.empty_trash(test_user.id)

        assert result.message == "Trash emptied successfully"
        assert result.deleted_count == 2
        assert fake_storage.deleted == ["a"]
        remaining = await service.list_user_notes(test_user.id)
        assert [n.id for n in remaining.items] == [kept.id]


class TestListing:
    async def test_page_bounds_fall_back_to_defaults(self, service, test_user, make_note):
        await make_note(test_user)

        result = await service.list_user_notes(test_user.id, page=0, per_page=1000)
        assert result.page == 1
        assert result.per_page == 50
        assert result.total == 1


class TestSocial:
    async def test_toggle_like(self, service, test_user, friend, make_note):
        note = await make_note(friend)

        liked = await service.toggle_like(note.id, test_user.id)
        assert liked.liked is True
        assert liked.likes_count == 1

        unliked = await service.toggle_like(note.id, test_user.id)
        assert unliked.liked is False
        assert unliked.likes_count == 0

    async def test_cannot_like_private_note(self, service, test_user, friend, make_note):
        note = await make_note(friend, is_public=False)
        with pytest.raises(HTTPException) as exc_info:
            await service.toggle_like(note.id, test_user.id)
        assert exc_info.value.status_code == 403

    async def test_owner_can_like_own_private_note(self, service, test_user, make_note):
        note = await make_note(test_user, is_public=False)
        assert (await service.toggle_like(note.id, test_user.id)).liked is True

    async def test_duplicate_note(self, service, test_user, friend, make_note, fake_storage):
        original = await make_note(
            friend,
            title="Resep",
            is_pinned=True,
            likes=[friend.id],
            images=[{"id": "1", "url": "https://img.test/a.png", "public_id": "a"}],
        )

        copy = await service.duplicate_note(original.id, test_user.id)

        assert copy.id != original.id
        assert copy.owner_id == test_user.id
        assert copy.title == "Resep (Copy)"
        assert copy.is_pinned is False
        assert copy.likes_count == 0
        assert copy.images[0].url == "https://img.test/a.png"
        assert copy.images[0].public_id is None

        # deleting the copy leaves the original's image alone
        await service.delete_note(copy.id, test_user.id, permanent=True)
        assert fake_storage.deleted == []

    async def test_duplicate_private_note_of_stranger(self, service, test_user, make_user, make_note):
        stranger = await make_user(name="Asing")
        note = await make_note(stranger, is_public=False)

        with pytest.raises(HTTPException) as exc_info:
            await service.duplicate_note(note.id, test_user.id)
        assert exc_info.value.detail == "Cannot duplicate private note"

    async def test_set_visibility(self, service, test_user, make_note):
        note = await make_note(test_user)

        result = await service.set_visibility(note.id, test_user.id, False)
        assert result.message == "Note visibility updated"
        assert result.is_public is False

    async def test_set_visibility_not_owner(self, service, friend, test_user, make_note):
        note = await make_note(friend)
        with pytest.raises(HTTPException) as exc_info:
            await service.set_visibility(note.id, test_user.id, False)
        assert exc_info.value.status_code == 404


class TestProfileNotes:
    async def test_friend_sees_public_active_notes(self, service, test_user, friend, make_note):
        public = await make_note(friend, title="Publik", likes=[test_user.id])
        await make_note(friend, title="Pribadi", is_public=False)
        await make_note(friend, title="Arsip", is_archived=True)

        result = await service.list_profile_notes(test_user.id, friend.id)

        assert [n.id for n in result.items] == [public.id]
        assert result.items[0].is_liked is True
        assert result.items[0].is_own is False

    async def test_own_profile_includes_private(self, service, test_user, make_note):
        await make_note(test_user, is_public=False)
        result = await service.list_profile_notes(test_user.id, test_user.id)
        assert result.total == 1
        assert result.items[0].is_own is True

    async def test_stranger_is_refused(self, service, test_user, make_user):
        stranger = await make_user(name="Asing")
        with pytest.raises(HTTPException) as exc_info:
            await service.list_profile_notes(test_user.id, stranger.id)
        assert exc_info.value.detail == "Not authorized to view notes"

    async def test_private_friend_is_refused(self, service, test_user, friend, test_session):
        friend.is_private = True
        await test_session.commit()

        with pytest.raises(HTTPException) as exc_info:
            await service.list_profile_notes(test_user.id, friend.id)
        assert exc_info.value.detail == "User profile is private"
