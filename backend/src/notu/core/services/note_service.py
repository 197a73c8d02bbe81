"""Note service implementation."""

import logging
import time
from datetime import datetime, timezone
from typing import Awaitable, Dict, List, Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..models.note import DEFAULT_COLOR, DEFAULT_TITLE, Note
from ..repositories.note_repository import NoteRepository
from ..repositories.user_repository import UserRepository
from ..schemas.common import MessageResponse
from ..schemas.notes import (
    EmptyTrashResponse,
    LikeResponse,
    NoteCreate,
    NoteImage,
    NoteImageInput,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    UserNoteItem,
    UserNoteListResponse,
    VisibilityResponse,
)
from ..storage import ImageStorage, InvalidImageError, StorageError, StoredImage, is_data_uri
from .interfaces import INoteService

logger = logging.getLogger(__name__)


_last_image_id = 0


def new_image_id() -> str:
    """Millisecond timestamp, the id format clients already use.

    Bumped past the previous id so images added in the same millisecond
    still get distinct ids.
    """
    global _last_image_id
    _last_image_id = max(int(time.time() * 1000), _last_image_id + 1)
    return str(_last_image_id)


def _title_or_default(title: Optional[str]) -> str:
    return title if title and title.strip() else DEFAULT_TITLE


class NoteService(INoteService):
    """Note service implementation."""

    def __init__(self, session: AsyncSession, storage: ImageStorage):
        self.session = session
        self.note_repo = NoteRepository(session)
        # Used for friendship checks on other users' notes
        self.user_repo = UserRepository(session)
        self.storage = storage
        self.settings = get_settings()

    # -- images --------------------------------------------------------

    async def _upload(self, upload: Awaitable[StoredImage]) -> StoredImage:
        try:
            return await upload
        except InvalidImageError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except StorageError as e:
            logger.error(f"Image upload failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to upload image"
            )

    async def _delete_images(self, public_ids: List[str]) -> None:
        """Best effort; a storage hiccup must not keep a note alive."""
        for public_id in public_ids:
            try:
                await self.storage.delete(public_id)
            except (StorageError, InvalidImageError) as e:
                logger.warning(f"Failed to delete image {public_id}: {e}")

    async def _store_images(
        self, images: List[NoteImageInput], existing: Optional[List[Dict]] = None
    ) -> List[Dict]:
        """Upload data-URI images and normalise the rest.

        Storage ids come from uploads or from the note being edited. Ids sent
        by the client are ignored, so a note can never claim an image it did
        not upload.
        """
        known = {img["id"]: img.get("public_id") for img in (existing or [])}
        stored = []
        for img in images:
            image_id = img.id or new_image_id()
            if is_data_uri(img.url):
                saved = await self._upload(self.storage.upload_data_uri(img.url))
                stored.append({"id": image_id, "url": saved.url, "public_id": saved.public_id})
                continue

            stored.append({"id": image_id, "url": img.url, "public_id": known.get(image_id)})
        return stored

    async def upload_image(self, data_uri: str) -> NoteImage:
        if not data_uri:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No image provided")
        saved = await self._upload(self.storage.upload_data_uri(data_uri))
        return NoteImage(id=new_image_id(), url=saved.url, public_id=saved.public_id)

    async def upload_image_file(self, data: bytes, content_type: str) -> NoteImage:
        saved = await self._upload(self.storage.upload_bytes(data, content_type))
        return NoteImage(id=new_image_id(), url=saved.url, public_id=saved.public_id)

    # -- CRUD ----------------------------------------------------------

    async def create_note(self, user_id: UUID, request: NoteCreate) -> NoteResponse:
        """Create new note."""
        images = await self._store_images(request.images)

        note_data = {
            "title": _title_or_default(request.title),
            "content": request.content or "",
            "color": request.color or DEFAULT_COLOR,
            "images": images,
            "is_pinned": request.is_pinned,
            "owner_id": user_id,
            "date": datetime.now(timezone.utc),
        }
        note = await self.note_repo.create_note(note_data)
        logger.info(f"Created note {note.id} for user {user_id}")

        return self._note_to_response(note, user_id)

    async def get_note(self, note_id: UUID, user_id: UUID) -> NoteResponse:
        """Get note by ID. Only the owner can open a note directly."""
        note = await self.note_repo.get_by_id_and_user(note_id, user_id)
        if not note:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
        return self._note_to_response(note, user_id)

    async def update_note(self, note_id: UUID, user_id: UUID, request: NoteUpdate) -> NoteResponse:
        """Update existing note. Omitted fields are left unchanged."""
        note = await self.note_repo.get_by_id_and_user(note_id, user_id)
        if not note:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")

        update_data = {"date": datetime.now(timezone.utc)}
        if request.title is not None:
            update_data["title"] = _title_or_default(request.title)
        if request.content is not None:
            update_data["content"] = request.content
        if request.color is not None:
            update_data["color"] = request.color
        if request.is_pinned is not None:
            update_data["is_pinned"] = request.is_pinned
        if request.is_archived is not None:
            update_data["is_archived"] = request.is_archived

        removed: List[str] = []
        if request.images is not None:
            images = await self._store_images(request.images, existing=note.images)
            kept = {img["public_id"] for img in images if img.get("public_id")}
            removed = [pid for pid in note.stored_public_ids() if pid not in kept]
            update_data["images"] = images

        updated_note = await self.note_repo.update_note(note_id, user_id, update_data)
        await self._delete_images(removed)

        return self._note_to_response(updated_note, user_id)

    async def delete_note(self, note_id: UUID, user_id: UUID, permanent: bool = False) -> MessageResponse:
        """Soft delete into the trash, or remove the note and its images."""
        note = await self.note_repo.get_by_id_and_user(note_id, user_id)
        if not note:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")

        if permanent:
            public_ids = note.stored_public_ids()
            await self.note_repo.delete_note(note_id, user_id)
            await self._delete_images(public_ids)
            return MessageResponse(message="Note permanently deleted")

        await self.note_repo.update_note(
            note_id, user_id, {"is_deleted": True, "deleted_at": datetime.now(timezone.utc)}
        )
        return MessageResponse(message="Note moved to trash")

    async def restore_note(self, note_id: UUID, user_id: UUID) -> MessageResponse:
        note = await self.note_repo.get_trashed(note_id, user_id)
        if not note:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Note not found in trash"
            )

        note.is_deleted = False
        note.deleted_at = None
        await self.note_repo.save(note)
        return MessageResponse(message="Note restored successfully")

    async def empty_trash(self, user_id: UUID) -> EmptyTrashResponse:
        trashed = await self.note_repo.list_trashed(user_id)
        public_ids = [pid for note in trashed for pid in note.stored_public_ids()]

        deleted_count = await self.note_repo.delete_trashed(user_id)
        await self._delete_images(public_ids)

        logger.info(f"Emptied trash for user {user_id}: {deleted_count} notes")
        return EmptyTrashResponse(message="Trash emptied successfully", deleted_count=deleted_count)

    def _page_bounds(self, page: int, per_page: int) -> tuple[int, int]:
        if page < 1:
            page = 1
        if per_page < 1 or per_page > self.settings.max_page_size:
            per_page = self.settings.default_page_size
        return page, per_page

    async def list_user_notes(
        self,
        user_id: UUID,
        page: int = 1,
        per_page: int = 50,
        archived: bool = False,
        deleted: bool = False,
    ) -> NoteListResponse:
        """List user notes with pagination."""
        page, per_page = self._page_bounds(page, per_page)

        notes, total_count = await self.note_repo.list_user_notes(
            user_id, page, per_page, archived=archived, deleted=deleted
        )
        items = [self._note_to_response(note, user_id) for note in notes]

        return NoteListResponse.create(items=items, total=total_count, page=page, per_page=per_page)

    # -- social --------------------------------------------------------

    async def toggle_like(self, note_id: UUID, user_id: UUID) -> LikeResponse:
        note = await self.note_repo.get_by_id(note_id)
        if not note:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")

        if not note.is_public and not note.is_owned_by(user_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Cannot like private note"
            )

        already_liked = note.is_liked_by(user_id)
        if already_liked:
            note.likes = [uid for uid in note.likes if uid != user_id]
        else:
            note.likes = list(note.likes or []) + [user_id]
        await self.note_repo.save(note)

        return LikeResponse(liked=not already_liked, likes_count=note.likes_count)

    async def duplicate_note(self, note_id: UUID, user_id: UUID) -> NoteResponse:
        """Copy a visible note into the caller's notes."""
        original = await self.note_repo.get_by_id(note_id)
        if not original:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")

        if not original.is_public and not original.is_owned_by(user_id):
            owner = await self.user_repo.get_by_id(original.owner_id)
            current = await self.user_repo.get_by_id(user_id)
            if not owner or not current:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
            if not current.is_friend_with(owner.id):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN, detail="Cannot duplicate private note"
                )

        # the copy shares image URLs but never owns the stored files
        images = [
            {"id": img["id"], "url": img["url"], "public_id": None} for img in (original.images or [])
        ]
        note = await self.note_repo.create_note(
            {
                "title": f"{original.title} (Copy)",
                "content": original.content,
                "color": original.color,
                "images": images,
                "owner_id": user_id,
                "date": datetime.now(timezone.utc),
                "is_pinned": False,
                "is_archived": False,
                "is_deleted": False,
                "is_public": True,
                "likes": [],
            }
        )
        logger.info(f"Duplicated note {original.id} as {note.id} for user {user_id}")
        return self._note_to_response(note, user_id)

    async def set_visibility(self, note_id: UUID, user_id: UUID, is_public: bool) -> VisibilityResponse:
        note = await self.note_repo.update_note(note_id, user_id, {"is_public": is_public})
        if not note:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
        return VisibilityResponse(message="Note visibility updated", is_public=note.is_public)

    async def list_profile_notes(
        self, viewer_id: UUID, owner_id: UUID, page: int = 1, per_page: int = 50
    ) -> UserNoteListResponse:
        """Notes shown on a profile: own notes, or a friend's public notes."""
        viewer = await self.user_repo.get_by_id(viewer_id)
        owner = await self.user_repo.get_by_id(owner_id)
        if not viewer or not owner:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        is_own = viewer.id == owner.id
        if not is_own and not viewer.is_friend_with(owner.id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view notes"
            )
        if not is_own and owner.is_private:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="User profile is private"
            )

        page, per_page = self._page_bounds(page, per_page)
        notes, total_count = await self.note_repo.list_visible_notes(
            owner.id, public_only=not is_own, page=page, per_page=per_page
        )
        items = [
            UserNoteItem(
                id=note.id,
                title=note.title,
                content=note.content,
                color=note.color,
                images=note.images or [],
                date=note.date,
                owner_id=note.owner_id,
                is_pinned=note.is_pinned,
                is_public=note.is_public,
                likes_count=note.likes_count,
                is_liked=note.is_liked_by(viewer.id),
                is_own=is_own,
            )
            for note in notes
        ]
        return UserNoteListResponse.create(items=items, total=total_count, page=page, per_page=per_page)

    def _note_to_response(self, note: Note, user_id: UUID) -> NoteResponse:
        return NoteResponse(
            id=note.id,
            title=note.title,
            content=note.content,
            color=note.color,
            images=note.images or [],
            date=note.date,
            owner_id=note.owner_id,
            is_pinned=note.is_pinned,
            is_archived=note.is_archived,
            is_deleted=note.is_deleted,
            deleted_at=note.deleted_at,
            is_public=note.is_public,
            likes_count=note.likes_count,
            is_liked=note.is_liked_by(user_id),
            created_at=note.created_at,
            updated_at=note.updated_at,
        )
