"""Notes API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.common import MessageResponse
from ..core.schemas.notes import (
    EmptyTrashResponse,
    LikeResponse,
    NoteCreate,
    NoteImage,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    UploadImageRequest,
    UserNoteListResponse,
    VisibilityResponse,
    VisibilityUpdate,
)
from ..core.services import NoteService
from ..core.storage import ImageStorage, get_image_storage
from ..database import get_db_session
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/notes", tags=["notes"])


def get_note_service(
    session: AsyncSession = Depends(get_db_session),
    storage: ImageStorage = Depends(get_image_storage),
) -> NoteService:
    return NoteService(session, storage)


# Fixed paths are declared before /{note_id} so they are matched first


@router.get("/", response_model=NoteListResponse)
async def list_notes(
    archived: bool = Query(False, description="Show archived notes"),
    deleted: bool = Query(False, description="Show the trash"),
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """List the caller's notes: active, archived or trashed."""
    return await note_service.list_user_notes(
        user_id=current_user_id,
        page=page,
        per_page=per_page,
        archived=archived,
        deleted=deleted,
    )


@router.post("/", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    request: NoteCreate,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Create a new note. Data-URI images are uploaded first."""
    return await note_service.create_note(current_user_id, request)


@router.delete("/trash/empty", response_model=EmptyTrashResponse)
async def empty_trash(
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Permanently delete everything in the trash."""
    return await note_service.empty_trash(current_user_id)


@router.post("/upload", response_model=NoteImage)
async def upload_image(
    request: UploadImageRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Upload a base64 data-URI image."""
    return await note_service.upload_image(request.image)


@router.post("/upload-file", response_model=NoteImage)
async def upload_image_file(
    file: Optional[UploadFile] = File(None),
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Upload an image as multipart form data (field name ``file``)."""
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")

    # one byte past the limit is enough for the size check to reject it
    data = await file.read(note_service.storage.max_bytes + 1)
    return await note_service.upload_image_file(data, (file.content_type or "").lower())


@router.get("/user/{user_id}", response_model=UserNoteListResponse)
async def list_user_notes(
    user_id: UUID,
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Notes on a user's profile: your own, or a friend's public notes."""
    return await note_service.list_profile_notes(current_user_id, user_id, page, per_page)


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Get a specific note."""
    return await note_service.get_note(note_id, current_user_id)


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: UUID,
    request: NoteUpdate,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Update a note."""
    return await note_service.update_note(note_id, current_user_id, request)


@router.delete("/{note_id}", response_model=MessageResponse)
async def delete_note(
    note_id: UUID,
    permanent: bool = Query(False, description="Skip the trash"),
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Move a note to the trash, or delete it for good."""
    return await note_service.delete_note(note_id, current_user_id, permanent=permanent)


@router.post("/{note_id}/restore", response_model=MessageResponse)
async def restore_note(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    return await note_service.restore_note(note_id, current_user_id)


@router.post("/{note_id}/like", response_model=LikeResponse)
async def toggle_like(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Like or unlike a note."""
    return await note_service.toggle_like(note_id, current_user_id)


@router.post("/{note_id}/duplicate", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def duplicate_note(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    """Copy a visible note into your own notes."""
    return await note_service.duplicate_note(note_id, current_user_id)


@router.put("/{note_id}/visibility", response_model=VisibilityResponse)
async def set_visibility(
    note_id: UUID,
    request: VisibilityUpdate,
    current_user_id: UUID = Depends(get_current_user_id),
    note_service: NoteService = Depends(get_note_service),
):
    return await note_service.set_visibility(note_id, current_user_id, request.is_public)
