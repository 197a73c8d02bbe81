"""
Note management schemas.

These schemas define the API contracts for note CRUD operations, trash,
likes, visibility and image upload.
"""

import re
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import PaginationResponse

HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def _check_color(v):
    if v is not None and not HEX_COLOR.match(v):
        raise ValueError("Color must be a hex value like #E9D5FF")
    return v


class NoteImage(BaseModel):
    """Image embedded in a note, as stored."""

    id: str = Field(description="Client-side image id")
    url: str = Field(description="Public image URL")
    public_id: Optional[str] = Field(default=None, description="Storage id, used for deletion")


class NoteImageInput(BaseModel):
    """Image sent by the client. A data: URI url is uploaded on save."""

    id: Optional[str] = Field(default=None, description="Client-side image id")
    url: str = Field(min_length=1, description="Stored URL or base64 data URI")
    # accepted for client round-trips; the server keeps its own ids
    public_id: Optional[str] = Field(default=None, description="Ignored on input")


class NoteCreate(BaseModel):
    """Note creation request schema."""

    title: Optional[str] = Field(default=None, max_length=200, description="Note title")
    content: str = Field(default="", description="Note content")
    color: Optional[str] = Field(default=None, description="Background color")
    images: List[NoteImageInput] = Field(default_factory=list, max_length=20)
    is_pinned: bool = Field(default=False, description="Pin to the top of the list")

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        return _check_color(v)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Belanja",
                "content": "Telur, roti, kopi",
                "color": "#FDE68A",
                "images": [],
                "is_pinned": False,
            }
        }
    )


class NoteUpdate(BaseModel):
    """Note update request schema. Omitted fields stay unchanged."""

    title: Optional[str] = Field(default=None, max_length=200, description="Note title")
    content: Optional[str] = Field(default=None, description="Note content")
    color: Optional[str] = Field(default=None, description="Background color")
    images: Optional[List[NoteImageInput]] = Field(default=None, max_length=20)
    is_pinned: Optional[bool] = Field(default=None)
    is_archived: Optional[bool] = Field(default=None)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        return _check_color(v)


class NoteResponse(BaseModel):
    """Note response schema."""

    id: uuid.UUID = Field(description="Note unique identifier")
    title: str
    content: str
    color: str
    images: List[NoteImage]
    date: datetime = Field(description="Last edit time")
    owner_id: uuid.UUID

    is_pinned: bool
    is_archived: bool
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    is_public: bool

    likes_count: int = 0
    is_liked: bool = False

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NoteListResponse(PaginationResponse[NoteResponse]):
    """Paginated list of the caller's notes."""


class UserNoteItem(BaseModel):
    """A note as seen when browsing someone's profile."""

    id: uuid.UUID
    title: str
    content: str
    color: str
    images: List[NoteImage]
    date: datetime
    owner_id: uuid.UUID
    is_pinned: bool
    is_public: bool
    likes_count: int
    is_liked: bool
    is_own: bool


class UserNoteListResponse(PaginationResponse[UserNoteItem]):
    """Paginated list of a user's visible notes."""


class VisibilityUpdate(BaseModel):
    is_public: bool = Field(description="Whether friends can see the note")


class VisibilityResponse(BaseModel):
    message: str
    is_public: bool


class LikeResponse(BaseModel):
    liked: bool = Field(description="Whether the caller now likes the note")
    likes_count: int


class UploadImageRequest(BaseModel):
    """Base64 image upload."""

    image: str = Field(description="data:<mime>;base64,<payload>")


class EmptyTrashResponse(BaseModel):
    message: str
    deleted_count: int
