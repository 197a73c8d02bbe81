# Note model for user content
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, utcnow
from .types import GUID, GUIDListType, JSONListType

DEFAULT_TITLE = "Untitled"
DEFAULT_COLOR = "#E9D5FF"


class Note(BaseModel):
    """Note with embedded images and likes."""

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(String(200), default=DEFAULT_TITLE, nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    color: Mapped[str] = mapped_column(String(20), default=DEFAULT_COLOR, nullable=False)

    # [{"id": ..., "url": ..., "public_id": ...}]
    images: Mapped[List[Dict[str, Any]]] = mapped_column(JSONListType, default=list, nullable=False)

    # last edit time, drives ordering
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    likes: Mapped[List[uuid.UUID]] = mapped_column(GUIDListType, default=list, nullable=False)

    __table_args__ = (
        Index("idx_notes_owner_id", "owner_id"),
        Index("idx_notes_owner_state", "owner_id", "is_deleted", "is_archived"),
        Index("idx_notes_owner_date", "owner_id", "date"),
    )

    def __repr__(self) -> str:
        truncated = self.title if len(self.title) <= 30 else (self.title[:30] + "...")
        return f"<Note(title='{truncated}', owner_id={self.owner_id})>"

    @property
    def likes_count(self) -> int:
        return len(self.likes or [])

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        return self.owner_id == user_id

    def is_liked_by(self, user_id: uuid.UUID) -> bool:
        return user_id in (self.likes or [])

    def stored_public_ids(self) -> List[str]:
        """Storage ids of images that this note is responsible for deleting."""
        return [img["public_id"] for img in (self.images or []) if img.get("public_id")]


@event.listens_for(Note, "init", propagate=True)
def _init_note_lists(target, args, kwargs):
    if "images" not in kwargs:
        target.images = []
    if "likes" not in kwargs:
        target.likes = []
