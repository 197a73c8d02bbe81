"""Note repository for database operations."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.note import Note

logger = logging.getLogger(__name__)

# pinned first, newest edit first
NOTE_ORDER = (desc(Note.is_pinned), desc(Note.date))


class NoteRepository:
    """Repository for note database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_note(self, note_data: dict) -> Note:
        """Create new note."""
        note = Note(**note_data)
        self.session.add(note)
        await self.session.commit()
        await self.session.refresh(note)
        return note

    async def get_by_id(self, note_id: UUID) -> Optional[Note]:
        """Get note by ID regardless of owner."""
        stmt = select(Note).where(Note.id == note_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id_and_user(self, note_id: UUID, user_id: UUID) -> Optional[Note]:
        """Get note by ID if owned by user."""
        stmt = select(Note).where(and_(Note.id == note_id, Note.owner_id == user_id))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_trashed(self, note_id: UUID, user_id: UUID) -> Optional[Note]:
        """Get an owned note only if it is in the trash."""
        stmt = select(Note).where(
            and_(Note.id == note_id, Note.owner_id == user_id, Note.is_deleted.is_(True))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_note(self, note_id: UUID, user_id: UUID, update_data: dict) -> Optional[Note]:
        """Update note if owned by user."""
        note = await self.get_by_id_and_user(note_id, user_id)
        if not note:
            return None

        for key, value in update_data.items():
            setattr(note, key, value)

        await self.session.commit()
        await self.session.refresh(note)
        return note

    async def save(self, note: Note) -> Note:
        """Commit changes made to a loaded note."""
        self.session.add(note)
        await self.session.commit()
        await self.session.refresh(note)
        return note

    async def delete_note(self, note_id: UUID, user_id: UUID) -> bool:
        """Delete note if owned by user."""
        note = await self.get_by_id_and_user(note_id, user_id)
        if not note:
            logger.warning(f"Note {note_id} not found or not owned by user {user_id}")
            return False

        await self.session.delete(note)
        await self.session.commit()
        logger.info(f"Deleted note {note_id}")
        return True

    async def list_user_notes(
        self,
        user_id: UUID,
        page: int = 1,
        per_page: int = 50,
        archived: bool = False,
        deleted: bool = False,
    ) -> tuple[List[Note], int]:
        """List the owner's notes in one of three views: trash, archive or active."""
        conditions = [Note.owner_id == user_id]
        if deleted:
            conditions.append(Note.is_deleted.is_(True))
        elif archived:
            conditions += [Note.is_deleted.is_(False), Note.is_archived.is_(True)]
        else:
            conditions += [Note.is_deleted.is_(False), Note.is_archived.is_(False)]

        return await self._paginate(conditions, page, per_page)

    async def list_visible_notes(
        self,
        owner_id: UUID,
        public_only: bool,
        page: int = 1,
        per_page: int = 50,
    ) -> tuple[List[Note], int]:
        """Active notes of a user as shown on their profile."""
        conditions = [
            Note.owner_id == owner_id,
            Note.is_deleted.is_(False),
            Note.is_archived.is_(False),
        ]
        if public_only:
            conditions.append(Note.is_public.is_(True))

        return await self._paginate(conditions, page, per_page)

    async def list_trashed(self, user_id: UUID) -> List[Note]:
        stmt = select(Note).where(and_(Note.owner_id == user_id, Note.is_deleted.is_(True)))
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def delete_trashed(self, user_id: UUID) -> int:
        """Delete every trashed note of the user. Returns how many were removed."""
        stmt = (
            delete(Note)
            .where(and_(Note.owner_id == user_id, Note.is_deleted.is_(True)))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount or 0

    async def _paginate(self, conditions: list, page: int, per_page: int) -> tuple[List[Note], int]:
        offset = (page - 1) * per_page

        count_stmt = select(func.count(Note.id)).where(and_(*conditions))
        total_result = await self.session.execute(count_stmt)
        total_count = total_result.scalar() or 0

        stmt = select(Note).where(and_(*conditions)).order_by(*NOTE_ORDER).offset(offset).limit(per_page)
        result = await self.session.execute(stmt)
        return list(result.scalars()), total_count
