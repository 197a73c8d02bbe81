"""User repository for database operations."""

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_user(self, user_data: dict) -> User:
        """Create new user."""
        user = User(**user_data)
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID."""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email, ignoring case and surrounding spaces."""
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(self, user_ids: Iterable[UUID]) -> List[User]:
        """Get the users whose ids are listed, ordered by name. Unknown ids are skipped."""
        ids = list(user_ids)
        if not ids:
            return []
        stmt = select(User).where(User.id.in_(ids)).order_by(User.name)
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def update_user(self, user_id: UUID, update_data: dict) -> Optional[User]:
        """Update user data."""
        user = await self.get_by_id(user_id)
        if not user:
            return None

        for key, value in update_data.items():
            setattr(user, key, value)

        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def save(self, *users: User) -> None:
        """Commit changes made to already loaded users in one transaction."""
        for user in users:
            self.session.add(user)
        await self.session.commit()
        for user in users:
            await self.session.refresh(user)

    async def is_email_taken(self, email: str) -> bool:
        """Check if email is already registered."""
        return await self.get_by_email(email) is not None

    async def search_users(self, query: str, exclude_id: UUID, limit: int = 20) -> List[User]:
        """Case-insensitive substring match on name or email."""
        stmt = (
            select(User)
            .where(
                or_(
                    User.name.icontains(query, autoescape=True),
                    User.email.icontains(query, autoescape=True),
                )
            )
            .where(User.id != exclude_id)
            .order_by(User.name)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())
