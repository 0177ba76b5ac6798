"""
User repository.

Adds the e-mail lookup used for duplicate detection and role/status
filtered listings for the investor management views.
"""

from typing import List, Optional

from sqlalchemy.future import select

from investpro.models.user import User, UserRole, UserStatus
from investpro.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Concrete repository for :class:`User` entities."""

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(self.model).where(self.model.email == email)
        users: List[User] = await self._scalars(stmt)
        return users[0] if users else None

    async def get_by_role(
        self,
        role: UserRole,
        status: Optional[UserStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[User]:
        stmt = select(self.model).where(self.model.role == role)
        if status is not None:
            stmt = stmt.where(self.model.status == status)
        return await self._scalars(self._ordered(stmt).offset(skip).limit(limit))
