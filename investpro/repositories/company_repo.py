"""
Company repository.
"""

from typing import List, Optional

from sqlalchemy.future import select

from investpro.models.company import Company
from investpro.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[Company]):
    """Concrete repository for :class:`Company` entities."""

    async def get_by_admin(self, admin_id: str) -> Optional[Company]:
        """The company an admin is assigned to, if any."""
        stmt = select(self.model).where(self.model.admin_id == admin_id)
        companies: List[Company] = await self._scalars(stmt)
        return companies[0] if companies else None
