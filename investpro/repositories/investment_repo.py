"""
Investment repository.

Adds the company-scoped listing behind the admin dashboard and the
``company_id`` filter of ``GET /investments``.
"""

from typing import List

from sqlalchemy import func
from sqlalchemy.future import select

from investpro.models.investment import Investment
from investpro.repositories.base import BaseRepository


class InvestmentRepository(BaseRepository[Investment]):
    """Concrete repository for :class:`Investment` entities."""

    async def get_by_company(
        self, company_id: str, skip: int = 0, limit: int = 100
    ) -> List[Investment]:
        """A page of one company's investments, newest first."""
        stmt = (
            select(self.model)
            .where(self.model.company_id == company_id)
            .order_by(self.model.investment_date.desc(), self.model.id)
            .offset(skip)
            .limit(limit)
        )
        return await self._scalars(stmt)

    async def list_by_company(self, company_id: str) -> List[Investment]:
        stmt = self._ordered(select(self.model).where(self.model.company_id == company_id))
        return await self._scalars(stmt)

    async def count_by_company(self, company_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(self.model.company_id == company_id)
        )

        async def _count() -> int:
            result = await self.db.execute(stmt)
            return result.scalar_one()

        return await self._guarded(_count)
