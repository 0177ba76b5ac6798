"""
Investor subscription repository.
"""

from typing import List, Sequence

from sqlalchemy.future import select

from investpro.models.subscription import InvestorInvestment
from investpro.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository[InvestorInvestment]):
    """Concrete repository for :class:`InvestorInvestment` entities."""

    async def get_by_user(self, user_id: str) -> List[InvestorInvestment]:
        """All of an investor's subscriptions, newest first."""
        stmt = (
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(self.model.investment_date.desc(), self.model.id)
        )
        return await self._scalars(stmt)

    async def get_by_investments(
        self, investment_ids: Sequence[str]
    ) -> List[InvestorInvestment]:
        """Subscriptions into any of ``investment_ids``."""
        if not investment_ids:
            return []
        stmt = self._ordered(
            select(self.model).where(self.model.investment_id.in_(list(investment_ids)))
        )
        return await self._scalars(stmt)
