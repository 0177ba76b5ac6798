"""
Investment service: business logic for investment products.

Every investment belongs to an existing company; after each write the
owning company's performance snapshot (profit, loss, ROI) is recomputed
from its investments so the company cards stay in step.

Caching:
    ``list_investments`` and ``get_investment`` read through the TTL
    cache. Writes invalidate ``investments:`` and ``companies:`` since the
    snapshot lives on the company.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from investpro.core.cache import cache
from investpro.core.exceptions import BusinessRuleViolation, NotFoundException
from investpro.models.investment import Investment
from investpro.repositories.company_repo import CompanyRepository
from investpro.repositories.investment_repo import InvestmentRepository
from investpro.repositories.subscription_repo import SubscriptionRepository
from investpro.schemas.analytics import PerformanceDataPoint
from investpro.schemas.investment import InvestmentCreate, InvestmentUpdate
from investpro.services.analytics import company_snapshot, generate_performance_data

logger = logging.getLogger(__name__)

COMPANY_CACHE_PREFIX = "companies:"


class InvestmentService:
    """
    CRUD for :class:`Investment` plus its synthesized performance series.

    Needs the company repository to check the owning company and keep its
    snapshot current, and the subscription repository to refuse deleting
    an investment investors still hold.
    """

    CACHE_PREFIX = "investments:"

    def __init__(
        self,
        invest_repo: InvestmentRepository,
        company_repo: CompanyRepository,
        subscription_repo: SubscriptionRepository,
    ):
        self._repo = invest_repo
        self._company_repo = company_repo
        self._subscription_repo = subscription_repo

    # ── Queries ──

    async def list_investments(
        self, company_id: Optional[str] = None, skip: int = 0, limit: int = 100
    ) -> List[Investment]:
        """
        A page of investments, optionally for one company (cache-backed).

        An unknown ``company_id`` is a 404 rather than an empty list.
        """
        if company_id is not None:
            await self._require_company(company_id)

        cache_key = f"{self.CACHE_PREFIX}list:{company_id or '*'}:{skip}:{limit}"
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

        if company_id is None:
            investments = await self._repo.get_all(skip=skip, limit=limit)
        else:
            investments = await self._repo.get_by_company(company_id, skip=skip, limit=limit)
        cache.set(cache_key, investments)
        return investments

    async def get_investment(self, investment_id: str) -> Investment:
        cache_key = f"{self.CACHE_PREFIX}{investment_id}"
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

        investment = await self._repo.get(investment_id)
        if not investment:
            raise NotFoundException("Investment", investment_id)
        cache.set(cache_key, investment)
        return investment

    async def get_performance(
        self, investment_id: str, days: Optional[int] = None
    ) -> List[PerformanceDataPoint]:
        """Daily market values from ``initial_amount`` to ``current_value``."""
        investment = await self.get_investment(investment_id)
        return generate_performance_data(
            investment.id,
            float(investment.initial_amount),
            float(investment.current_value),
            days=days,
        )

    # ── Commands ──

    async def create_investment(self, invest_in: InvestmentCreate) -> Investment:
        await self._require_company(invest_in.company_id)

        investment = Investment(**invest_in.model_dump())
        try:
            created = await self._repo.create(investment)
        except IntegrityError as exc:
            await self._repo.db.rollback()
            logger.warning("IntegrityError creating investment: %s", exc)
            raise BusinessRuleViolation(
                "Investment could not be created: the company may have been removed, "
                "or a database constraint was violated."
            )
        await self._refresh_company_snapshot(created.company_id)
        cache.invalidate(self.CACHE_PREFIX, COMPANY_CACHE_PREFIX)
        logger.info(
            "Created investment %s (%s) for company %s",
            created.id,
            created.name,
            created.company_id,
        )
        return created

    async def update_investment(self, invest_update: InvestmentUpdate) -> Investment:
        """
        Full replacement update.

        Moving an investment to another company refreshes both companies'
        snapshots. ``total_investors`` and ``total_invested`` are maintained
        by subscriptions and are not part of the payload.
        """
        investment = await self._repo.get(invest_update.id)
        if not investment:
            raise NotFoundException("Investment", invest_update.id)
        previous_company = investment.company_id
        if invest_update.company_id != previous_company:
            await self._require_company(invest_update.company_id)

        for key, value in invest_update.model_dump(exclude={"id"}).items():
            setattr(investment, key, value)

        try:
            updated = await self._repo.update(investment)
        except IntegrityError as exc:
            await self._repo.db.rollback()
            logger.warning("IntegrityError updating investment %s: %s", invest_update.id, exc)
            raise BusinessRuleViolation(
                "Investment update violates a database constraint. Check all fields."
            )
        await self._refresh_company_snapshot(updated.company_id)
        if previous_company != updated.company_id:
            await self._refresh_company_snapshot(previous_company)
        cache.invalidate(self.CACHE_PREFIX, COMPANY_CACHE_PREFIX)
        logger.info("Updated investment %s", updated.id)
        return updated

    async def delete_investment(self, investment_id: str) -> None:
        investment = await self._repo.get(investment_id)
        if not investment:
            raise NotFoundException("Investment", investment_id)

        holders = await self._subscription_repo.get_by_investments([investment_id])
        if holders:
            raise BusinessRuleViolation(
                f"Investment '{investment.name}' has {len(holders)} subscription(s) "
                "and cannot be deleted"
            )

        company_id = investment.company_id
        try:
            await self._repo.delete(investment_id)
        except IntegrityError as exc:
            await self._repo.db.rollback()
            logger.warning("IntegrityError deleting investment %s: %s", investment_id, exc)
            raise BusinessRuleViolation(
                f"Investment '{investment.name}' is still referenced and cannot be deleted"
            )
        await self._refresh_company_snapshot(company_id)
        cache.invalidate(self.CACHE_PREFIX, COMPANY_CACHE_PREFIX)
        logger.info("Deleted investment %s", investment_id)

    # ── Helpers ──

    async def _require_company(self, company_id: str) -> None:
        if not await self._company_repo.get(company_id):
            raise NotFoundException("Company", company_id)

    async def _refresh_company_snapshot(self, company_id: str) -> None:
        company = await self._company_repo.get(company_id)
        if company is None:
            return
        profit, loss, roi = company_snapshot(await self._repo.list_by_company(company_id))
        company.profit = Decimal(str(round(profit, 2)))
        company.loss = Decimal(str(round(loss, 2)))
        company.roi = roi
        await self._company_repo.update(company)
