"""
Dashboard service: the per-role aggregated views.

Each call builds a :class:`DataStore` for the request, refreshes it and
feeds the collections to :mod:`investpro.services.analytics`. A collection
that fails to load comes back empty, so the dashboards degrade to zeroed
figures instead of erroring. The only errors raised are 404s for a company
or investor that was loaded successfully and is not there.
"""

import logging
from typing import Callable, Dict, List, Optional

from investpro.core.exceptions import NotFoundException
from investpro.models.subscription import InvestorInvestment, SubscriptionStatus
from investpro.models.user import UserRole, UserStatus
from investpro.schemas.analytics import (
    DashboardMetrics,
    InvestorDashboard,
    RoleDashboard,
    SalesmanDashboard,
)
from investpro.services.analytics import (
    dashboard_metrics,
    distribution_breakdown,
    investor_portfolio,
    performance_metrics,
    performance_trend,
    portfolio_distribution,
    recent_transactions,
    status_distribution,
    subscription_status_counts,
)
from investpro.state.stores import CollectionStore, DataStore, FetchState

logger = logging.getLogger(__name__)

StoreFactory = Callable[..., DataStore]


def _held(subscriptions: List[InvestorInvestment]) -> List[InvestorInvestment]:
    return [s for s in subscriptions if s.status != SubscriptionStatus.SOLD]


def _require(store: CollectionStore, resource: str, id: str):
    """Look ``id`` up, raising 404 only when the collection actually loaded."""
    record = store.get_by_id(id)
    if record is None and store.state == FetchState.POPULATED:
        raise NotFoundException(resource, id)
    return record


class DashboardService:
    """
    Parameters
    ----------
    store_factory : callable
        ``store_factory(company_id=None, user_id=None) -> DataStore``;
        normally :meth:`DataStore.for_session` bound to the request session.
    """

    def __init__(self, store_factory: StoreFactory):
        self._store_factory = store_factory

    async def _load(self, **scope: Optional[str]) -> DataStore:
        store = await self._store_factory(**scope).refresh()
        failed = [
            name
            for name, state in store.status().items()
            if state == FetchState.EMPTY_ON_ERROR.value
        ]
        if failed:
            logger.warning("Dashboard rendered without %s", ", ".join(failed))
        return store

    async def metrics(self) -> DashboardMetrics:
        store = await self._load()
        return dashboard_metrics(store.investments, store.users, store.companies)

    async def superadmin(self) -> RoleDashboard:
        """Platform-wide figures across every company."""
        store = await self._load()
        company_names: Dict[str, str] = {c.id: c.name for c in store.companies}
        return RoleDashboard(
            metrics=dashboard_metrics(store.investments, store.users, store.companies),
            company_distribution=distribution_breakdown(
                store.investments, key=lambda inv: company_names.get(inv.company_id)
            ),
            type_distribution=distribution_breakdown(store.investments, key="investment_type"),
            status_distribution=status_distribution(store.investments),
            performance_trend=performance_trend(_held(store.subscriptions)),
        )

    async def admin(self, company_id: str) -> RoleDashboard:
        """
        The same view scoped to one company: its investments, the
        subscriptions into them and the investors holding those.
        """
        store = await self._load(company_id=company_id)
        company = _require(store.company_store, "Company", company_id)
        subscriptions = _held(store.subscriptions)
        holder_ids = {s.user_id for s in subscriptions}
        investors = [u for u in store.users if u.id in holder_ids]
        return RoleDashboard(
            metrics=dashboard_metrics(
                store.investments, investors, [company] if company else []
            ),
            company_distribution=distribution_breakdown(
                store.investments, key=lambda inv: company.name if company else None
            ),
            type_distribution=distribution_breakdown(store.investments, key="investment_type"),
            status_distribution=status_distribution(store.investments),
            performance_trend=performance_trend(subscriptions),
        )

    async def investor(
        self, user_id: str, company_id: Optional[str] = None
    ) -> InvestorDashboard:
        """
        Portfolio, asset allocation, trend and ROI spread for one investor,
        optionally limited to the investments of one company.

        Status counts and recent transactions include sold subscriptions;
        the portfolio figures do not.
        """
        store = await self._load(user_id=user_id)
        user = _require(store.user_store, "Investor", user_id)
        if user is not None and user.role != UserRole.INVESTOR:
            raise NotFoundException("Investor", user_id)

        owned = [s for s in store.subscriptions if s.user_id == user_id]
        if company_id is not None:
            _require(store.company_store, "Company", company_id)
            in_company = {
                inv.id for inv in store.investments if inv.company_id == company_id
            }
            owned = [s for s in owned if s.investment_id in in_company]

        subscriptions = _held(owned)
        names = {inv.id: inv.name for inv in store.investments}
        return InvestorDashboard(
            company_id=company_id,
            portfolio=investor_portfolio(user_id, subscriptions, store.investments),
            allocation=portfolio_distribution(subscriptions, store.investments, user_id),
            distribution=distribution_breakdown(
                subscriptions, key=lambda s: names.get(s.investment_id)
            ),
            performance_trend=performance_trend(subscriptions),
            performance_metrics=performance_metrics(subscriptions),
            status_counts=subscription_status_counts(owned),
            recent_transactions=recent_transactions(owned, store.investments),
        )

    async def salesman(self) -> SalesmanDashboard:
        """Investor pipeline by status plus the platform metrics."""
        store = await self._load()
        investors = [u for u in store.users if u.role == UserRole.INVESTOR]
        by_status = {status.value: 0 for status in UserStatus}
        for investor in investors:
            by_status[investor.status.value] += 1

        active = [s for s in store.subscriptions if s.status == SubscriptionStatus.ACTIVE]
        return SalesmanDashboard(
            metrics=dashboard_metrics(store.investments, store.users, store.companies),
            investors_by_status=by_status,
            total_subscribed=float(sum(s.amount for s in active)),
            subscription_count=len(active),
        )
