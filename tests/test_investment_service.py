"""
Unit tests for InvestmentService, with every repository mocked.

Covered:
- list_investments: company filter, unknown company, caching
- get_investment / get_performance
- create/update/delete with the company snapshot refresh
- delete refused while subscriptions exist
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from investpro.core.cache import cache
from investpro.core.exceptions import BusinessRuleViolation, NotFoundException
from investpro.schemas.investment import InvestmentCreate, InvestmentUpdate
from investpro.services.investment_service import InvestmentService

from .conftest import (
    COMPANY_ID,
    COMPANY_ID_2,
    INVESTMENT_ID,
    make_company,
    make_investment,
    make_subscription,
)


@pytest.fixture()
def service(investment_repo, company_repo, subscription_repo):
    return InvestmentService(investment_repo, company_repo, subscription_repo)


@pytest.fixture(autouse=True)
def _echo_writes(investment_repo, company_repo):
    async def _same(entity):
        return entity

    investment_repo.create.side_effect = _same
    investment_repo.update.side_effect = _same
    company_repo.update.side_effect = _same


def _payload(**overrides) -> dict:
    data = {
        "name": "Acme Growth Fund",
        "investment_type": "Stocks",
        "initial_amount": Decimal("100000"),
        "current_value": Decimal("90000"),
        "company_id": COMPANY_ID,
        "investment_date": date(2024, 3, 1),
    }
    data.update(overrides)
    return data


# ────────────────────────────────────────────────────────────────────────────
# Queries
# ────────────────────────────────────────────────────────────────────────────


class TestListInvestments:
    @pytest.mark.asyncio
    async def test_lists_all(self, service, investment_repo, company_repo):
        investment_repo.get_all.return_value = [make_investment()]

        result = await service.list_investments()

        assert len(result) == 1
        company_repo.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_filters_by_company(self, service, investment_repo, company_repo):
        company_repo.get.return_value = make_company()
        investment_repo.get_by_company.return_value = []

        await service.list_investments(company_id=COMPANY_ID, skip=10, limit=5)

        investment_repo.get_by_company.assert_awaited_once_with(COMPANY_ID, skip=10, limit=5)

    @pytest.mark.asyncio
    async def test_unknown_company_is_not_found(self, service, company_repo):
        company_repo.get.return_value = None

        with pytest.raises(NotFoundException):
            await service.list_investments(company_id="missing")

    @pytest.mark.asyncio
    async def test_returns_cached_page(self, service, investment_repo):
        cached = [make_investment()]
        cache.set("investments:list:*:0:100", cached)

        assert await service.list_investments() == cached
        investment_repo.get_all.assert_not_awaited()


class TestGetInvestment:
    @pytest.mark.asyncio
    async def test_not_found(self, service, investment_repo):
        investment_repo.get.return_value = None

        with pytest.raises(NotFoundException) as exc_info:
            await service.get_investment("missing")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_performance_series_ends_near_current_value(self, service, investment_repo):
        investment_repo.get.return_value = make_investment()

        points = await service.get_performance(INVESTMENT_ID, days=30)

        assert len(points) == 31
        assert points[-1].date == date.today()
        assert all(p.market_value >= 0 for p in points)


# ────────────────────────────────────────────────────────────────────────────
# Commands
# ────────────────────────────────────────────────────────────────────────────


class TestCreateInvestment:
    @pytest.mark.asyncio
    async def test_creates_and_refreshes_company_snapshot(
        self, service, investment_repo, company_repo
    ):
        company = make_company()
        company_repo.get.return_value = company
        investment_repo.list_by_company.return_value = [
            make_investment(initial_amount=Decimal("100000"), current_value=Decimal("90000"))
        ]

        created = await service.create_investment(InvestmentCreate(**_payload()))

        assert created.name == "Acme Growth Fund"
        assert company.loss == Decimal("10000")
        assert company.profit == Decimal("0")
        assert company.roi == pytest.approx(-10.0)
        company_repo.update.assert_awaited_once_with(company)

    @pytest.mark.asyncio
    async def test_company_must_exist(self, service, investment_repo, company_repo):
        company_repo.get.return_value = None

        with pytest.raises(NotFoundException):
            await service.create_investment(InvestmentCreate(**_payload()))
        investment_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_integrity_error(self, service, investment_repo, company_repo):
        company_repo.get.return_value = make_company()
        investment_repo.create.side_effect = IntegrityError("INSERT", {}, Exception("fk"))

        with pytest.raises(BusinessRuleViolation):
            await service.create_investment(InvestmentCreate(**_payload()))
        investment_repo.db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalidates_both_caches(self, service, investment_repo, company_repo):
        company_repo.get.return_value = make_company()
        investment_repo.list_by_company.return_value = []
        cache.set("investments:list:*:0:100", [])
        cache.set(f"companies:{COMPANY_ID}", make_company())

        await service.create_investment(InvestmentCreate(**_payload()))

        assert cache.get("investments:list:*:0:100") is None
        assert cache.get(f"companies:{COMPANY_ID}") is None


class TestUpdateInvestment:
    @pytest.mark.asyncio
    async def test_moving_company_refreshes_both(self, service, investment_repo, company_repo):
        investment_repo.get.return_value = make_investment(company_id=COMPANY_ID)
        company_repo.get.return_value = make_company()
        investment_repo.list_by_company.return_value = []

        updated = await service.update_investment(
            InvestmentUpdate(id=INVESTMENT_ID, **_payload(company_id=COMPANY_ID_2))
        )

        assert updated.company_id == COMPANY_ID_2
        refreshed = [c.args[0] for c in investment_repo.list_by_company.await_args_list]
        assert refreshed == [COMPANY_ID_2, COMPANY_ID]

    @pytest.mark.asyncio
    async def test_keeps_subscription_totals(self, service, investment_repo, company_repo):
        investment_repo.get.return_value = make_investment(
            total_investors=3, total_invested=Decimal("45000")
        )
        company_repo.get.return_value = make_company()
        investment_repo.list_by_company.return_value = []

        updated = await service.update_investment(
            InvestmentUpdate(id=INVESTMENT_ID, **_payload())
        )

        assert updated.total_investors == 3
        assert updated.total_invested == Decimal("45000")

    @pytest.mark.asyncio
    async def test_not_found(self, service, investment_repo):
        investment_repo.get.return_value = None

        with pytest.raises(NotFoundException):
            await service.update_investment(InvestmentUpdate(id="missing", **_payload()))


class TestDeleteInvestment:
    @pytest.mark.asyncio
    async def test_deletes_unheld_investment(
        self, service, investment_repo, company_repo, subscription_repo
    ):
        investment_repo.get.return_value = make_investment()
        subscription_repo.get_by_investments.return_value = []
        company_repo.get.return_value = make_company()
        investment_repo.list_by_company.return_value = []

        await service.delete_investment(INVESTMENT_ID)

        investment_repo.delete.assert_awaited_once_with(INVESTMENT_ID)
        company_repo.update.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_refused_while_subscribed(self, service, investment_repo, subscription_repo):
        investment_repo.get.return_value = make_investment()
        subscription_repo.get_by_investments.return_value = [make_subscription()]

        with pytest.raises(BusinessRuleViolation) as exc_info:
            await service.delete_investment(INVESTMENT_ID)

        assert "1 subscription(s)" in exc_info.value.message
        investment_repo.delete.assert_not_awaited()
