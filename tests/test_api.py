"""
Integration tests for the API endpoints using httpx AsyncClient.

These exercise the FastAPI request -> endpoint -> service pipeline with
mocked services injected through ``dependency_overrides``, so no database
is touched. The demo and form-validation endpoints need no service at all.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from investpro.core.exceptions import (
    BusinessRuleViolation,
    ConflictException,
    FormValidationError,
    NotFoundException,
    add_exception_handlers,
)
from investpro.demo_data import DEMO_INVESTOR_ID
from investpro.models.user import UserStatus
from investpro.schemas.analytics import DashboardMetrics, InvestorDashboard, InvestorPortfolio
from investpro.schemas.common import FieldError

from .conftest import (
    ADMIN_ID,
    COMPANY_ID,
    INVESTMENT_ID,
    INVESTOR_ID,
    SUBSCRIPTION_ID,
    VALID_COMPANY_FORM,
    make_company,
    make_investment,
    make_subscription,
    make_user,
)

# ────────────────────────────────────────────────────────────────────────────
# Test app factory
# ────────────────────────────────────────────────────────────────────────────


def _make_test_app() -> FastAPI:
    """
    Build a minimal FastAPI app with the real routers but
    NO database or lifespan; services are injected via overrides.
    """
    from investpro.api.v1.api import api_router

    app = FastAPI()
    add_exception_handlers(app)
    app.include_router(api_router, prefix="/api/v1")
    return app


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class _EndpointTest:
    """Builds the app and overrides one service dependency with a mock."""

    dependency = None

    @pytest.fixture(autouse=True)
    def _setup(self):
        self.app = _make_test_app()
        self.mock_service = AsyncMock()
        if self.dependency is not None:
            self.app.dependency_overrides[self.dependency()] = lambda: self.mock_service


def _company_dependency():
    from investpro.api.v1.endpoints.companies import _get_company_service

    return _get_company_service


def _investment_dependency():
    from investpro.api.v1.endpoints.investments import _get_investment_service

    return _get_investment_service


def _investor_dependency():
    from investpro.api.v1.endpoints.investors import _get_investor_service

    return _get_investor_service


def _dashboard_dependency():
    from investpro.api.v1.endpoints.dashboard import _get_dashboard_service

    return _get_dashboard_service


# ────────────────────────────────────────────────────────────────────────────
# Companies
# ────────────────────────────────────────────────────────────────────────────


class TestCompaniesEndpoints(_EndpointTest):
    dependency = staticmethod(_company_dependency)

    @pytest.mark.asyncio
    async def test_list_companies_200(self):
        company = make_company()
        company.roi = 7.5
        self.mock_service.list_companies.return_value = [company]

        async with _client(self.app) as client:
            resp = await client.get("/api/v1/companies")

        assert resp.status_code == 200
        data = resp.json()
        assert data[0]["name"] == "Acme Capital"
        assert data[0]["performance"] == {"profit": 0.0, "loss": 0.0, "roi": 7.5}
        assert "roi" not in data[0]

    @pytest.mark.asyncio
    async def test_create_company_201(self):
        self.mock_service.create_company.return_value = make_company()

        async with _client(self.app) as client:
            resp = await client.post("/api/v1/companies", json=VALID_COMPANY_FORM)

        assert resp.status_code == 201
        assert resp.json()["id"] == COMPANY_ID

    @pytest.mark.asyncio
    async def test_create_company_form_errors_422(self):
        self.mock_service.create_company.side_effect = FormValidationError(
            [FieldError(field="name", message="Company name is required")]
        )

        async with _client(self.app) as client:
            resp = await client.post("/api/v1/companies", json={})

        assert resp.status_code == 422
        body = resp.json()
        assert body["error"] is True
        assert body["message"] == "Validation failed"
        assert body["details"] == [{"field": "name", "message": "Company name is required"}]

    @pytest.mark.asyncio
    async def test_get_company_404(self):
        self.mock_service.get_company.side_effect = NotFoundException("Company", "nope")

        async with _client(self.app) as client:
            resp = await client.get("/api/v1/companies/nope")

        assert resp.status_code == 404
        assert resp.json() == {"error": True, "message": "Company with id 'nope' not found"}

    @pytest.mark.asyncio
    async def test_delete_company_204(self):
        self.mock_service.delete_company.return_value = None

        async with _client(self.app) as client:
            resp = await client.delete(f"/api/v1/companies/{COMPANY_ID}")

        assert resp.status_code == 204
        assert resp.content == b""

    @pytest.mark.asyncio
    async def test_delete_company_with_investments_422(self):
        self.mock_service.delete_company.side_effect = BusinessRuleViolation(
            "Company 'Acme Capital' still has 1 investment(s) and cannot be deleted"
        )

        async with _client(self.app) as client:
            resp = await client.delete(f"/api/v1/companies/{COMPANY_ID}")

        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_assign_admin(self):
        self.mock_service.assign_admin.return_value = make_company(admin_id=ADMIN_ID)

        async with _client(self.app) as client:
            resp = await client.put(
                f"/api/v1/companies/{COMPANY_ID}/admin", json={"admin_id": ADMIN_ID}
            )

        assert resp.status_code == 200
        assert resp.json()["admin_id"] == ADMIN_ID
        self.mock_service.assign_admin.assert_awaited_once_with(COMPANY_ID, ADMIN_ID)

    @pytest.mark.asyncio
    async def test_assign_admin_conflict_409(self):
        self.mock_service.assign_admin.side_effect = ConflictException(
            "User already administers company 'Other'"
        )

        async with _client(self.app) as client:
            resp = await client.put(
                f"/api/v1/companies/{COMPANY_ID}/admin", json={"admin_id": ADMIN_ID}
            )

        assert resp.status_code == 409


class TestCompanyValidationEndpoints:
    @pytest.fixture(autouse=True)
    def _setup(self):
        self.app = _make_test_app()

    @pytest.mark.asyncio
    async def test_valid_form(self):
        async with _client(self.app) as client:
            resp = await client.post("/api/v1/companies/validate", json=VALID_COMPANY_FORM)

        assert resp.status_code == 200
        assert resp.json() == {"is_valid": True, "errors": []}

    @pytest.mark.asyncio
    async def test_invalid_form_lists_all_errors(self):
        async with _client(self.app) as client:
            resp = await client.post(
                "/api/v1/companies/validate",
                json={"name": "", "contact_email": "bad", "contact_phone": "abc"},
            )

        body = resp.json()
        assert resp.status_code == 200
        assert body["is_valid"] is False
        assert [e["field"] for e in body["errors"]] == [
            "name",
            "industry",
            "contact_email",
            "contact_phone",
        ]

    @pytest.mark.asyncio
    async def test_single_field(self):
        async with _client(self.app) as client:
            resp = await client.post(
                "/api/v1/companies/validate/website", json={"website": "not a url"}
            )

        assert resp.json()["errors"] == [
            {"field": "website", "message": "Please enter a valid URL (e.g., https://example.com)"}
        ]

    @pytest.mark.asyncio
    async def test_unknown_field_is_valid(self):
        async with _client(self.app) as client:
            resp = await client.post("/api/v1/companies/validate/colour", json={})

        assert resp.json() == {"is_valid": True, "errors": []}

    @pytest.mark.asyncio
    async def test_null_fields_are_reported_as_blank(self):
        async with _client(self.app) as client:
            resp = await client.post(
                "/api/v1/companies/validate",
                json={"name": None, "industry": "Tech", "contact_email": None, "website": None},
            )

        body = resp.json()
        assert resp.status_code == 200
        assert body["is_valid"] is False
        assert body["errors"] == [
            {"field": "name", "message": "Company name is required"},
            {"field": "contact_email", "message": "Contact email is required"},
        ]

    @pytest.mark.asyncio
    async def test_null_single_field(self):
        async with _client(self.app) as client:
            resp = await client.post("/api/v1/companies/validate/name", json={"name": None})

        assert resp.status_code == 200
        assert resp.json()["errors"] == [{"field": "name", "message": "Company name is required"}]


# ────────────────────────────────────────────────────────────────────────────
# Investments
# ────────────────────────────────────────────────────────────────────────────


class TestInvestmentsEndpoints(_EndpointTest):
    dependency = staticmethod(_investment_dependency)

    @pytest.mark.asyncio
    async def test_list_filters_by_company(self):
        self.mock_service.list_investments.return_value = [make_investment()]

        async with _client(self.app) as client:
            resp = await client.get("/api/v1/investments", params={"company_id": COMPANY_ID})

        assert resp.status_code == 200
        data = resp.json()
        assert data[0]["current_value"] == 120000.0
        self.mock_service.list_investments.assert_awaited_once_with(
            company_id=COMPANY_ID, skip=0, limit=100
        )

    @pytest.mark.asyncio
    async def test_create_rejects_inverted_bounds(self):
        async with _client(self.app) as client:
            resp = await client.post(
                "/api/v1/investments",
                json={
                    "name": "Bad Bounds",
                    "investment_type": "Stocks",
                    "initial_amount": 1000,
                    "current_value": 1000,
                    "company_id": COMPANY_ID,
                    "min_investment": 5000,
                    "max_investment": 100,
                },
            )

        assert resp.status_code == 422
        assert resp.json()["error"] is True
        self.mock_service.create_investment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_204(self):
        async with _client(self.app) as client:
            resp = await client.delete(f"/api/v1/investments/{INVESTMENT_ID}")

        assert resp.status_code == 204

    @pytest.mark.asyncio
    async def test_performance_days_bounds(self):
        async with _client(self.app) as client:
            resp = await client.get(
                f"/api/v1/investments/{INVESTMENT_ID}/performance", params={"days": 0}
            )

        assert resp.status_code == 422


# ────────────────────────────────────────────────────────────────────────────
# Investors
# ────────────────────────────────────────────────────────────────────────────


class TestInvestorsEndpoints(_EndpointTest):
    dependency = staticmethod(_investor_dependency)

    @pytest.mark.asyncio
    async def test_list_by_status(self):
        self.mock_service.list_investors.return_value = [
            make_user(status=UserStatus.PENDING)
        ]

        async with _client(self.app) as client:
            resp = await client.get("/api/v1/investors", params={"status": "pending"})

        assert resp.status_code == 200
        assert resp.json()[0]["status"] == "pending"
        self.mock_service.list_investors.assert_awaited_once_with(
            status=UserStatus.PENDING, skip=0, limit=100
        )

    @pytest.mark.asyncio
    async def test_create_rejects_bad_email(self):
        async with _client(self.app) as client:
            resp = await client.post(
                "/api/v1/investors", json={"first_name": "Ann", "email": "not-an-email"}
            )

        assert resp.status_code == 422
        assert any("email" in d["field"] for d in resp.json()["details"])

    @pytest.mark.asyncio
    async def test_create_duplicate_409(self):
        self.mock_service.create_investor.side_effect = ConflictException(
            "A user with email 'ann@example.com' already exists"
        )

        async with _client(self.app) as client:
            resp = await client.post(
                "/api/v1/investors", json={"first_name": "Ann", "email": "ann@example.com"}
            )

        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_approve(self):
        self.mock_service.approve_investor.return_value = make_user()

        async with _client(self.app) as client:
            resp = await client.post(f"/api/v1/investors/{INVESTOR_ID}/approve")

        assert resp.status_code == 200
        assert resp.json()["status"] == "active"

    @pytest.mark.asyncio
    async def test_invest_201(self):
        self.mock_service.invest.return_value = make_subscription()

        async with _client(self.app) as client:
            resp = await client.post(
                f"/api/v1/investors/{INVESTOR_ID}/investments",
                json={"investment_id": INVESTMENT_ID, "amount": 10000},
            )

        assert resp.status_code == 201
        body = resp.json()
        assert body["amount"] == 10000.0
        assert body["profit_loss"] == 2000.0

    @pytest.mark.asyncio
    async def test_invest_below_minimum_422(self):
        self.mock_service.invest.side_effect = BusinessRuleViolation(
            "Minimum subscription for 'Acme Growth Fund' is 1000"
        )

        async with _client(self.app) as client:
            resp = await client.post(
                f"/api/v1/investors/{INVESTOR_ID}/investments",
                json={"investment_id": INVESTMENT_ID, "amount": 10},
            )

        assert resp.status_code == 422
        assert "Minimum subscription" in resp.json()["message"]

    @pytest.mark.asyncio
    async def test_withdraw(self):
        self.mock_service.withdraw.return_value = make_subscription()

        async with _client(self.app) as client:
            resp = await client.post(
                f"/api/v1/investors/{INVESTOR_ID}/investments/{SUBSCRIPTION_ID}/withdraw"
            )

        assert resp.status_code == 200
        self.mock_service.withdraw.assert_awaited_once_with(INVESTOR_ID, SUBSCRIPTION_ID)


# ────────────────────────────────────────────────────────────────────────────
# Dashboards
# ────────────────────────────────────────────────────────────────────────────


class TestDashboardEndpoints(_EndpointTest):
    dependency = staticmethod(_dashboard_dependency)

    @pytest.mark.asyncio
    async def test_metrics(self):
        self.mock_service.metrics.return_value = DashboardMetrics(total_investments=3)

        async with _client(self.app) as client:
            resp = await client.get("/api/v1/dashboard/metrics")

        assert resp.status_code == 200
        assert resp.json()["total_investments"] == 3
        assert resp.json()["total_roi"] == 0.0

    @pytest.mark.asyncio
    async def test_admin_unknown_company_404(self):
        self.mock_service.admin.side_effect = NotFoundException("Company", "missing")

        async with _client(self.app) as client:
            resp = await client.get("/api/v1/dashboard/admin/missing")

        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_investor_company_filter_is_passed_through(self):
        self.mock_service.investor.return_value = InvestorDashboard(
            company_id=COMPANY_ID, portfolio=InvestorPortfolio(total_profit=10)
        )

        async with _client(self.app) as client:
            resp = await client.get(
                f"/api/v1/dashboard/investor/{INVESTOR_ID}", params={"company_id": COMPANY_ID}
            )

        assert resp.status_code == 200
        body = resp.json()
        assert body["company_id"] == COMPANY_ID
        assert body["portfolio"]["total_profit"] == 10
        assert body["performance_metrics"]["best_performing"] is None
        assert body["status_counts"] == {}
        self.mock_service.investor.assert_awaited_once_with(INVESTOR_ID, company_id=COMPANY_ID)

    @pytest.mark.asyncio
    async def test_investor_without_filter(self):
        self.mock_service.investor.return_value = InvestorDashboard(portfolio=InvestorPortfolio())

        async with _client(self.app) as client:
            resp = await client.get(f"/api/v1/dashboard/investor/{INVESTOR_ID}")

        assert resp.status_code == 200
        self.mock_service.investor.assert_awaited_once_with(INVESTOR_ID, company_id=None)


# ────────────────────────────────────────────────────────────────────────────
# Demo
# ────────────────────────────────────────────────────────────────────────────


class TestDemoEndpoints:
    @pytest.fixture(autouse=True)
    def _setup(self):
        self.app = _make_test_app()

    @pytest.mark.asyncio
    async def test_metrics(self):
        async with _client(self.app) as client:
            resp = await client.get("/api/v1/demo/metrics")

        assert resp.status_code == 200
        assert resp.json()["total_companies"] == 6

    @pytest.mark.asyncio
    async def test_portfolio(self):
        async with _client(self.app) as client:
            resp = await client.get(f"/api/v1/demo/portfolio/{DEMO_INVESTOR_ID}")

        body = resp.json()
        assert body["investment_count"] == 4
        assert body["investments"][0]["investment"]["id"] == "inv-1"

    @pytest.mark.asyncio
    async def test_unknown_performance_404(self):
        async with _client(self.app) as client:
            resp = await client.get("/api/v1/demo/performance/nope")

        assert resp.status_code == 404
