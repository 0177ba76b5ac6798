"""
Shared pytest fixtures for unit tests.

All tests run with ``USE_SQLITE=true`` and mocked dependencies so that
no real database or network I/O is needed.
"""

import os

os.environ.setdefault("USE_SQLITE", "true")

from datetime import date, datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from investpro.core.cache import TTLCache  # noqa: E402
from investpro.models.company import Company, CompanyStatus  # noqa: E402
from investpro.models.investment import Investment, InvestmentStatus, RiskLevel  # noqa: E402
from investpro.models.subscription import InvestorInvestment, SubscriptionStatus  # noqa: E402
from investpro.models.user import User, UserRole, UserStatus  # noqa: E402

# ────────────────────────────────────────────────────────────────────────────
# Factory helpers
# ────────────────────────────────────────────────────────────────────────────

COMPANY_ID = "company-test-1"
COMPANY_ID_2 = "company-test-2"
INVESTMENT_ID = "inv-test-1"
INVESTOR_ID = "investor-test-1"
ADMIN_ID = "admin-test-1"
SUBSCRIPTION_ID = "sub-test-1"

VALID_COMPANY_FORM = {
    "name": "Acme Capital",
    "industry": "Financial Services",
    "contact_email": "hello@acme.example",
}


def make_user(
    *,
    id: str = INVESTOR_ID,
    first_name: str = "Test",
    last_name: str = "Investor",
    email: str = "investor@example.com",
    role: UserRole = UserRole.INVESTOR,
    status: UserStatus = UserStatus.ACTIVE,
) -> User:
    now = datetime.now(timezone.utc)
    return User(
        id=id,
        first_name=first_name,
        last_name=last_name,
        email=email,
        role=role,
        status=status,
        created_at=now,
        updated_at=now,
    )


def make_company(
    *,
    id: str = COMPANY_ID,
    name: str = "Acme Capital",
    industry: str = "Financial Services",
    contact_email: str = "hello@acme.example",
    status: CompanyStatus = CompanyStatus.ACTIVE,
    admin_id: Optional[str] = None,
) -> Company:
    return Company(
        id=id,
        name=name,
        industry=industry,
        contact_email=contact_email,
        status=status,
        admin_id=admin_id,
        profit=Decimal("0"),
        loss=Decimal("0"),
        roi=0.0,
        created_at=datetime.now(timezone.utc),
    )


def make_investment(
    *,
    id: str = INVESTMENT_ID,
    name: str = "Acme Growth Fund",
    investment_type: str = "Stocks",
    company_id: str = COMPANY_ID,
    initial_amount: Decimal = Decimal("100000"),
    current_value: Decimal = Decimal("120000"),
    status: InvestmentStatus = InvestmentStatus.ACTIVE,
    min_investment: Decimal = Decimal("1000"),
    max_investment: Optional[Decimal] = Decimal("500000"),
    total_investors: int = 0,
    total_invested: Decimal = Decimal("0"),
    investment_date: date = date(2024, 1, 15),
) -> Investment:
    return Investment(
        id=id,
        name=name,
        investment_type=investment_type,
        company_id=company_id,
        initial_amount=initial_amount,
        current_value=current_value,
        risk_level=RiskLevel.MEDIUM,
        status=status,
        investment_date=investment_date,
        min_investment=min_investment,
        max_investment=max_investment,
        total_investors=total_investors,
        total_invested=total_invested,
        created_at=datetime.now(timezone.utc),
    )


def make_subscription(
    *,
    id: str = SUBSCRIPTION_ID,
    user_id: str = INVESTOR_ID,
    investment_id: str = INVESTMENT_ID,
    amount: Decimal = Decimal("10000"),
    current_value: Decimal = Decimal("12000"),
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
    investment_date: date = date(2024, 2, 1),
) -> InvestorInvestment:
    profit_loss = current_value - amount
    return InvestorInvestment(
        id=id,
        user_id=user_id,
        investment_id=investment_id,
        amount=amount,
        current_value=current_value,
        profit_loss=profit_loss,
        profit_loss_percent=float(profit_loss / amount * 100) if amount else 0.0,
        status=status,
        investment_date=investment_date,
        created_at=datetime.now(timezone.utc),
    )


# ────────────────────────────────────────────────────────────────────────────
# Pytest fixtures
# ────────────────────────────────────────────────────────────────────────────


def _mock_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.db = AsyncMock()
    return repo


@pytest.fixture()
def company_repo():
    return _mock_repo()


@pytest.fixture()
def investment_repo():
    return _mock_repo()


@pytest.fixture()
def user_repo():
    return _mock_repo()


@pytest.fixture()
def subscription_repo():
    return _mock_repo()


@pytest.fixture()
def mock_db():
    """A mocked AsyncSession that tracks add/commit/refresh/rollback calls."""
    session = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.merge = AsyncMock()
    session.delete = AsyncMock()
    return session


@pytest.fixture()
def test_cache():
    """A fresh TTL cache instance for test isolation."""
    return TTLCache(ttl=30.0, max_size=100, enabled=True)


@pytest.fixture()
def disabled_cache():
    """A disabled TTL cache; all operations are no-ops."""
    return TTLCache(ttl=30.0, max_size=100, enabled=False)


@pytest.fixture(autouse=True)
def _clear_global_cache():
    """Clear the global cache around each test to prevent cross-test pollution."""
    from investpro.core.cache import cache

    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def _reset_circuit_breaker():
    from investpro.core.resilience import db_circuit_breaker

    db_circuit_breaker.reset()
    yield
    db_circuit_breaker.reset()
