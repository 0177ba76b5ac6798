"""
Static demo dataset.

Lets the dashboard be presented without a populated database: six users,
six companies, ten investments and the investor subscriptions that feed
the investor views. ``python -m investpro.seed`` writes the same records
into the database.
"""

import functools
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List

from investpro.models.company import Company, CompanyStatus
from investpro.models.investment import Investment, InvestmentStatus, RiskLevel
from investpro.models.subscription import InvestorInvestment, SubscriptionStatus
from investpro.models.user import User, UserRole, UserStatus
from investpro.schemas.analytics import DashboardMetrics, InvestorPortfolio, PerformanceDataPoint
from investpro.services.analytics import (
    calculate_roi,
    company_snapshot,
    dashboard_metrics,
    generate_performance_data,
    investor_portfolio,
)

DEMO_INVESTOR_ID = "demo-investor-001"


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def _user(id, first, last, email, role, joined, last_login) -> User:
    return User(
        id=id,
        first_name=first,
        last_name=last,
        email=email,
        role=role,
        status=UserStatus.ACTIVE,
        created_at=_ts(joined),
        updated_at=_ts(joined),
        last_login=_ts(last_login),
    )


DEMO_USERS: List[User] = [
    _user("user-1", "Sarah", "Johnson", "sarah.johnson@investpro.com",
          UserRole.SUPERADMIN, "2023-01-15", "2024-06-21T10:30:00"),
    _user("user-2", "Michael", "Chen", "michael.chen@investpro.com",
          UserRole.ADMIN, "2023-03-20", "2024-06-21T09:15:00"),
    _user("user-3", "Emily", "Rodriguez", "emily.rodriguez@investpro.com",
          UserRole.ADMIN, "2023-05-10", "2024-06-21T08:45:00"),
    _user("user-4", "David", "Thompson", "david.thompson@investor.com",
          UserRole.INVESTOR, "2023-07-22", "2024-06-21T11:20:00"),
    _user("user-5", "Lisa", "Wang", "lisa.wang@investor.com",
          UserRole.INVESTOR, "2023-09-05", "2024-06-21T07:30:00"),
    _user("user-6", "Robert", "Davis", "robert.davis@investor.com",
          UserRole.INVESTOR, "2023-11-12", "2024-06-20T16:45:00"),
]

# The shared "try it" investor account; kept out of DEMO_USERS so the
# headline user counts match the presentation deck.
DEMO_INVESTOR_ACCOUNT = _user(
    DEMO_INVESTOR_ID, "Demo", "Investor", "demo.investor@investpro.com",
    UserRole.INVESTOR, "2024-01-01", "2024-06-21T12:00:00",
)


def _company(id, name, industry, description, address, phone, email, website, founded,
             admin_id=None) -> Company:
    return Company(
        id=id,
        name=name,
        industry=industry,
        description=description,
        address=address,
        contact_phone=phone,
        contact_email=email,
        website=website,
        established_date=date(founded, 1, 1),
        status=CompanyStatus.ACTIVE,
        admin_id=admin_id,
        created_at=_ts("2024-01-01"),
    )


DEMO_COMPANIES: List[Company] = [
    _company("company-1", "Meta Platforms Inc.", "Technology",
             "Leading social media and virtual reality technology company",
             "1 Meta Way, Menlo Park, CA 94025", "+1-650-543-4800",
             "investor@meta.com", "https://meta.com", 2004, admin_id="user-2"),
    _company("company-2", "ByteDance Ltd.", "Technology",
             "Global technology company operating TikTok and other platforms",
             "5 Clunies Ross St, Acton ACT 2601, Australia", "+61-2-6100-2000",
             "contact@bytedance.com", "https://bytedance.com", 2012),
    _company("company-3", "Brookfield Asset Management", "Real Estate",
             "Global alternative asset manager focused on real estate and infrastructure",
             "Brookfield Place, 181 Bay Street, Toronto, ON M5J 2T3", "+1-416-363-9491",
             "info@brookfield.com", "https://brookfield.com", 1899, admin_id="user-3"),
    _company("company-4", "Tesla Inc.", "Automotive",
             "Electric vehicle and clean energy company",
             "1 Tesla Road, Austin, TX 78725", "+1-512-516-8177",
             "ir@tesla.com", "https://tesla.com", 2003),
    _company("company-5", "Coinbase Global Inc.", "Cryptocurrency",
             "Leading cryptocurrency exchange and digital asset platform",
             "100 Pine Street, San Francisco, CA 94111", "+1-888-908-7930",
             "support@coinbase.com", "https://coinbase.com", 2012),
    _company("company-6", "Vanguard Group", "Financial Services",
             "Investment management company offering mutual funds and ETFs",
             "100 Vanguard Blvd, Malvern, PA 19355", "+1-877-662-7447",
             "info@vanguard.com", "https://vanguard.com", 1975),
]


def _investment(id, name, description, investment_type, category, initial, current,
                expected_roi, actual_roi, risk, company_id, invested_on, min_inv, max_inv,
                featured, total_investors, total_invested) -> Investment:
    return Investment(
        id=id,
        name=name,
        description=description,
        investment_type=investment_type,
        category=category,
        initial_amount=Decimal(initial),
        current_value=Decimal(current),
        expected_roi=expected_roi,
        actual_roi=actual_roi,
        risk_level=risk,
        status=InvestmentStatus.ACTIVE,
        company_id=company_id,
        investment_date=date.fromisoformat(invested_on),
        min_investment=Decimal(min_inv),
        max_investment=Decimal(max_inv),
        featured=featured,
        total_investors=total_investors,
        total_invested=Decimal(total_invested),
        created_at=_ts(invested_on),
    )


DEMO_INVESTMENTS: List[Investment] = [
    _investment("inv-1", "Meta Growth Fund Series A",
                "Strategic investment in Meta's virtual reality and metaverse initiatives",
                "Stocks", "Technology", 250000, 312500, 20.0, 25.0, RiskLevel.MEDIUM,
                "company-1", "2024-01-15", 10000, 500000, True, 12, 1250000),
    _investment("inv-2", "TikTok Global Expansion Fund",
                "Investment in ByteDance's global expansion and content creation platform",
                "Stocks", "Technology", 180000, 234000, 25.0, 30.0, RiskLevel.HIGH,
                "company-2", "2024-02-01", 15000, 300000, True, 8, 890000),
    _investment("inv-3", "Manhattan Commercial Real Estate",
                "Premium commercial real estate portfolio in Manhattan financial district",
                "Real Estate", "Commercial", 500000, 575000, 12.0, 15.0, RiskLevel.MEDIUM,
                "company-3", "2023-11-20", 50000, 1000000, True, 15, 2750000),
    _investment("inv-4", "Tesla Energy Storage Systems",
                "Investment in Tesla's renewable energy and battery storage technology",
                "Stocks", "Clean Energy", 320000, 384000, 18.0, 20.0, RiskLevel.MEDIUM,
                "company-4", "2024-03-10", 25000, 750000, True, 20, 1680000),
    _investment("inv-5", "Crypto Portfolio Diversified Fund",
                "Diversified cryptocurrency portfolio including Bitcoin, Ethereum, and altcoins",
                "Cryptocurrency", "Digital Assets", 150000, 127500, 35.0, -15.0,
                RiskLevel.VERY_HIGH, "company-5", "2024-01-05", 5000, 200000, False, 25, 980000),
    _investment("inv-6", "Vanguard S&P 500 ETF Portfolio",
                "Low-cost index fund tracking the S&P 500 for long-term growth",
                "ETF", "Index Fund", 100000, 112000, 10.0, 12.0, RiskLevel.LOW,
                "company-6", "2023-12-01", 1000, 500000, False, 45, 3200000),
    _investment("inv-7", "Green Energy Infrastructure Bond",
                "Government-backed bonds for renewable energy infrastructure projects",
                "Bonds", "Government", 200000, 210000, 5.0, 5.0, RiskLevel.LOW,
                "company-3", "2024-02-15", 10000, 1000000, False, 30, 1850000),
    _investment("inv-8", "Silicon Valley Tech Startup Fund",
                "Early-stage venture capital fund investing in AI and fintech startups",
                "Venture Capital", "Technology", 400000, 520000, 40.0, 30.0,
                RiskLevel.VERY_HIGH, "company-1", "2023-09-01", 100000, 2000000, True, 8, 2400000),
    _investment("inv-9", "Luxury Residential Real Estate Fund",
                "High-end residential properties in Los Angeles and Miami markets",
                "Real Estate", "Residential", 350000, 385000, 8.0, 10.0, RiskLevel.MEDIUM,
                "company-3", "2024-01-20", 75000, 1500000, True, 12, 1890000),
    _investment("inv-10", "Gold and Precious Metals Fund",
                "Physical gold and precious metals investment for portfolio diversification",
                "Commodities", "Precious Metals", 120000, 132000, 6.0, 10.0, RiskLevel.MEDIUM,
                "company-6", "2023-10-15", 5000, 300000, False, 35, 1450000),
]


def _subscription(id, user_id, investment_id, amount, invested_on, current_value) -> InvestorInvestment:
    profit_loss = current_value - amount
    return InvestorInvestment(
        id=id,
        user_id=user_id,
        investment_id=investment_id,
        amount=Decimal(amount),
        current_value=Decimal(current_value),
        profit_loss=Decimal(profit_loss),
        profit_loss_percent=calculate_roi(profit_loss, amount),
        status=SubscriptionStatus.ACTIVE,
        investment_date=date.fromisoformat(invested_on),
        created_at=_ts(invested_on),
    )


DEMO_INVESTOR_INVESTMENTS: List[InvestorInvestment] = [
    _subscription("ii-1", "user-4", "inv-1", 50000, "2024-01-20", 62500),
    _subscription("ii-2", "user-4", "inv-2", 30000, "2024-02-05", 39000),
    _subscription("ii-3", "user-4", "inv-3", 75000, "2023-12-01", 86250),
    _subscription("ii-4", "user-4", "inv-6", 25000, "2023-12-15", 28000),
    _subscription("ii-5", "user-5", "inv-1", 40000, "2024-01-25", 50000),
    _subscription("ii-6", "user-5", "inv-4", 60000, "2024-03-15", 72000),
    _subscription("ii-7", "user-5", "inv-5", 20000, "2024-01-10", 17000),
    _subscription("ii-8", "user-6", "inv-8", 150000, "2023-09-15", 195000),
    _subscription("ii-9", "user-6", "inv-9", 100000, "2024-02-01", 110000),
    _subscription("ii-10", "user-6", "inv-10", 35000, "2023-11-01", 38500),
]

DEMO_INVESTOR_PORTFOLIO: List[InvestorInvestment] = [
    _subscription("demo-ii-1", DEMO_INVESTOR_ID, "inv-1", 75000, "2024-01-20", 93750),
    _subscription("demo-ii-2", DEMO_INVESTOR_ID, "inv-3", 100000, "2023-12-01", 115000),
    _subscription("demo-ii-3", DEMO_INVESTOR_ID, "inv-4", 50000, "2024-03-15", 60000),
    _subscription("demo-ii-4", DEMO_INVESTOR_ID, "inv-6", 25000, "2023-12-20", 28000),
]


def _apply_company_snapshots() -> None:
    """Fill each company's profit/loss/ROI card from its investments."""
    for company in DEMO_COMPANIES:
        profit, loss, roi = company_snapshot(
            inv for inv in DEMO_INVESTMENTS if inv.company_id == company.id
        )
        company.profit = Decimal(str(round(profit, 2)))
        company.loss = Decimal(str(round(loss, 2)))
        company.roi = roi


_apply_company_snapshots()


@functools.lru_cache(maxsize=1)
def demo_performance_data() -> Dict[str, List[PerformanceDataPoint]]:
    """90-day synthesized series for every demo investment (built once)."""
    return {
        inv.id: generate_performance_data(inv.id, inv.initial_amount, inv.current_value)
        for inv in DEMO_INVESTMENTS
    }


def get_dashboard_metrics() -> DashboardMetrics:
    return dashboard_metrics(DEMO_INVESTMENTS, DEMO_USERS, DEMO_COMPANIES)


def get_investor_portfolio(user_id: str) -> InvestorPortfolio:
    """Portfolio for a demo investor; unknown ids get an empty portfolio."""
    if user_id == DEMO_INVESTOR_ID:
        return investor_portfolio(user_id, DEMO_INVESTOR_PORTFOLIO, DEMO_INVESTMENTS)
    return investor_portfolio(user_id, DEMO_INVESTOR_INVESTMENTS, DEMO_INVESTMENTS)
