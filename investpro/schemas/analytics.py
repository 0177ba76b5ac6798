"""
Schemas for derived dashboard data.

None of these are persisted; they are produced by
:mod:`investpro.services.analytics` and serialized straight to the charts.
"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from investpro.schemas.investment import InvestmentResponse
from investpro.schemas.user import SubscriptionResponse


class DashboardMetrics(BaseModel):
    total_investments: int = 0
    total_value: float = 0.0
    total_initial_value: float = 0.0
    total_profit_loss: float = 0.0
    total_roi: float = 0.0
    active_investments: int = 0
    total_investors: int = 0
    total_companies: int = 0
    total_users: int = 0


class PortfolioEntry(SubscriptionResponse):
    """A subscription with the investment it belongs to (when known)."""

    investment: Optional[InvestmentResponse] = None


class InvestorPortfolio(BaseModel):
    total_invested: float = 0.0
    total_current_value: float = 0.0
    total_profit_loss: float = 0.0
    total_profit: float = 0.0
    total_loss: float = 0.0
    total_roi: float = 0.0
    investments: List[PortfolioEntry] = Field(default_factory=list)
    investment_count: int = 0


class DistributionSlice(BaseModel):
    """One slice of a pie/donut chart."""

    name: str
    value: float
    color: str


class StatusBreakdown(BaseModel):
    status: str
    count: int
    total_value: float
    percentage: float


class AssetAllocation(BaseModel):
    asset_type: str
    value: float
    percentage: float
    count: int


class PerformanceTrendPoint(BaseModel):
    period: str
    total_investment: float
    total_return: float
    roi: float
    investment_count: int


class PerformanceDataPoint(BaseModel):
    date: date
    market_value: float
    daily_change: float
    daily_change_percent: float
    volume: Optional[int] = None


class RoleDashboard(BaseModel):
    """Everything the superadmin and admin dashboards chart."""

    metrics: DashboardMetrics
    company_distribution: List[DistributionSlice] = Field(default_factory=list)
    type_distribution: List[DistributionSlice] = Field(default_factory=list)
    status_distribution: List[StatusBreakdown] = Field(default_factory=list)
    performance_trend: List[PerformanceTrendPoint] = Field(default_factory=list)


class PerformanceMetrics(BaseModel):
    """ROI spread across an investor's subscriptions."""

    best_performing: Optional[float] = None
    worst_performing: Optional[float] = None
    average_roi: float = 0.0
    total_return: float = 0.0
    volatility: float = 0.0


class TransactionEntry(BaseModel):
    id: str
    investment_id: str
    investment_name: str
    amount: float
    investment_date: Optional[date] = None
    type: str = "investment"
    status: str


class InvestorDashboard(BaseModel):
    company_id: Optional[str] = None
    portfolio: InvestorPortfolio
    allocation: List[AssetAllocation] = Field(default_factory=list)
    distribution: List[DistributionSlice] = Field(default_factory=list)
    performance_trend: List[PerformanceTrendPoint] = Field(default_factory=list)
    performance_metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    status_counts: Dict[str, int] = Field(default_factory=dict)
    recent_transactions: List[TransactionEntry] = Field(default_factory=list)


class SalesmanDashboard(BaseModel):
    metrics: DashboardMetrics
    investors_by_status: Dict[str, int] = Field(default_factory=dict)
    total_subscribed: float = 0.0
    subscription_count: int = 0
