"""
Read-only demo endpoints backed by the static dataset in
:mod:`investpro.demo_data`; no database access.

- GET /demo/metrics
- GET /demo/investments
- GET /demo/portfolio/{user_id}
- GET /demo/performance/{investment_id}
"""

from typing import List

from fastapi import APIRouter

from investpro import demo_data
from investpro.core.exceptions import NotFoundException
from investpro.schemas.analytics import DashboardMetrics, InvestorPortfolio, PerformanceDataPoint
from investpro.schemas.common import ErrorResponse
from investpro.schemas.investment import InvestmentResponse

router = APIRouter()


@router.get("/metrics", response_model=DashboardMetrics, summary="Demo dashboard metrics")
async def get_demo_metrics() -> DashboardMetrics:
    return demo_data.get_dashboard_metrics()


@router.get(
    "/investments",
    response_model=List[InvestmentResponse],
    summary="Demo investments",
)
async def list_demo_investments() -> List[InvestmentResponse]:
    return demo_data.DEMO_INVESTMENTS


@router.get(
    "/portfolio/{user_id}",
    response_model=InvestorPortfolio,
    summary="Demo investor portfolio",
    description="Unknown investors get an empty, zeroed portfolio.",
)
async def get_demo_portfolio(user_id: str) -> InvestorPortfolio:
    return demo_data.get_investor_portfolio(user_id)


@router.get(
    "/performance/{investment_id}",
    response_model=List[PerformanceDataPoint],
    summary="Demo performance series",
    responses={404: {"model": ErrorResponse, "description": "Investment not found"}},
)
async def get_demo_performance(investment_id: str) -> List[PerformanceDataPoint]:
    series = demo_data.demo_performance_data().get(investment_id)
    if series is None:
        raise NotFoundException("Investment", investment_id)
    return series
