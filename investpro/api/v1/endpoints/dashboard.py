"""
Role dashboard endpoints.

- GET /dashboard/metrics                Headline metrics
- GET /dashboard/superadmin             Platform-wide view
- GET /dashboard/admin/{company_id}     One company's view
- GET /dashboard/investor/{user_id}     One investor's portfolio view (``?company_id=`` to narrow)
- GET /dashboard/salesman               Investor pipeline view

Collections that fail to load are rendered as empty, never as errors.
"""

from functools import partial
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from investpro.db.session import get_db
from investpro.schemas.analytics import (
    DashboardMetrics,
    InvestorDashboard,
    RoleDashboard,
    SalesmanDashboard,
)
from investpro.schemas.common import ErrorResponse
from investpro.services.dashboard_service import DashboardService
from investpro.state.stores import DataStore

router = APIRouter()


def _get_dashboard_service(db: AsyncSession = Depends(get_db)) -> DashboardService:
    return DashboardService(partial(DataStore.for_session, db))


@router.get("/metrics", response_model=DashboardMetrics, summary="Headline metrics")
async def get_metrics(
    service: DashboardService = Depends(_get_dashboard_service),
) -> DashboardMetrics:
    return await service.metrics()


@router.get("/superadmin", response_model=RoleDashboard, summary="Superadmin dashboard")
async def get_superadmin_dashboard(
    service: DashboardService = Depends(_get_dashboard_service),
) -> RoleDashboard:
    return await service.superadmin()


@router.get(
    "/admin/{company_id}",
    response_model=RoleDashboard,
    summary="Company admin dashboard",
    responses={404: {"model": ErrorResponse, "description": "Company not found"}},
)
async def get_admin_dashboard(
    company_id: str,
    service: DashboardService = Depends(_get_dashboard_service),
) -> RoleDashboard:
    return await service.admin(company_id)


@router.get(
    "/investor/{user_id}",
    response_model=InvestorDashboard,
    summary="Investor dashboard",
    responses={404: {"model": ErrorResponse, "description": "Investor or company not found"}},
)
async def get_investor_dashboard(
    user_id: str,
    company_id: Optional[str] = Query(None, description="Only this company's investments"),
    service: DashboardService = Depends(_get_dashboard_service),
) -> InvestorDashboard:
    return await service.investor(user_id, company_id=company_id)


@router.get("/salesman", response_model=SalesmanDashboard, summary="Salesman dashboard")
async def get_salesman_dashboard(
    service: DashboardService = Depends(_get_dashboard_service),
) -> SalesmanDashboard:
    return await service.salesman()
