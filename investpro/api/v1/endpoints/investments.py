"""
Investment API endpoints.

- GET    /investments                       List investments (``company_id`` filter)
- POST   /investments                       Create an investment
- PUT    /investments                       Update an investment (id in the body)
- GET    /investments/{id}                  Retrieve an investment
- DELETE /investments/{id}                  Delete an investment without subscribers
- GET    /investments/{id}/performance      Synthesized daily market values
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from investpro.db.session import get_db
from investpro.models.company import Company
from investpro.models.investment import Investment
from investpro.models.subscription import InvestorInvestment
from investpro.repositories.company_repo import CompanyRepository
from investpro.repositories.investment_repo import InvestmentRepository
from investpro.repositories.subscription_repo import SubscriptionRepository
from investpro.schemas.analytics import PerformanceDataPoint
from investpro.schemas.common import ErrorResponse, ValidationErrorResponse
from investpro.schemas.investment import (
    InvestmentCreate,
    InvestmentResponse,
    InvestmentUpdate,
)
from investpro.services.investment_service import InvestmentService

router = APIRouter()


# ── Dependency injection ──


def _get_investment_service(db: AsyncSession = Depends(get_db)) -> InvestmentService:
    """
    Build an InvestmentService wired to the current request's DB session.

    The company repository checks ownership and keeps company snapshots
    current; the subscription repository guards deletes.
    """
    return InvestmentService(
        invest_repo=InvestmentRepository(Investment, db),
        company_repo=CompanyRepository(Company, db),
        subscription_repo=SubscriptionRepository(InvestorInvestment, db),
    )


# ── Endpoints ──


@router.get(
    "",
    response_model=List[InvestmentResponse],
    summary="List investments",
    description="Optionally restricted to one company with ``company_id``.",
    responses={404: {"model": ErrorResponse, "description": "Company not found"}},
)
async def list_investments(
    company_id: Optional[str] = Query(None, description="Only this company's investments"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Max records to return"),
    service: InvestmentService = Depends(_get_investment_service),
) -> List[InvestmentResponse]:
    return await service.list_investments(company_id=company_id, skip=skip, limit=limit)


@router.post(
    "",
    response_model=InvestmentResponse,
    status_code=201,
    summary="Create an investment",
    responses={
        404: {"model": ErrorResponse, "description": "Company not found"},
        422: {"model": ValidationErrorResponse, "description": "Validation error"},
    },
)
async def create_investment(
    investment: InvestmentCreate,
    service: InvestmentService = Depends(_get_investment_service),
) -> InvestmentResponse:
    return await service.create_investment(investment)


@router.put(
    "",
    response_model=InvestmentResponse,
    summary="Update an investment",
    responses={
        404: {"model": ErrorResponse, "description": "Investment or company not found"},
        422: {"model": ValidationErrorResponse, "description": "Validation error"},
    },
)
async def update_investment(
    investment_update: InvestmentUpdate,
    service: InvestmentService = Depends(_get_investment_service),
) -> InvestmentResponse:
    return await service.update_investment(investment_update)


@router.get(
    "/{investment_id}",
    response_model=InvestmentResponse,
    summary="Get a specific investment",
    responses={404: {"model": ErrorResponse, "description": "Investment not found"}},
)
async def get_investment(
    investment_id: str,
    service: InvestmentService = Depends(_get_investment_service),
) -> InvestmentResponse:
    return await service.get_investment(investment_id)


@router.delete(
    "/{investment_id}",
    status_code=204,
    summary="Delete an investment",
    responses={
        404: {"model": ErrorResponse, "description": "Investment not found"},
        422: {"model": ErrorResponse, "description": "Investment has subscribers"},
    },
)
async def delete_investment(
    investment_id: str,
    service: InvestmentService = Depends(_get_investment_service),
) -> Response:
    await service.delete_investment(investment_id)
    return Response(status_code=204)


@router.get(
    "/{investment_id}/performance",
    response_model=List[PerformanceDataPoint],
    summary="Daily performance series",
    description=(
        "``days + 1`` daily points trending from the initial amount to the "
        "current value with random noise. Regenerated on every call."
    ),
    responses={404: {"model": ErrorResponse, "description": "Investment not found"}},
)
async def get_performance(
    investment_id: str,
    days: Optional[int] = Query(None, ge=1, le=365, description="Days of history"),
    service: InvestmentService = Depends(_get_investment_service),
) -> List[PerformanceDataPoint]:
    return await service.get_performance(investment_id, days=days)
