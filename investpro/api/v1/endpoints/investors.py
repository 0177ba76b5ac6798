"""
Investor API endpoints.

- GET   /investors                                    List investors (``status`` filter)
- POST  /investors                                    Register an investor (pending)
- GET   /investors/{id}                               Retrieve an investor
- POST  /investors/{id}/approve                       pending/inactive/rejected -> active
- POST  /investors/{id}/reject                        pending -> rejected
- POST  /investors/{id}/deactivate                    active -> inactive
- GET   /investors/{id}/investments                   The investor's subscriptions
- POST  /investors/{id}/investments                   Subscribe to an investment
- POST  /investors/{id}/investments/{sub}/withdraw    Sell a subscription
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from investpro.db.session import get_db
from investpro.models.investment import Investment
from investpro.models.subscription import InvestorInvestment
from investpro.models.user import User, UserStatus
from investpro.repositories.investment_repo import InvestmentRepository
from investpro.repositories.subscription_repo import SubscriptionRepository
from investpro.repositories.user_repo import UserRepository
from investpro.schemas.common import ErrorResponse, ValidationErrorResponse
from investpro.schemas.user import (
    InvestorCreate,
    SubscriptionCreate,
    SubscriptionResponse,
    UserResponse,
)
from investpro.services.investor_service import InvestorService

router = APIRouter()


# ── Dependency injection ──


def _get_investor_service(db: AsyncSession = Depends(get_db)) -> InvestorService:
    """Build an InvestorService wired to the current request's DB session."""
    return InvestorService(
        UserRepository(User, db),
        InvestmentRepository(Investment, db),
        SubscriptionRepository(InvestorInvestment, db),
    )


_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Investor not found"}}
_TRANSITION = {
    **_NOT_FOUND,
    422: {"model": ErrorResponse, "description": "Invalid status transition"},
}


# ── Investors ──


@router.get(
    "",
    response_model=List[UserResponse],
    summary="List investors",
    description="Optionally filtered by account ``status``.",
)
async def list_investors(
    status: Optional[UserStatus] = Query(None, description="Only investors in this status"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Max records to return"),
    service: InvestorService = Depends(_get_investor_service),
) -> List[UserResponse]:
    return await service.list_investors(status=status, skip=skip, limit=limit)


@router.post(
    "",
    response_model=UserResponse,
    status_code=201,
    summary="Register a new investor",
    description=(
        "The investor starts ``pending`` and cannot invest until approved. "
        "A 409 Conflict is returned if the email is already in use."
    ),
    responses={
        409: {"model": ErrorResponse, "description": "Duplicate email address"},
        422: {"model": ValidationErrorResponse, "description": "Validation error"},
    },
)
async def create_investor(
    investor: InvestorCreate,
    service: InvestorService = Depends(_get_investor_service),
) -> UserResponse:
    return await service.create_investor(investor)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a specific investor",
    responses=_NOT_FOUND,
)
async def get_investor(
    user_id: str,
    service: InvestorService = Depends(_get_investor_service),
) -> UserResponse:
    return await service.get_investor(user_id)


@router.post(
    "/{user_id}/approve",
    response_model=UserResponse,
    summary="Approve an investor",
    responses=_TRANSITION,
)
async def approve_investor(
    user_id: str,
    service: InvestorService = Depends(_get_investor_service),
) -> UserResponse:
    return await service.approve_investor(user_id)


@router.post(
    "/{user_id}/reject",
    response_model=UserResponse,
    summary="Reject a pending investor",
    responses=_TRANSITION,
)
async def reject_investor(
    user_id: str,
    service: InvestorService = Depends(_get_investor_service),
) -> UserResponse:
    return await service.reject_investor(user_id)


@router.post(
    "/{user_id}/deactivate",
    response_model=UserResponse,
    summary="Deactivate an investor",
    responses=_TRANSITION,
)
async def deactivate_investor(
    user_id: str,
    service: InvestorService = Depends(_get_investor_service),
) -> UserResponse:
    return await service.deactivate_investor(user_id)


# ── Subscriptions ──


@router.get(
    "/{user_id}/investments",
    response_model=List[SubscriptionResponse],
    summary="List an investor's subscriptions",
    responses=_NOT_FOUND,
)
async def list_subscriptions(
    user_id: str,
    service: InvestorService = Depends(_get_investor_service),
) -> List[SubscriptionResponse]:
    return await service.list_subscriptions(user_id)


@router.post(
    "/{user_id}/investments",
    response_model=SubscriptionResponse,
    status_code=201,
    summary="Subscribe to an investment",
    description=(
        "The investor must be active, the investment ``Active`` and the "
        "amount within the investment's min/max bounds."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Investor or investment not found"},
        422: {"model": ErrorResponse, "description": "Subscription rule violated"},
    },
)
async def invest(
    user_id: str,
    subscription: SubscriptionCreate,
    service: InvestorService = Depends(_get_investor_service),
) -> SubscriptionResponse:
    return await service.invest(user_id, subscription)


@router.post(
    "/{user_id}/investments/{subscription_id}/withdraw",
    response_model=SubscriptionResponse,
    summary="Withdraw a subscription",
    responses={
        404: {"model": ErrorResponse, "description": "Investor or subscription not found"},
        422: {"model": ErrorResponse, "description": "Subscription is not active"},
    },
)
async def withdraw(
    user_id: str,
    subscription_id: str,
    service: InvestorService = Depends(_get_investor_service),
) -> SubscriptionResponse:
    return await service.withdraw(user_id, subscription_id)
