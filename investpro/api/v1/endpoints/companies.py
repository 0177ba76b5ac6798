"""
Company API endpoints.

- GET    /companies                     List companies
- POST   /companies                     Create a company (form-validated)
- PUT    /companies                     Update a company (id in the body)
- GET    /companies/{id}                Retrieve a company
- DELETE /companies/{id}                Delete a company without investments
- PUT    /companies/{id}/admin          Assign or unassign the company admin
- POST   /companies/validate            Validate a whole company form
- POST   /companies/validate/{field}    Validate a single form field
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from investpro.db.session import get_db
from investpro.models.company import Company
from investpro.models.investment import Investment
from investpro.models.user import User
from investpro.repositories.company_repo import CompanyRepository
from investpro.repositories.investment_repo import InvestmentRepository
from investpro.repositories.user_repo import UserRepository
from investpro.schemas.common import ErrorResponse, ValidationErrorResponse, ValidationResult
from investpro.schemas.company import (
    AdminAssignment,
    CompanyCreate,
    CompanyForm,
    CompanyResponse,
    CompanyUpdate,
)
from investpro.services.company_service import CompanyService
from investpro.services.validation import validate_company_form, validate_field

router = APIRouter()


# ── Dependency injection ──


def _get_company_service(db: AsyncSession = Depends(get_db)) -> CompanyService:
    """Build a CompanyService wired to the current request's DB session."""
    return CompanyService(
        CompanyRepository(Company, db),
        InvestmentRepository(Investment, db),
        UserRepository(User, db),
    )


# ── Form validation ──


@router.post(
    "/validate",
    response_model=ValidationResult,
    summary="Validate a company form",
    description="Checks every field and returns all errors at once; ``null`` reads as blank.",
)
async def validate_form(form: CompanyForm) -> ValidationResult:
    return validate_company_form(form)


@router.post(
    "/validate/{field}",
    response_model=ValidationResult,
    summary="Validate one company form field",
    description=(
        "Live feedback for a single input. The body is the whole form; only "
        "``field`` is checked. Unknown fields are always valid."
    ),
)
async def validate_form_field(
    field: str,
    form: Dict[str, Any] = Body(default={}),
) -> ValidationResult:
    error = validate_field(field, form.get(field), form)
    return ValidationResult(is_valid=error is None, errors=[error] if error else [])


# ── CRUD ──


@router.get(
    "",
    response_model=List[CompanyResponse],
    summary="List all companies",
)
async def list_companies(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Max records to return"),
    service: CompanyService = Depends(_get_company_service),
) -> List[CompanyResponse]:
    return await service.list_companies(skip=skip, limit=limit)


@router.post(
    "",
    response_model=CompanyResponse,
    status_code=201,
    summary="Create a new company",
    responses={
        422: {"model": ValidationErrorResponse, "description": "Validation error"},
    },
)
async def create_company(
    company: CompanyCreate,
    service: CompanyService = Depends(_get_company_service),
) -> CompanyResponse:
    return await service.create_company(company)


@router.put(
    "",
    response_model=CompanyResponse,
    summary="Update an existing company",
    description=(
        "Full replacement of the form fields. The body carries the company "
        "``id``. The admin and performance snapshot are not changed."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Company not found"},
        422: {"model": ValidationErrorResponse, "description": "Validation error"},
    },
)
async def update_company(
    company_update: CompanyUpdate,
    service: CompanyService = Depends(_get_company_service),
) -> CompanyResponse:
    return await service.update_company(company_update)


@router.get(
    "/{company_id}",
    response_model=CompanyResponse,
    summary="Get a specific company",
    responses={404: {"model": ErrorResponse, "description": "Company not found"}},
)
async def get_company(
    company_id: str,
    service: CompanyService = Depends(_get_company_service),
) -> CompanyResponse:
    return await service.get_company(company_id)


@router.delete(
    "/{company_id}",
    status_code=204,
    summary="Delete a company",
    responses={
        404: {"model": ErrorResponse, "description": "Company not found"},
        422: {"model": ErrorResponse, "description": "Company still has investments"},
    },
)
async def delete_company(
    company_id: str,
    service: CompanyService = Depends(_get_company_service),
) -> Response:
    await service.delete_company(company_id)
    return Response(status_code=204)


@router.put(
    "/{company_id}/admin",
    response_model=CompanyResponse,
    summary="Assign a company admin",
    description="Set ``admin_id`` to a user with the admin role, or null to unassign.",
    responses={
        404: {"model": ErrorResponse, "description": "Company or user not found"},
        409: {"model": ErrorResponse, "description": "Admin already runs another company"},
        422: {"model": ErrorResponse, "description": "User is not an admin"},
    },
)
async def assign_admin(
    company_id: str,
    assignment: AdminAssignment,
    service: CompanyService = Depends(_get_company_service),
) -> CompanyResponse:
    return await service.assign_admin(company_id, assignment.admin_id)
