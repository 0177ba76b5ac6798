"""
Company service: business logic for the companies the dashboard manages.

Create and update run the company form validator and reject with
:class:`FormValidationError` carrying every field error. A company that
still has investments cannot be deleted. Only users with the ``admin``
role can be assigned to a company, and an admin runs at most one.

Caching:
    ``list_companies`` and ``get_company`` read through the TTL cache;
    every write invalidates the ``companies:`` prefix.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import DataError, IntegrityError

from investpro.core.cache import cache
from investpro.core.exceptions import (
    BusinessRuleViolation,
    ConflictException,
    FormValidationError,
    NotFoundException,
)
from investpro.models.company import Company
from investpro.models.user import UserRole
from investpro.repositories.company_repo import CompanyRepository
from investpro.repositories.investment_repo import InvestmentRepository
from investpro.repositories.user_repo import UserRepository
from investpro.schemas.company import CompanyCreate, CompanyUpdate
from investpro.services.validation import validate_company_form

logger = logging.getLogger(__name__)

# Form fields stored as NULL when submitted blank.
_OPTIONAL_TEXT = ("category", "description", "contact_phone", "website", "address")


def _normalized(data: dict) -> dict:
    for key, value in data.items():
        if isinstance(value, str):
            data[key] = value.strip()
    for key in _OPTIONAL_TEXT:
        if data.get(key) == "":
            data[key] = None
    return data


class CompanyService:
    """CRUD, validation and admin assignment for :class:`Company`."""

    CACHE_PREFIX = "companies:"

    def __init__(
        self,
        company_repo: CompanyRepository,
        investment_repo: InvestmentRepository,
        user_repo: UserRepository,
    ):
        self._repo = company_repo
        self._investment_repo = investment_repo
        self._user_repo = user_repo

    # ── Queries ──

    async def list_companies(self, skip: int = 0, limit: int = 100) -> List[Company]:
        cache_key = f"{self.CACHE_PREFIX}list:{skip}:{limit}"
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

        companies = await self._repo.get_all(skip=skip, limit=limit)
        cache.set(cache_key, companies)
        return companies

    async def get_company(self, company_id: str) -> Company:
        """Raises :class:`NotFoundException` if the company does not exist."""
        cache_key = f"{self.CACHE_PREFIX}{company_id}"
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

        company = await self._repo.get(company_id)
        if not company:
            raise NotFoundException("Company", company_id)
        cache.set(cache_key, company)
        return company

    # ── Commands ──

    async def create_company(self, company_in: CompanyCreate) -> Company:
        """Validate the form and insert a new company."""
        result = validate_company_form(company_in)
        if not result.is_valid:
            raise FormValidationError(result.errors)

        company = Company(**_normalized(company_in.model_dump()))
        try:
            created = await self._repo.create(company)
        except (IntegrityError, DataError) as exc:
            await self._repo.db.rollback()
            logger.warning("Database rejected new company: %s", exc)
            raise BusinessRuleViolation(
                "Company data violates a database constraint. Check all fields."
            )
        cache.invalidate(self.CACHE_PREFIX)
        logger.info("Created company %s (%s)", created.id, created.name)
        return created

    async def update_company(self, company_update: CompanyUpdate) -> Company:
        """
        Full replacement of a company's form fields.

        The performance snapshot and the assigned admin are not part of the
        form and are left untouched.
        """
        company = await self._repo.get(company_update.id)
        if not company:
            raise NotFoundException("Company", company_update.id)

        result = validate_company_form(company_update)
        if not result.is_valid:
            raise FormValidationError(result.errors)

        for key, value in _normalized(company_update.model_dump(exclude={"id"})).items():
            setattr(company, key, value)

        try:
            updated = await self._repo.update(company)
        except (IntegrityError, DataError) as exc:
            await self._repo.db.rollback()
            logger.warning("Database rejected update of company %s: %s", company_update.id, exc)
            raise BusinessRuleViolation(
                "Company update violates a database constraint. Check all fields."
            )
        cache.invalidate(self.CACHE_PREFIX)
        logger.info("Updated company %s", updated.id)
        return updated

    async def delete_company(self, company_id: str) -> None:
        company = await self._repo.get(company_id)
        if not company:
            raise NotFoundException("Company", company_id)

        owned = await self._investment_repo.count_by_company(company_id)
        if owned:
            raise BusinessRuleViolation(
                f"Company '{company.name}' still has {owned} investment(s) and cannot be deleted"
            )

        try:
            await self._repo.delete(company_id)
        except IntegrityError as exc:
            await self._repo.db.rollback()
            logger.warning("IntegrityError deleting company %s: %s", company_id, exc)
            raise BusinessRuleViolation(
                f"Company '{company.name}' is still referenced and cannot be deleted"
            )
        cache.invalidate(self.CACHE_PREFIX, "investments:")
        logger.info("Deleted company %s", company_id)

    async def assign_admin(self, company_id: str, admin_id: Optional[str]) -> Company:
        """
        Assign ``admin_id`` to the company, or unassign with ``None``.

        Raises :class:`NotFoundException` for an unknown company or user,
        :class:`BusinessRuleViolation` when the user is not an admin and
        :class:`ConflictException` when the admin already runs another
        company.
        """
        company = await self._repo.get(company_id)
        if not company:
            raise NotFoundException("Company", company_id)

        if admin_id is not None:
            user = await self._user_repo.get(admin_id)
            if not user:
                raise NotFoundException("User", admin_id)
            if user.role != UserRole.ADMIN:
                raise BusinessRuleViolation(
                    f"User '{user.email}' has role '{user.role.value}' and cannot administer a company"
                )
            current = await self._repo.get_by_admin(admin_id)
            if current is not None and current.id != company_id:
                raise ConflictException(
                    f"User '{user.email}' already administers company '{current.name}'"
                )

        company.admin_id = admin_id
        try:
            updated = await self._repo.update(company)
        except IntegrityError:
            await self._repo.db.rollback()
            logger.warning("IntegrityError assigning admin %s to %s", admin_id, company_id)
            raise ConflictException(f"User '{admin_id}' already administers a company")
        cache.invalidate(self.CACHE_PREFIX)
        logger.info("Company %s admin set to %s", company_id, admin_id)
        return updated
