"""
Pydantic schemas for company requests and responses.

Field rules (required fields, formats, lengths) are deliberately not
declared here: :func:`investpro.services.validation.validate_company_form`
owns them so the API and the live form share one set of messages.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from investpro.models.company import CompanyStatus


class CompanyForm(BaseModel):
    """The company form as submitted by the dashboard; ``null`` reads as blank."""

    name: Optional[str] = ""
    industry: Optional[str] = ""
    category: Optional[str] = ""
    description: Optional[str] = ""
    contact_email: Optional[str] = ""
    contact_phone: Optional[str] = ""
    website: Optional[str] = ""
    address: Optional[str] = ""
    established_date: Optional[date] = None


class CompanyCreate(CompanyForm):
    """Schema for ``POST /companies``."""

    status: CompanyStatus = CompanyStatus.ACTIVE


class CompanyUpdate(CompanyCreate):
    """Schema for ``PUT /companies`` (full replacement, id in the body)."""

    id: str = Field(..., min_length=1)


class AdminAssignment(BaseModel):
    """Schema for ``PUT /companies/{id}/admin``."""

    admin_id: Optional[str] = Field(
        ..., description="User id of an admin, or null to unassign"
    )


class CompanyPerformance(BaseModel):
    profit: float
    loss: float
    roi: float


class CompanyResponse(BaseModel):
    """Schema returned by all company endpoints."""

    id: str
    name: str
    industry: str
    category: Optional[str] = None
    description: Optional[str] = None
    contact_email: str
    contact_phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    established_date: Optional[date] = None
    status: CompanyStatus
    admin_id: Optional[str] = None
    profit: Decimal = Field(exclude=True)
    loss: Decimal = Field(exclude=True)
    roi: float = Field(exclude=True)
    created_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def performance(self) -> CompanyPerformance:
        return CompanyPerformance(
            profit=float(self.profit), loss=float(self.loss), roi=self.roi
        )

    model_config = ConfigDict(from_attributes=True)
