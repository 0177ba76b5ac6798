"""
Pydantic schemas for investment requests and responses.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from investpro.models.investment import InvestmentStatus, RiskLevel


class InvestmentBase(BaseModel):
    """Fields common to investment creation and update payloads."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Meta Growth Fund Series A"])
    description: Optional[str] = Field(default=None, max_length=2000)
    investment_type: str = Field(
        ..., min_length=1, max_length=100, description="Asset type", examples=["Stocks"]
    )
    category: Optional[str] = Field(default=None, max_length=100)
    initial_amount: Decimal = Field(..., ge=0, examples=[250_000])
    current_value: Decimal = Field(..., ge=0, examples=[312_500])
    expected_roi: float = 0.0
    actual_roi: float = 0.0
    risk_level: RiskLevel = RiskLevel.MEDIUM
    status: InvestmentStatus = InvestmentStatus.ACTIVE
    company_id: str = Field(..., min_length=1)
    investment_date: date = Field(default_factory=date.today)
    min_investment: Decimal = Field(default=Decimal("0"), ge=0)
    max_investment: Optional[Decimal] = Field(default=None, gt=0)
    featured: bool = False

    @model_validator(mode="after")
    def _check_subscription_bounds(self) -> "InvestmentBase":
        if self.max_investment is not None and self.max_investment < self.min_investment:
            raise ValueError("max_investment must not be below min_investment")
        return self


class InvestmentCreate(InvestmentBase):
    """Schema for ``POST /investments``."""

    pass


class InvestmentUpdate(InvestmentBase):
    """Schema for ``PUT /investments`` (full replacement, id in the body)."""

    id: str = Field(..., min_length=1)


class InvestmentResponse(InvestmentBase):
    """Schema returned by investment endpoints and attached to portfolios."""

    id: str
    total_investors: int = 0
    total_invested: Decimal = Decimal("0")
    created_at: Optional[datetime] = None

    @field_serializer(
        "initial_amount", "current_value", "min_investment", "max_investment", "total_invested"
    )
    @classmethod
    def _money_as_number(cls, v: Optional[Decimal]) -> Optional[float]:
        """Serialize Decimal amounts as JSON numbers, not strings."""
        return None if v is None else float(v)

    model_config = ConfigDict(from_attributes=True)
