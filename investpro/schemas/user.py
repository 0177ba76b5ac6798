"""
Pydantic schemas for users, investors and their subscriptions.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer, field_validator

from investpro.models.subscription import SubscriptionStatus
from investpro.models.user import UserRole, UserStatus


class InvestorCreate(BaseModel):
    """Schema for ``POST /investors``. New investors await approval."""

    first_name: str = Field(..., min_length=1, max_length=100, examples=["David"])
    last_name: str = Field(default="", max_length=100, examples=["Thompson"])
    email: EmailStr = Field(..., examples=["david.thompson@investor.com"])

    @field_validator("first_name")
    @classmethod
    def validate_first_name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("first_name must not be blank")
        return v.strip()


class UserResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    role: UserRole
    status: UserStatus
    created_at: datetime
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SubscriptionCreate(BaseModel):
    """Schema for ``POST /investors/{user_id}/investments``."""

    investment_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, examples=[50_000])


class SubscriptionResponse(BaseModel):
    id: str
    user_id: str
    investment_id: str
    amount: Decimal
    current_value: Decimal
    profit_loss: Decimal
    profit_loss_percent: float
    status: SubscriptionStatus
    investment_date: date

    @field_serializer("amount", "current_value", "profit_loss")
    @classmethod
    def _money_as_number(cls, v: Decimal) -> float:
        return float(v)

    model_config = ConfigDict(from_attributes=True)
