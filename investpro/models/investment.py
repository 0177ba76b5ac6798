"""
Investment domain model.

An investment product offered by a company. ``initial_amount`` and
``current_value`` drive every ROI figure on the dashboards; ``status``
decides whether investors may still subscribe.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index
from sqlmodel import Field, SQLModel


class InvestmentStatus(str, Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    PAUSED = "Paused"
    CANCELLED = "Cancelled"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"


class Investment(SQLModel, table=True):
    """
    SQLModel table definition for investments.

    ``ix_investments_company_status`` covers the admin dashboard query
    (one company's investments, filtered by status).
    """

    __tablename__ = "investments"  # type: ignore[assignment]

    __table_args__ = (
        Index("ix_investments_company_status", "company_id", "status"),
        CheckConstraint("initial_amount >= 0", name="ck_investments_initial_non_negative"),
        CheckConstraint("current_value >= 0", name="ck_investments_value_non_negative"),
    )

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=64
    )
    name: str = Field(index=True, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)
    investment_type: str = Field(index=True, max_length=100)
    category: Optional[str] = Field(default=None, max_length=100)
    initial_amount: Decimal = Field(max_digits=20, decimal_places=2)
    current_value: Decimal = Field(max_digits=20, decimal_places=2)
    expected_roi: float = 0.0
    actual_roi: float = 0.0
    risk_level: RiskLevel = Field(default=RiskLevel.MEDIUM)
    status: InvestmentStatus = Field(default=InvestmentStatus.ACTIVE, index=True)
    company_id: str = Field(foreign_key="companies.id", index=True, ondelete="RESTRICT")
    investment_date: date = Field(default_factory=date.today)
    min_investment: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=2)
    max_investment: Optional[Decimal] = Field(
        default=None, max_digits=20, decimal_places=2
    )
    featured: bool = False
    total_investors: int = 0
    total_invested: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=2)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    def __repr__(self) -> str:
        return (
            f"<Investment id={self.id} name='{self.name}' "
            f"status={self.status.value} value={self.current_value}>"
        )
