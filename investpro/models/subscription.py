"""
Investor subscription model.

Joins an investor to an investment with the amount they put in and what
it is worth now. This is the record every portfolio aggregate is built on.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, SQLModel


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    SOLD = "sold"
    PENDING = "pending"


class InvestorInvestment(SQLModel, table=True):
    """SQLModel table definition for investor subscriptions."""

    __tablename__ = "investor_investments"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_investor_investments_amount_positive"),
    )

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=64
    )
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="RESTRICT")
    investment_id: str = Field(
        foreign_key="investments.id", index=True, ondelete="RESTRICT"
    )
    amount: Decimal = Field(max_digits=20, decimal_places=2)
    current_value: Decimal = Field(max_digits=20, decimal_places=2)
    profit_loss: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=2)
    profit_loss_percent: float = 0.0
    status: SubscriptionStatus = Field(default=SubscriptionStatus.ACTIVE, index=True)
    investment_date: date = Field(default_factory=date.today)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    def __repr__(self) -> str:
        return (
            f"<InvestorInvestment id={self.id} user={self.user_id} "
            f"investment={self.investment_id} amount={self.amount}>"
        )
