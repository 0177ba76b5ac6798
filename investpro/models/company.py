"""
Company domain model.

A company (the dashboard's "sub-company") owns investments and carries a
performance snapshot (profit, loss, ROI) shown on company cards. At most
one admin is assigned to a company.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, SQLModel


class CompanyStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class Company(SQLModel, table=True):
    """SQLModel table definition for companies."""

    __tablename__ = "companies"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_companies_name_not_empty"),
    )

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=64
    )
    name: str = Field(index=True, max_length=100)
    industry: str = Field(index=True, max_length=100)
    category: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = Field(default=None, max_length=1000)
    contact_email: str = Field(max_length=320)
    contact_phone: Optional[str] = Field(default=None, max_length=32)
    website: Optional[str] = Field(default=None, max_length=2048)
    address: Optional[str] = Field(default=None, max_length=200)
    established_date: Optional[date] = None
    status: CompanyStatus = Field(default=CompanyStatus.ACTIVE, index=True)
    admin_id: Optional[str] = Field(
        default=None,
        foreign_key="users.id",
        unique=True,
        ondelete="SET NULL",
    )

    # ── Performance snapshot ──
    profit: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=2)
    loss: Decimal = Field(default=Decimal("0"), max_digits=20, decimal_places=2)
    roi: float = 0.0

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    def __repr__(self) -> str:
        return f"<Company id={self.id} name='{self.name}' status={self.status.value}>"
