"""
User domain model.

One table for every dashboard role. Users are never hard-deleted; their
``status`` moves through the approval lifecycle instead.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import Field, SQLModel


class UserRole(str, Enum):
    """Dashboard roles; each one gets its own set of views."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    INVESTOR = "investor"
    SALESMAN = "salesman"


class UserStatus(str, Enum):
    """Account lifecycle. New investors start ``pending`` until approved."""

    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    REJECTED = "rejected"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """SQLModel table definition for users."""

    __tablename__ = "users"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint("length(email) > 0", name="ck_users_email_not_empty"),
    )

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=64
    )
    first_name: str = Field(max_length=100)
    last_name: str = Field(default="", max_length=100)
    email: str = Field(unique=True, index=True, max_length=320)
    role: UserRole = Field(index=True)
    status: UserStatus = Field(default=UserStatus.PENDING, index=True)
    created_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )
    updated_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )
    last_login: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User id={self.id} email='{self.email}' role={self.role.value}>"
