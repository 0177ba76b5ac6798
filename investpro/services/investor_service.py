"""
Investor service: onboarding, approval and subscriptions.

New investors start ``pending``; only an approved (``active``) investor may
subscribe, and only to an ``Active`` investment within its min/max bounds.

Duplicate emails are caught by a pre-check and, for the race where two
requests pass the check together, by translating the unique-constraint
``IntegrityError`` into the same 409.

Caching:
    ``list_investors`` reads through the TTL cache under ``investors:``.
    Subscribing and withdrawing also invalidate ``investments:`` because
    they move the investment's ``total_investors`` / ``total_invested``.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Set

from sqlalchemy.exc import IntegrityError

from investpro.core.cache import cache
from investpro.core.exceptions import (
    BusinessRuleViolation,
    ConflictException,
    NotFoundException,
)
from investpro.models.investment import Investment, InvestmentStatus
from investpro.models.subscription import InvestorInvestment, SubscriptionStatus
from investpro.models.user import User, UserRole, UserStatus
from investpro.repositories.investment_repo import InvestmentRepository
from investpro.repositories.subscription_repo import SubscriptionRepository
from investpro.repositories.user_repo import UserRepository
from investpro.schemas.user import InvestorCreate, SubscriptionCreate

logger = logging.getLogger(__name__)

INVESTMENT_CACHE_PREFIX = "investments:"


class InvestorService:
    """Investor lifecycle plus the subscriptions investors hold."""

    CACHE_PREFIX = "investors:"

    def __init__(
        self,
        user_repo: UserRepository,
        investment_repo: InvestmentRepository,
        subscription_repo: SubscriptionRepository,
    ):
        self._repo = user_repo
        self._investment_repo = investment_repo
        self._subscription_repo = subscription_repo

    # ── Queries ──

    async def list_investors(
        self, status: Optional[UserStatus] = None, skip: int = 0, limit: int = 100
    ) -> List[User]:
        """A page of investors, optionally filtered by status (cache-backed)."""
        status_key = status.value if status else "*"
        cache_key = f"{self.CACHE_PREFIX}list:{status_key}:{skip}:{limit}"
        cached = cache.get(cache_key)
        if cached is not None:
            return cached

        investors = await self._repo.get_by_role(
            UserRole.INVESTOR, status=status, skip=skip, limit=limit
        )
        cache.set(cache_key, investors)
        return investors

    async def get_investor(self, user_id: str) -> User:
        """Raises :class:`NotFoundException` unless ``user_id`` is an investor."""
        user = await self._repo.get(user_id)
        if not user or user.role != UserRole.INVESTOR:
            raise NotFoundException("Investor", user_id)
        return user

    async def list_subscriptions(self, user_id: str) -> List[InvestorInvestment]:
        await self.get_investor(user_id)
        return await self._subscription_repo.get_by_user(user_id)

    # ── Lifecycle ──

    async def create_investor(self, investor_in: InvestorCreate) -> User:
        """
        Register a new investor awaiting approval.

        Raises :class:`ConflictException` if the email is already taken.
        """
        email = str(investor_in.email).lower()
        existing = await self._repo.get_by_email(email)
        if existing:
            raise ConflictException(f"A user with email '{email}' already exists")

        investor = User(
            first_name=investor_in.first_name,
            last_name=investor_in.last_name.strip(),
            email=email,
            role=UserRole.INVESTOR,
            status=UserStatus.PENDING,
        )
        try:
            created = await self._repo.create(investor)
        except IntegrityError:
            await self._repo.db.rollback()
            logger.warning("IntegrityError caught for duplicate email '%s'", email)
            raise ConflictException(f"A user with email '{email}' already exists")

        cache.invalidate(self.CACHE_PREFIX)
        logger.info("Created investor %s (%s)", created.id, created.email)
        return created

    async def approve_investor(self, user_id: str) -> User:
        return await self._set_status(user_id, UserStatus.ACTIVE)

    async def reject_investor(self, user_id: str) -> User:
        return await self._set_status(user_id, UserStatus.REJECTED)

    async def deactivate_investor(self, user_id: str) -> User:
        return await self._set_status(user_id, UserStatus.INACTIVE)

    async def _set_status(self, user_id: str, status: UserStatus) -> User:
        investor = await self.get_investor(user_id)
        _validate_status_transition(investor.status, status)

        investor.status = status
        investor.updated_at = datetime.now(timezone.utc)
        updated = await self._repo.update(investor)
        cache.invalidate(self.CACHE_PREFIX)
        logger.info("Investor %s is now %s", user_id, status.value)
        return updated

    # ── Subscriptions ──

    async def invest(self, user_id: str, sub_in: SubscriptionCreate) -> InvestorInvestment:
        """
        Subscribe an investor to an investment.

        Validation sequence:
        1. The investor must exist (404) and be ``active`` (422).
        2. The investment must exist (404) and be ``Active`` (422).
        3. The amount must lie within the investment's min/max bounds (422).

        The new subscription starts at its own amount, so its profit/loss is
        zero. The investment's subscriber count and total are bumped.
        """
        investor = await self.get_investor(user_id)
        if investor.status != UserStatus.ACTIVE:
            raise BusinessRuleViolation(
                f"Investor '{investor.email}' is {investor.status.value} and cannot invest "
                "until approved"
            )

        investment = await self._investment_repo.get(sub_in.investment_id)
        if not investment:
            raise NotFoundException("Investment", sub_in.investment_id)
        if investment.status != InvestmentStatus.ACTIVE:
            raise BusinessRuleViolation(
                f"Investment '{investment.name}' is {investment.status.value} "
                "and no longer accepts subscriptions"
            )
        _validate_amount(investment, sub_in.amount)

        already_holding = await self._active_holders(investment.id)

        subscription = InvestorInvestment(
            user_id=user_id,
            investment_id=investment.id,
            amount=sub_in.amount,
            current_value=sub_in.amount,
            profit_loss=Decimal("0"),
            profit_loss_percent=0.0,
            status=SubscriptionStatus.ACTIVE,
        )
        try:
            created = await self._subscription_repo.create(subscription)
        except IntegrityError as exc:
            await self._subscription_repo.db.rollback()
            logger.warning(
                "IntegrityError creating subscription (investor=%s, investment=%s): %s",
                user_id,
                investment.id,
                exc,
            )
            raise BusinessRuleViolation(
                "Subscription could not be created: the investor or investment may have "
                "been removed, or a database constraint was violated."
            )

        if user_id not in already_holding:
            investment.total_investors += 1
        investment.total_invested = (investment.total_invested or Decimal("0")) + sub_in.amount
        await self._investment_repo.update(investment)

        cache.invalidate(self.CACHE_PREFIX, INVESTMENT_CACHE_PREFIX)
        logger.info(
            "Investor %s subscribed %s to investment %s",
            user_id,
            sub_in.amount,
            investment.id,
        )
        return created

    async def withdraw(self, user_id: str, subscription_id: str) -> InvestorInvestment:
        """Sell an active subscription; the investment's totals shrink."""
        await self.get_investor(user_id)
        subscription = await self._subscription_repo.get(subscription_id)
        if not subscription or subscription.user_id != user_id:
            raise NotFoundException("Subscription", subscription_id)
        if subscription.status != SubscriptionStatus.ACTIVE:
            raise BusinessRuleViolation(
                f"Subscription '{subscription_id}' is {subscription.status.value} "
                "and cannot be withdrawn"
            )

        subscription.status = SubscriptionStatus.SOLD
        sold = await self._subscription_repo.update(subscription)

        investment = await self._investment_repo.get(sold.investment_id)
        if investment is not None:
            if user_id not in await self._active_holders(investment.id):
                investment.total_investors = max(investment.total_investors - 1, 0)
            investment.total_invested = max(
                (investment.total_invested or Decimal("0")) - sold.amount, Decimal("0")
            )
            await self._investment_repo.update(investment)

        cache.invalidate(self.CACHE_PREFIX, INVESTMENT_CACHE_PREFIX)
        logger.info("Investor %s withdrew subscription %s", user_id, subscription_id)
        return sold

    async def _active_holders(self, investment_id: str) -> Set[str]:
        subscriptions = await self._subscription_repo.get_by_investments([investment_id])
        return {s.user_id for s in subscriptions if s.status == SubscriptionStatus.ACTIVE}


def _validate_amount(investment: Investment, amount: Decimal) -> None:
    minimum = investment.min_investment or Decimal("0")
    if amount < minimum:
        raise BusinessRuleViolation(
            f"Minimum subscription for '{investment.name}' is {minimum}"
        )
    if investment.max_investment is not None and amount > investment.max_investment:
        raise BusinessRuleViolation(
            f"Maximum subscription for '{investment.name}' is {investment.max_investment}"
        )


# ── Status transition rules ──

_ALLOWED_TRANSITIONS: Dict[UserStatus, Set[UserStatus]] = {
    UserStatus.PENDING: {UserStatus.ACTIVE, UserStatus.REJECTED},
    UserStatus.ACTIVE: {UserStatus.INACTIVE},
    UserStatus.INACTIVE: {UserStatus.ACTIVE},
    UserStatus.REJECTED: {UserStatus.ACTIVE},
}


def _validate_status_transition(current: UserStatus, requested: UserStatus) -> None:
    """
    Pending investors are approved or rejected; active ones can be
    deactivated; inactive or rejected ones can be (re)approved.
    """
    if requested not in _ALLOWED_TRANSITIONS.get(current, set()):
        raise BusinessRuleViolation(
            f"Invalid status transition: '{current.value}' -> '{requested.value}'"
        )
