"""
Portfolio and dashboard aggregation.

Pure functions over in-memory collections of investments, subscriptions,
users and companies. Records may be ORM objects or plain mappings; only
the attributes a function reads need to be present.

Everything here fails soft to zero: an empty or missing collection gives
zeroed aggregates, and every ROI/percentage division returns ``0`` when
its base is not positive, so the dashboards always have finite numbers to
format.
"""

import logging
import math
import random
from collections.abc import Mapping
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from investpro.core.config import settings
from investpro.schemas.analytics import (
    AssetAllocation,
    DashboardMetrics,
    DistributionSlice,
    InvestorPortfolio,
    PerformanceDataPoint,
    PerformanceMetrics,
    PerformanceTrendPoint,
    PortfolioEntry,
    StatusBreakdown,
    TransactionEntry,
)
from investpro.schemas.investment import InvestmentResponse

logger = logging.getLogger(__name__)

# Chart colours, handed out to groups in the order the groups are first seen.
DEFAULT_PALETTE = ("#EAB308", "#10B981", "#3B82F6", "#8B5CF6", "#F59E0B")

UNKNOWN_GROUP = "Unknown"

KeyFunc = Union[str, Callable[[Any], Any]]


# ── Record access helpers ──


def _get(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def _num(record: Any, name: str) -> float:
    value = _get(record, name)
    return float(value) if value is not None else 0.0


def _label(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _resolve(key: KeyFunc, record: Any) -> Any:
    return key(record) if callable(key) else _get(record, key)


def calculate_roi(profit_loss: float, base: float) -> float:
    """Return ``profit_loss / base * 100``, or ``0`` when ``base <= 0``."""
    if base <= 0:
        return 0.0
    return profit_loss / base * 100


def _percentage(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def company_snapshot(investments: Optional[Iterable[Any]]) -> Tuple[float, float, float]:
    """
    ``(profit, loss, roi)`` for the company card.

    Profit sums the gains of investments above their initial amount, loss
    the shortfalls of those below it (as a positive number); ROI is the net
    change over the total initial amount.
    """
    profit = loss = base = 0.0
    for inv in investments or []:
        initial = _num(inv, "initial_amount")
        change = _num(inv, "current_value") - initial
        base += initial
        if change > 0:
            profit += change
        else:
            loss -= change
    return profit, loss, calculate_roi(profit - loss, base)


# ── Dashboard metrics ──


def dashboard_metrics(
    investments: Optional[Iterable[Any]],
    users: Optional[Iterable[Any]] = None,
    companies: Optional[Iterable[Any]] = None,
) -> DashboardMetrics:
    """Headline numbers for the dashboard stat cards."""
    investments = list(investments or [])
    users = list(users or [])

    total_value = sum(_num(inv, "current_value") for inv in investments)
    total_initial = sum(_num(inv, "initial_amount") for inv in investments)
    total_profit_loss = total_value - total_initial

    return DashboardMetrics(
        total_investments=len(investments),
        total_value=total_value,
        total_initial_value=total_initial,
        total_profit_loss=total_profit_loss,
        total_roi=calculate_roi(total_profit_loss, total_initial),
        active_investments=sum(
            1 for inv in investments if _label(_get(inv, "status")) == "Active"
        ),
        total_investors=sum(1 for u in users if _label(_get(u, "role")) == "investor"),
        total_companies=len(list(companies or [])),
        total_users=len(users),
    )


# ── Investor portfolio ──


def _attached_investment(investment: Any) -> Optional[InvestmentResponse]:
    """The investment as a response model, or ``None`` when it is incomplete."""
    if investment is None:
        return None
    try:
        return InvestmentResponse.model_validate(investment)
    except ValidationError as exc:
        logger.debug(
            "Not attaching investment %s: %d invalid field(s)",
            _get(investment, "id"),
            exc.error_count(),
        )
        return None


def _portfolio_entry(sub: Any, investment: Any) -> PortfolioEntry:
    amount = _num(sub, "amount")
    current_value = _num(sub, "current_value")
    profit_loss = current_value - amount
    return PortfolioEntry(
        id=str(_get(sub, "id", "")),
        user_id=str(_get(sub, "user_id", "")),
        investment_id=str(_get(sub, "investment_id", "")),
        amount=amount,
        current_value=current_value,
        profit_loss=profit_loss,
        profit_loss_percent=calculate_roi(profit_loss, amount),
        status=_get(sub, "status") or "active",
        investment_date=_as_date(_get(sub, "investment_date")) or date.today(),
        investment=_attached_investment(investment),
    )


def investor_portfolio(
    user_id: str,
    subscriptions: Optional[Iterable[Any]],
    investments: Optional[Iterable[Any]] = None,
) -> InvestorPortfolio:
    """
    Totals and line items for one investor.

    Each subscription is paired with its investment record; a subscription
    whose investment is not in ``investments`` is kept with ``investment``
    set to ``None``.
    """
    owned = [s for s in subscriptions or [] if _get(s, "user_id") == user_id]
    by_id = {_get(inv, "id"): inv for inv in investments or []}

    total_invested = sum(_num(s, "amount") for s in owned)
    total_current = sum(_num(s, "current_value") for s in owned)
    total_profit_loss = total_current - total_invested

    return InvestorPortfolio(
        total_invested=total_invested,
        total_current_value=total_current,
        total_profit_loss=total_profit_loss,
        total_profit=max(total_profit_loss, 0.0),
        total_loss=max(-total_profit_loss, 0.0),
        total_roi=calculate_roi(total_profit_loss, total_invested),
        investments=[_portfolio_entry(s, by_id.get(_get(s, "investment_id"))) for s in owned],
        investment_count=len(owned),
    )


def performance_metrics(subscriptions: Optional[Iterable[Any]]) -> PerformanceMetrics:
    """
    Spread of per-subscription ROI.

    ``volatility`` is the population standard deviation of those ROIs. With
    no subscriptions the best and worst figures are ``None`` and the rest
    are zero.
    """
    subs = list(subscriptions or [])
    if not subs:
        return PerformanceMetrics()

    rois = [
        calculate_roi(_num(s, "current_value") - _num(s, "amount"), _num(s, "amount"))
        for s in subs
    ]
    mean = sum(rois) / len(rois)
    variance = sum((roi - mean) ** 2 for roi in rois) / len(rois)
    return PerformanceMetrics(
        best_performing=max(rois),
        worst_performing=min(rois),
        average_roi=mean,
        total_return=sum(_num(s, "current_value") - _num(s, "amount") for s in subs),
        volatility=math.sqrt(variance),
    )


def subscription_status_counts(
    subscriptions: Optional[Iterable[Any]],
    statuses: Sequence[str] = ("active", "pending", "sold"),
) -> Dict[str, int]:
    """Subscriptions per status; a missing status counts as active."""
    counts = {status: 0 for status in statuses}
    for sub in subscriptions or []:
        status = _label(_get(sub, "status") or "active")
        if status in counts:
            counts[status] += 1
    return counts


def recent_transactions(
    subscriptions: Optional[Iterable[Any]],
    investments: Optional[Iterable[Any]] = None,
    limit: int = 10,
) -> List[TransactionEntry]:
    """The ``limit`` newest subscriptions; undated ones sort last."""
    names = {_get(inv, "id"): _get(inv, "name") for inv in investments or []}
    dated = [(_as_date(_get(s, "investment_date")), s) for s in subscriptions or []]
    dated.sort(key=lambda pair: pair[0] or date.min, reverse=True)
    return [
        TransactionEntry(
            id=str(_get(sub, "id", "")),
            investment_id=str(_get(sub, "investment_id", "")),
            investment_name=names.get(_get(sub, "investment_id")) or UNKNOWN_GROUP,
            amount=_num(sub, "amount"),
            investment_date=day,
            status=_label(_get(sub, "status") or "active"),
        )
        for day, sub in dated[: max(limit, 0)]
    ]


# ── Distributions ──


def distribution_breakdown(
    records: Optional[Iterable[Any]],
    key: KeyFunc,
    value: KeyFunc = "current_value",
    palette: Sequence[str] = DEFAULT_PALETTE,
) -> List[DistributionSlice]:
    """
    Group ``records`` by ``key`` and sum ``value`` per group.

    Groups come back in first-seen order and take palette colours in that
    same order, wrapping around when there are more groups than colours.
    An empty ``palette`` falls back to :data:`DEFAULT_PALETTE`.
    """
    palette = palette or DEFAULT_PALETTE
    totals: Dict[str, float] = {}
    for record in records or []:
        group = _resolve(key, record)
        name = _label(group) if group not in (None, "") else UNKNOWN_GROUP
        amount = _resolve(value, record)
        totals[name] = totals.get(name, 0.0) + (float(amount) if amount is not None else 0.0)

    return [
        DistributionSlice(name=name, value=total, color=palette[index % len(palette)])
        for index, (name, total) in enumerate(totals.items())
    ]


def status_distribution(investments: Optional[Iterable[Any]]) -> List[StatusBreakdown]:
    """Count and value of investments per status, with value share."""
    investments = list(investments or [])
    grand_total = sum(_num(inv, "current_value") for inv in investments)

    groups: Dict[str, List[float]] = {}
    for inv in investments:
        bucket = groups.setdefault(_label(_get(inv, "status")), [0, 0.0])
        bucket[0] += 1
        bucket[1] += _num(inv, "current_value")

    return [
        StatusBreakdown(
            status=status,
            count=int(count),
            total_value=total,
            percentage=_percentage(total, grand_total),
        )
        for status, (count, total) in groups.items()
    ]


def portfolio_distribution(
    subscriptions: Optional[Iterable[Any]],
    investments: Optional[Iterable[Any]],
    user_id: Optional[str] = None,
) -> List[AssetAllocation]:
    """Current value per asset type across (one investor's) subscriptions."""
    subs = [
        s for s in subscriptions or [] if user_id is None or _get(s, "user_id") == user_id
    ]
    types = {_get(inv, "id"): _get(inv, "investment_type") for inv in investments or []}
    grand_total = sum(_num(s, "current_value") for s in subs)

    groups: Dict[str, List[float]] = {}
    for sub in subs:
        asset_type = types.get(_get(sub, "investment_id")) or UNKNOWN_GROUP
        bucket = groups.setdefault(asset_type, [0.0, 0])
        bucket[0] += _num(sub, "current_value")
        bucket[1] += 1

    return [
        AssetAllocation(
            asset_type=asset_type,
            value=value,
            percentage=_percentage(value, grand_total),
            count=int(count),
        )
        for asset_type, (value, count) in groups.items()
    ]


# ── Time series ──


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _period_key(day: date, period: str) -> str:
    if period == "quarter":
        return f"{day.year}-Q{(day.month - 1) // 3 + 1}"
    if period == "year":
        return str(day.year)
    return f"{day.year}-{day.month:02d}"


def performance_trend(
    subscriptions: Optional[Iterable[Any]],
    period: str = "month",
    date_field: str = "investment_date",
) -> List[PerformanceTrendPoint]:
    """
    Capital invested and return earned per month, quarter or year.

    Subscriptions without a usable date are skipped. Periods are sorted
    chronologically.
    """
    groups: Dict[str, List[float]] = {}
    for sub in subscriptions or []:
        day = _as_date(_get(sub, date_field))
        if day is None:
            continue
        bucket = groups.setdefault(_period_key(day, period), [0.0, 0.0, 0])
        amount = _num(sub, "amount")
        bucket[0] += amount
        bucket[1] += _num(sub, "current_value") - amount
        bucket[2] += 1

    return [
        PerformanceTrendPoint(
            period=key,
            total_investment=invested,
            total_return=returned,
            roi=calculate_roi(returned, invested),
            investment_count=int(count),
        )
        for key, (invested, returned, count) in sorted(groups.items())
    ]


def generate_performance_data(
    investment_id: str,
    initial_value: float,
    final_value: float,
    days: Optional[int] = None,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
    noise: Optional[float] = None,
) -> List[PerformanceDataPoint]:
    """
    Synthesize a daily market-value series for charting.

    Produces ``days + 1`` points, oldest first, ending at ``today``. Each
    point lies on the straight line from ``initial_value`` to
    ``final_value``, moved by a uniform random factor in
    ``[-noise/2, +noise/2)`` and clamped at zero. Daily changes are taken
    against the previous synthesized point; the first point is compared
    with ``initial_value``. Monetary outputs are rounded to cents.
    """
    days = settings.PERFORMANCE_DAYS if days is None else max(days, 0)
    noise = settings.PERFORMANCE_NOISE if noise is None else noise
    rng = rng or random.Random()
    today = today or date.today()
    initial_value = float(initial_value)
    daily_trend = (float(final_value) - initial_value) / days if days else 0.0

    points: List[PerformanceDataPoint] = []
    for i in range(days, -1, -1):
        random_factor = (rng.random() - 0.5) * noise
        trend_value = initial_value + daily_trend * (days - i)
        market_value = max(0.0, trend_value + trend_value * random_factor)

        previous = points[-1].market_value if points else initial_value
        if not previous:
            previous = initial_value
        daily_change = market_value - previous

        points.append(
            PerformanceDataPoint(
                date=today - timedelta(days=i),
                market_value=round(market_value, 2),
                daily_change=round(daily_change, 2),
                daily_change_percent=round(_percentage(daily_change, previous), 2),
                volume=rng.randrange(100_000, 1_100_000),
            )
        )

    logger.debug("Generated %d performance points for %s", len(points), investment_id)
    return points
