"""
Dashboard metrics service.

Computes the owner dashboard from snapshots of members, transactions and
inventory. compute_metrics is pure: it never mutates its inputs and returns
the same result for the same inputs and as_of.

Windows:
- Month-to-date is the calendar month (and year) containing as_of.
- Expiring memberships are Active members expiring 1 to 30 days after as_of.
- Weeks start on Monday.

All comparisons are at day granularity.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Sequence

from domain.inventory import InventoryItem
from domain.member import Member, MemberStatus
from domain.money import ZERO
from domain.time import DayLike, as_day, utc_today
from domain.transaction import Transaction, TransactionType

EXPIRING_WINDOW_DAYS: int = 30
RECENT_TRANSACTIONS_LIMIT: int = 5


@dataclass(frozen=True, slots=True)
class RevenueBreakdownEntry:
    """Month-to-date revenue for one transaction type."""
    type: TransactionType
    amount: Decimal
    transaction_count: int


@dataclass(frozen=True, slots=True)
class MemberStatusDistribution:
    active: int
    expired: int
    pending: int


@dataclass(frozen=True, slots=True)
class SalesSummary:
    daily_total: Decimal
    weekly_total: Decimal
    monthly_total: Decimal


@dataclass(frozen=True, slots=True)
class DashboardMetrics:
    """
    Everything the dashboard renders.

    Notes:
    - low_stock_items never contains out-of-stock items; those are listed in
      out_of_stock_items so the caller decides whether to show them together.
    - revenue_breakdown amounts always sum to monthly_revenue.
    """
    as_of: date
    total_active_members: int
    monthly_revenue: Decimal
    daily_check_ins: int
    low_stock_count: int
    low_stock_items: List[InventoryItem]
    out_of_stock_items: List[InventoryItem]
    expiring_memberships: List[Member]
    recent_transactions: List[Transaction]
    revenue_breakdown: List[RevenueBreakdownEntry]
    member_status_distribution: MemberStatusDistribution
    sales_summary: SalesSummary


def _sum_amounts(transactions: Sequence[Transaction]) -> Decimal:
    return sum((tx.amount for tx in transactions), ZERO)


def month_to_date_transactions(transactions: Sequence[Transaction], as_of: DayLike) -> List[Transaction]:
    day = as_day(as_of)
    return [tx for tx in transactions if tx.in_month_of(day)]


def expiring_memberships(
    members: Sequence[Member],
    as_of: DayLike,
    window_days: int = EXPIRING_WINDOW_DAYS,
) -> List[Member]:
    """
    Active members whose expiration is strictly after as_of and at most
    window_days away, soonest first. Ties keep input order.
    """

    day = as_day(as_of)
    candidates = [
        m for m in members
        if m.is_active() and 0 < m.days_until_expiration(day) <= window_days
    ]
    return sorted(candidates, key=lambda m: m.days_until_expiration(day))


def recent_transactions(
    transactions: Sequence[Transaction],
    limit: int = RECENT_TRANSACTIONS_LIMIT,
) -> List[Transaction]:
    """Newest first, ties keep input order."""

    # sorted() stays stable with reverse=True.
    return sorted(transactions, key=lambda tx: tx.date, reverse=True)[:limit]


def revenue_breakdown(transactions: Sequence[Transaction], as_of: DayLike) -> List[RevenueBreakdownEntry]:
    """
    Group month-to-date transactions by type.

    Types with no transactions in the month are left out rather than
    reported as zero. Entries follow TransactionType declaration order.
    """

    totals: Dict[TransactionType, Decimal] = {}
    counts: Dict[TransactionType, int] = {}
    for tx in month_to_date_transactions(transactions, as_of):
        totals[tx.type] = totals.get(tx.type, ZERO) + tx.amount
        counts[tx.type] = counts.get(tx.type, 0) + 1

    return [
        RevenueBreakdownEntry(type=tx_type, amount=totals[tx_type], transaction_count=counts[tx_type])
        for tx_type in TransactionType
        if tx_type in totals
    ]


def member_status_distribution(members: Sequence[Member], as_of: DayLike) -> MemberStatusDistribution:
    """Counts by effective status (Active members past expiration count as Expired)."""

    day = as_day(as_of)
    counts = {status: 0 for status in MemberStatus}
    for member in members:
        counts[member.effective_status(day)] += 1

    return MemberStatusDistribution(
        active=counts[MemberStatus.ACTIVE],
        expired=counts[MemberStatus.EXPIRED],
        pending=counts[MemberStatus.PENDING],
    )


def calculate_sales_summary(transactions: Sequence[Transaction], as_of: DayLike) -> SalesSummary:
    """
    Daily, weekly and monthly sales totals relative to as_of.

    The week runs Monday through Sunday around as_of; the month is the
    calendar month of as_of.
    """

    day = as_day(as_of)
    week_start = day - timedelta(days=day.weekday())
    week_end = week_start + timedelta(days=6)

    return SalesSummary(
        daily_total=_sum_amounts([tx for tx in transactions if tx.date == day]),
        weekly_total=_sum_amounts([tx for tx in transactions if week_start <= tx.date <= week_end]),
        monthly_total=_sum_amounts(month_to_date_transactions(transactions, day)),
    )


def compute_metrics(
    members: Sequence[Member],
    transactions: Sequence[Transaction],
    inventory: Sequence[InventoryItem],
    as_of: DayLike,
) -> DashboardMetrics:
    """
    Compute dashboard metrics from entity snapshots.

    Args:
        members: Member snapshot
        transactions: Transaction snapshot
        inventory: Inventory snapshot
        as_of: Reference day (a datetime is reduced to its date)

    Returns:
        DashboardMetrics. Empty inputs give zero counts and empty lists.

    Example:
        metrics = compute_metrics(members, transactions, items, date(2024, 10, 22))
        print(f"MTD revenue: {metrics.monthly_revenue}")
    """

    day = as_day(as_of)

    low_stock = [item for item in inventory if item.is_low_stock]
    out_of_stock = [item for item in inventory if item.is_out_of_stock]

    breakdown = revenue_breakdown(transactions, day)

    return DashboardMetrics(
        as_of=day,
        total_active_members=sum(1 for m in members if m.is_active()),
        monthly_revenue=_sum_amounts(month_to_date_transactions(transactions, day)),
        daily_check_ins=sum(1 for m in members if m.checked_in_on(day)),
        low_stock_count=len(low_stock),
        low_stock_items=low_stock,
        out_of_stock_items=out_of_stock,
        expiring_memberships=expiring_memberships(members, day),
        recent_transactions=recent_transactions(transactions),
        revenue_breakdown=breakdown,
        member_status_distribution=member_status_distribution(members, day),
        sales_summary=calculate_sales_summary(transactions, day),
    )


def load_dashboard_metrics(as_of: DayLike | None = None) -> DashboardMetrics:
    """
    Fetch current snapshots from Supabase and compute the dashboard.

    Args:
        as_of: Reference day (default: today in UTC)
    """
    from repositories.inventory_repository import list_inventory_items
    from repositories.member_repository import list_members
    from repositories.transaction_repository import list_transactions

    day = as_day(as_of) if as_of is not None else utc_today()
    return compute_metrics(list_members(), list_transactions(), list_inventory_items(), day)


__all__ = [
    "EXPIRING_WINDOW_DAYS",
    "RECENT_TRANSACTIONS_LIMIT",
    "RevenueBreakdownEntry",
    "MemberStatusDistribution",
    "SalesSummary",
    "DashboardMetrics",
    "month_to_date_transactions",
    "expiring_memberships",
    "recent_transactions",
    "revenue_breakdown",
    "member_status_distribution",
    "calculate_sales_summary",
    "compute_metrics",
    "load_dashboard_metrics",
]
