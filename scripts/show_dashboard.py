"""
Print the dashboard metrics for a day.

Reads members, transactions and inventory from Supabase and prints the same
figures the owner dashboard shows.
"""

import argparse
import sys
from datetime import date
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.dashboard_metrics_service import load_dashboard_metrics


def show_dashboard(as_of: date | None = None):
    """Print dashboard metrics for as_of (default: today)."""

    metrics = load_dashboard_metrics(as_of)

    print("=" * 50)
    print(f"DASHBOARD ({metrics.as_of.isoformat()})")
    print("=" * 50)
    print(f"Active members:            {metrics.total_active_members}")
    print(f"Month-to-date revenue:     {metrics.monthly_revenue}")
    print(f"Check-ins today:           {metrics.daily_check_ins}")
    print(f"Low stock items:           {metrics.low_stock_count}")
    print(f"Out of stock items:        {len(metrics.out_of_stock_items)}")
    print("=" * 50)

    print("\nRevenue by type (month to date):")
    print("-" * 50)
    for entry in metrics.revenue_breakdown:
        print(f"{entry.type.value}: {entry.amount} ({entry.transaction_count} transactions)")
    if not metrics.revenue_breakdown:
        print("No sales this month")

    print("\nExpiring memberships (next 30 days):")
    print("-" * 50)
    for member in metrics.expiring_memberships:
        days = member.days_until_expiration(metrics.as_of)
        print(f"{member.member_id} {member.name}: {member.expiration_date.isoformat()} ({days} days)")

    print("\nStock alerts:")
    print("-" * 50)
    for item in metrics.out_of_stock_items:
        print(f"[OUT] {item.name}")
    for item in metrics.low_stock_items:
        print(f"[LOW] {item.name}: {item.stock} left")

    print("\nRecent transactions:")
    print("-" * 50)
    for tx in metrics.recent_transactions:
        who = tx.member_name or ("Guest" if tx.is_guest else tx.member_id)
        print(f"{tx.date.isoformat()} {tx.type.value:<11} {tx.amount:>9} {who}")

    status = metrics.member_status_distribution
    print("\nMember status:")
    print("-" * 50)
    print(f"Active: {status.active}  Expired: {status.expired}  Pending: {status.pending}")


def main():
    parser = argparse.ArgumentParser(description="Print gym dashboard metrics")
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Reference day (YYYY-MM-DD), defaults to today (UTC)"
    )
    args = parser.parse_args()

    show_dashboard(args.as_of)


if __name__ == "__main__":
    main()
