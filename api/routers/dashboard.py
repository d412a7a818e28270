"""
Dashboard API Endpoints.

Endpoint for the owner dashboard metrics.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from api.models import (
    DashboardMetricsResponse,
    InventoryItemSummary,
    MemberStatusDistributionResponse,
    MemberSummary,
    RevenueBreakdownItem,
    SalesSummaryResponse,
    TransactionSummary,
)
from domain.inventory import InventoryItem
from services.dashboard_metrics_service import DashboardMetrics, load_dashboard_metrics

logger = logging.getLogger(__name__)

router = APIRouter()


def _item_summary(item: InventoryItem) -> InventoryItemSummary:
    return InventoryItemSummary(
        item_id=item.item_id,
        name=item.name,
        category=item.category.value,
        stock=item.stock,
        price=item.price,
    )


def to_response(metrics: DashboardMetrics) -> DashboardMetricsResponse:
    """Convert DashboardMetrics into the API response model."""

    return DashboardMetricsResponse(
        as_of=metrics.as_of,
        total_active_members=metrics.total_active_members,
        monthly_revenue=metrics.monthly_revenue,
        daily_check_ins=metrics.daily_check_ins,
        low_stock_count=metrics.low_stock_count,
        low_stock_items=[_item_summary(item) for item in metrics.low_stock_items],
        out_of_stock_items=[_item_summary(item) for item in metrics.out_of_stock_items],
        expiring_memberships=[
            MemberSummary(
                member_id=m.member_id,
                name=m.name,
                status=m.status.value,
                plan_name=m.plan_name,
                expiration_date=m.expiration_date,
                days_until_expiration=m.days_until_expiration(metrics.as_of),
            )
            for m in metrics.expiring_memberships
        ],
        recent_transactions=[
            TransactionSummary(
                transaction_id=tx.transaction_id,
                member_id=tx.member_id,
                member_name=tx.member_name,
                type=tx.type.value,
                amount=tx.amount,
                transaction_date=tx.date,
                payment_method=tx.payment_method.value,
            )
            for tx in metrics.recent_transactions
        ],
        revenue_breakdown=[
            RevenueBreakdownItem(
                type=entry.type.value,
                amount=entry.amount,
                transaction_count=entry.transaction_count,
            )
            for entry in metrics.revenue_breakdown
        ],
        member_status_distribution=MemberStatusDistributionResponse(
            active=metrics.member_status_distribution.active,
            expired=metrics.member_status_distribution.expired,
            pending=metrics.member_status_distribution.pending,
        ),
        sales_summary=SalesSummaryResponse(
            daily_total=metrics.sales_summary.daily_total,
            weekly_total=metrics.sales_summary.weekly_total,
            monthly_total=metrics.sales_summary.monthly_total,
        ),
    )


@router.get(
    "/dashboard/metrics",
    response_model=DashboardMetricsResponse,
    summary="Dashboard Metrics",
    description="Active members, month-to-date revenue, stock alerts, expiring memberships and recent sales."
)
def get_dashboard_metrics(
    as_of: Optional[date] = Query(None, description="Reference day (YYYY-MM-DD), defaults to today (UTC)"),
):
    """
    Compute the dashboard for a given day.

    **Example usage:**
    - Today: `GET /api/v1/dashboard/metrics`
    - A past day: `GET /api/v1/dashboard/metrics?as_of=2024-10-22`
    """
    try:
        metrics = load_dashboard_metrics(as_of)
    except Exception as e:
        logger.exception("Failed to compute dashboard metrics")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to compute dashboard metrics: {str(e)}"
        )

    return to_response(metrics)
