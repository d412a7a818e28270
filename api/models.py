"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Dashboard Models
# ============================================================================

class MemberSummary(BaseModel):
    """Member as shown in the expiring-memberships list."""
    member_id: str
    name: str
    status: str  # "Active", "Expired" or "Pending"
    plan_name: Optional[str] = None
    expiration_date: date
    days_until_expiration: int


class InventoryItemSummary(BaseModel):
    """Inventory item as shown in stock alerts."""
    item_id: str
    name: str
    category: str
    stock: int
    price: Decimal


class TransactionSummary(BaseModel):
    """Transaction as shown in the recent-transactions table."""
    transaction_id: str
    member_id: Optional[str] = None  # None for guest sales
    member_name: Optional[str] = None
    type: str
    amount: Decimal
    transaction_date: date
    payment_method: str


class RevenueBreakdownItem(BaseModel):
    type: str  # "Membership", "POS Sale" or "Mixed Sale"
    amount: Decimal
    transaction_count: int


class MemberStatusDistributionResponse(BaseModel):
    active: int
    expired: int
    pending: int


class SalesSummaryResponse(BaseModel):
    daily_total: Decimal
    weekly_total: Decimal
    monthly_total: Decimal


class DashboardMetricsResponse(BaseModel):
    """Response for the owner dashboard."""
    as_of: date
    total_active_members: int
    monthly_revenue: Decimal
    daily_check_ins: int
    low_stock_count: int
    low_stock_items: List[InventoryItemSummary]
    out_of_stock_items: List[InventoryItemSummary]
    expiring_memberships: List[MemberSummary]
    recent_transactions: List[TransactionSummary]
    revenue_breakdown: List[RevenueBreakdownItem]
    member_status_distribution: MemberStatusDistributionResponse
    sales_summary: SalesSummaryResponse

    class Config:
        json_schema_extra = {
            "example": {
                "as_of": "2024-10-22",
                "total_active_members": 2,
                "monthly_revenue": "2384.42",
                "daily_check_ins": 2,
                "low_stock_count": 1,
                "low_stock_items": [],
                "out_of_stock_items": [],
                "expiring_memberships": [],
                "recent_transactions": [],
                "revenue_breakdown": [
                    {"type": "Membership", "amount": "2244.96", "transaction_count": 6},
                    {"type": "POS Sale", "amount": "139.46", "transaction_count": 4}
                ],
                "member_status_distribution": {"active": 2, "expired": 1, "pending": 0},
                "sales_summary": {
                    "daily_total": "159.97",
                    "weekly_total": "1169.46",
                    "monthly_total": "2384.42"
                }
            }
        }


# ============================================================================
# Class Enrollment Models
# ============================================================================

class GymClassResponse(BaseModel):
    class_id: str
    name: str
    trainer: Optional[str] = None
    day: Optional[str] = None
    time: Optional[str] = None
    capacity: int
    current_enrollment: int
    spots_left: int


class EnrollmentRequest(BaseModel):
    """Request to add a member to a class roster."""
    member_id: str = Field(..., min_length=1, description="Member code, e.g. 'M001'")
    member_name: Optional[str] = Field(None, description="Display name stored with the enrollment")

    class Config:
        json_schema_extra = {
            "example": {
                "member_id": "M001",
                "member_name": "Alice Johnson"
            }
        }


class EnrollmentResponse(BaseModel):
    member_id: str
    class_id: str
    enrollment_date: date
    member_name: Optional[str] = None


# ============================================================================
# Checkout Models
# ============================================================================

class CartLineRequest(BaseModel):
    source_id: str
    name: str
    kind: str = Field(..., description="'inventory' or 'membership'")
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0, description="Price paid per unit")
    original_price: Decimal = Field(..., ge=0, description="Catalog price per unit")
    is_giveaway: bool = False


class CheckoutQuoteRequest(BaseModel):
    """Request to price a cart before charging it."""
    role: str = Field(..., description="Role of the staff member at the register")
    discount_percent: Decimal = Field(Decimal("0"), ge=0, le=100)
    cart: List[CartLineRequest] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "role": "cashier",
                "discount_percent": "0",
                "cart": [
                    {
                        "source_id": "INV001",
                        "name": "Protein Powder (Vanilla)",
                        "kind": "inventory",
                        "quantity": 1,
                        "price": "39.99",
                        "original_price": "39.99"
                    }
                ]
            }
        }


class CheckoutQuoteResponse(BaseModel):
    subtotal: Decimal
    discount_amount: Decimal
    tax: Decimal
    total: Decimal
    transaction_type: str
    item_description: str


class CheckoutRequest(CheckoutQuoteRequest):
    """Request to charge a cart and record the sale."""
    payment_method: str = Field(..., description="'Card', 'Cash' or 'Transfer'")
    member_code: Optional[str] = Field(None, description="Member code, omit for a guest sale")
    is_initial_registration: bool = False


class CheckoutResponse(BaseModel):
    transaction_id: str
    member_id: Optional[str] = None  # None for guest sales
    member_name: Optional[str] = None
    transaction_type: str
    total: Decimal
    transaction_date: date


# ============================================================================
# Transaction Models
# ============================================================================

class VoidTransactionResponse(BaseModel):
    transaction_id: str
    requires_manual_membership_reversal: bool  # True for Membership and Mixed sales


# ============================================================================
# Error Models
# ============================================================================

class EnrollmentErrorDetail(BaseModel):
    error: str  # "CLASS_NOT_FOUND", "CLASS_FULL" or "ALREADY_ENROLLED"
    message: str


class EnrollmentErrorResponse(BaseModel):
    """Error body returned by the enrollment endpoint."""
    detail: EnrollmentErrorDetail

    class Config:
        json_schema_extra = {
            "example": {
                "detail": {
                    "error": "CLASS_FULL",
                    "message": "Class spin-mon is full (15/15)"
                }
            }
        }
