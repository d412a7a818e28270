"""
Checkout API Endpoints.

Endpoints for pricing a point-of-sale cart and charging it.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException

from api.models import (
    CartLineRequest,
    CheckoutQuoteRequest,
    CheckoutQuoteResponse,
    CheckoutRequest,
    CheckoutResponse,
)
from domain.role import StaffRole
from domain.transaction import PaymentMethod
from services import sale_service
from services.checkout_service import (
    CartLine,
    CartLineKind,
    CheckoutAuthorizationError,
    calculate_checkout_totals,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_STATUS = {
    sale_service.CheckoutError.INVALID_CART: 400,
    sale_service.CheckoutError.MEMBER_NOT_FOUND: 404,
    sale_service.CheckoutError.CATALOG_MISMATCH: 409,
    sale_service.CheckoutError.WRITE_FAILED: 500,
}


def _parse_role(value: str) -> StaffRole:
    role = StaffRole.parse(value)
    if role is None:
        raise ValueError("role is required")
    return role


def _to_cart_lines(cart: List[CartLineRequest]) -> List[CartLine]:
    return [
        CartLine(
            source_id=line.source_id,
            name=line.name,
            kind=CartLineKind(line.kind),
            quantity=line.quantity,
            price=line.price,
            original_price=line.original_price,
            is_giveaway=line.is_giveaway,
        )
        for line in cart
    ]


@router.post(
    "/checkout/quote",
    response_model=CheckoutQuoteResponse,
    summary="Price Checkout Cart",
    description="Calculate subtotal, discount, tax and total for a cart. Giveaway items are free."
)
def quote_checkout(request: CheckoutQuoteRequest):
    """
    Price a cart for the staff member at the register.

    **Errors:**
    - 400 invalid role, kind or cart contents
    - 403 role may not use the register or may not override prices
    """
    try:
        role = _parse_role(request.role)
        lines = _to_cart_lines(request.cart)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        totals = calculate_checkout_totals(lines, request.discount_percent, role)
    except CheckoutAuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CheckoutQuoteResponse(
        subtotal=totals.subtotal,
        discount_amount=totals.discount_amount,
        tax=totals.tax,
        total=totals.total,
        transaction_type=totals.transaction_type.value,
        item_description=totals.item_description,
    )


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    status_code=201,
    summary="Complete Checkout",
    description="Charge a cart: validate against the catalog, update stock, renew memberships and record the transaction."
)
def complete_checkout(request: CheckoutRequest):
    """
    **Errors:**
    - 400 invalid request or cart
    - 403 role may not use the register or may not override prices
    - 404 member not found
    - 409 unknown item, catalog price mismatch or insufficient stock
    - 500 a database write failed
    """
    try:
        checkout_request = sale_service.CheckoutRequest(
            lines=_to_cart_lines(request.cart),
            payment_method=PaymentMethod(request.payment_method),
            role=_parse_role(request.role),
            discount_percent=request.discount_percent,
            member_code=request.member_code,
            is_initial_registration=request.is_initial_registration,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = sale_service.execute_checkout(checkout_request)
    except CheckoutAuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.exception("Checkout failed")
        raise HTTPException(
            status_code=500,
            detail=f"Checkout failed: {str(e)}"
        )

    if not result.success or result.transaction is None:
        raise HTTPException(
            status_code=_ERROR_STATUS[result.error_code],
            detail={"error": result.error_code.value, "message": result.error_message},
        )

    tx = result.transaction
    return CheckoutResponse(
        transaction_id=tx.transaction_id,
        member_id=tx.member_id,
        member_name=tx.member_name,
        transaction_type=tx.type.value,
        total=tx.amount,
        transaction_date=tx.date,
    )
