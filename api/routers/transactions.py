"""
Transaction API Endpoints.

Endpoint for voiding a recorded sale.
"""

import logging

from fastapi import APIRouter, HTTPException, Query

from api.models import VoidTransactionResponse
from domain.role import StaffRole
from services import sale_service
from services.checkout_service import CheckoutAuthorizationError

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_STATUS = {
    sale_service.VoidError.TRANSACTION_NOT_FOUND: 404,
    sale_service.VoidError.WRITE_FAILED: 500,
}


@router.delete(
    "/transactions/{transaction_id}",
    response_model=VoidTransactionResponse,
    summary="Void Transaction",
    description="Delete a sale and put its inventory back in stock. Membership changes are flagged for manual reversal."
)
def void_transaction(
    transaction_id: str,
    role: str = Query(..., description="Role of the staff member voiding the sale"),
):
    """
    **Errors:**
    - 400 unknown role
    - 403 role may not void transactions
    - 404 `TRANSACTION_NOT_FOUND`
    - 500 `WRITE_FAILED`
    """
    try:
        staff_role = StaffRole.parse(role)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = sale_service.void_transaction(transaction_id, staff_role)
    except CheckoutAuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.exception("Void of transaction %s failed", transaction_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to void transaction: {str(e)}"
        )

    if not result.success:
        raise HTTPException(
            status_code=_ERROR_STATUS[result.error_code],
            detail={"error": result.error_code.value, "message": result.error_message},
        )

    return VoidTransactionResponse(
        transaction_id=result.transaction_id,
        requires_manual_membership_reversal=result.requires_manual_membership_reversal,
    )
