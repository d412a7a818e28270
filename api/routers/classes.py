"""
Class Enrollment API Endpoints.

Endpoints for listing classes and managing class rosters.
"""

import logging
from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response

from api.models import EnrollmentErrorResponse, EnrollmentRequest, EnrollmentResponse, GymClassResponse
from services.enrollment_service import EnrollmentError, EnrollmentManager

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_STATUS = {
    EnrollmentError.CLASS_NOT_FOUND: 404,
    EnrollmentError.CLASS_FULL: 409,
    EnrollmentError.ALREADY_ENROLLED: 409,
}


@lru_cache(maxsize=1)
def get_enrollment_manager() -> EnrollmentManager:
    """
    Shared EnrollmentManager backed by the Supabase class schedule.

    Loaded once per process; the store writes roster changes through.
    """
    from repositories.class_repository import load_enrollment_store

    manager = EnrollmentManager(load_enrollment_store())
    manager.audit_enrollment_counts()
    return manager


@router.get(
    "/classes",
    response_model=List[GymClassResponse],
    summary="List Classes",
)
def list_classes(manager: EnrollmentManager = Depends(get_enrollment_manager)):
    return [
        GymClassResponse(
            class_id=c.class_id,
            name=c.name,
            trainer=c.trainer,
            day=c.day,
            time=c.time,
            capacity=c.capacity,
            current_enrollment=c.current_enrollment,
            spots_left=c.spots_left,
        )
        for c in manager.store.list_classes()
    ]


@router.post(
    "/classes/{class_id}/enrollments",
    response_model=EnrollmentResponse,
    status_code=201,
    summary="Enroll Member",
    responses={404: {"model": EnrollmentErrorResponse}, 409: {"model": EnrollmentErrorResponse}},
    description="Add a member to a class roster. Fails if the class is full or the member is already enrolled."
)
def enroll_member(
    class_id: str,
    request: EnrollmentRequest,
    manager: EnrollmentManager = Depends(get_enrollment_manager),
):
    """
    **Errors:**
    - 404 `CLASS_NOT_FOUND`
    - 409 `CLASS_FULL`
    - 409 `ALREADY_ENROLLED`
    """
    try:
        result = manager.enroll(request.member_id, class_id, member_name=request.member_name)
    except Exception as e:
        logger.exception("Enrollment of %s in %s failed", request.member_id, class_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to enroll member: {str(e)}"
        )

    if not result.success or result.enrollment is None:
        raise HTTPException(
            status_code=_ERROR_STATUS[result.error_code],
            detail={"error": result.error_code.value, "message": result.error_message},
        )

    enrollment = result.enrollment
    return EnrollmentResponse(
        member_id=enrollment.member_id,
        class_id=enrollment.class_id,
        enrollment_date=enrollment.enrollment_date,
        member_name=enrollment.member_name,
    )


@router.delete(
    "/classes/{class_id}/enrollments/{member_id}",
    status_code=204,
    summary="Unenroll Member",
)
def unenroll_member(
    class_id: str,
    member_id: str,
    manager: EnrollmentManager = Depends(get_enrollment_manager),
):
    try:
        removed = manager.unenroll(member_id, class_id)
    except Exception as e:
        logger.exception("Unenrollment of %s from %s failed", member_id, class_id)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to unenroll member: {str(e)}"
        )

    if not removed:
        raise HTTPException(
            status_code=404,
            detail=f"Member {member_id} is not enrolled in class {class_id}"
        )
    return Response(status_code=204)
