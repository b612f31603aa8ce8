# This project was developed with assistance from AI tools.
"""Previews of generated decision rationale, used to pre-fill notes."""

from db.enums import UserRole
from fastapi import APIRouter, Depends, HTTPException, status

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.reasons import DownsizingReasonRequest, ReasonResponse, RejectionReasonRequest
from ..services.amounts import AmountValidationError
from ..services.reasons import generate_downsizing_reason, generate_rejection_reason

router = APIRouter()

_WORKFLOW_ROLES = (
    UserRole.FIELD_OFFICER,
    UserRole.MANAGER,
    UserRole.DIRECTOR,
    UserRole.CHAIRPERSON,
    UserRole.CEO,
)


@router.post(
    "/rejection",
    response_model=ReasonResponse,
    dependencies=[Depends(require_roles(*_WORKFLOW_ROLES))],
)
async def rejection_reason(body: RejectionReasonRequest, user: CurrentUser) -> ReasonResponse:
    role = body.role or user.workflow_role
    try:
        reason = generate_rejection_reason(
            role, body.employment_status, body.loan_amount, body.monthly_income
        )
    except AmountValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    return ReasonResponse(reason=reason)


@router.post(
    "/downsizing",
    response_model=ReasonResponse,
    dependencies=[Depends(require_roles(*_WORKFLOW_ROLES))],
)
async def downsizing_reason(body: DownsizingReasonRequest) -> ReasonResponse:
    try:
        reason = generate_downsizing_reason(
            body.original_amount, body.approved_amount, body.monthly_income
        )
    except AmountValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    return ReasonResponse(reason=reason)
