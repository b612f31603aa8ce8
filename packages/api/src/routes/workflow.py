# This project was developed with assistance from AI tools.
"""Approval workflow endpoints."""

import logging

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.workflow import DecisionRequest, DecisionResponse, WorkflowResponse
from ..services.amounts import AmountValidationError
from ..services.approval import get_workflow_state, submit_decision
from ..services.workflow import WorkflowForbiddenError, can_act
from ..services.workflow_store import WorkflowConflictError
from .applications import STAFF_ROLES

logger = logging.getLogger(__name__)

router = APIRouter()

APPROVER_ROLES = (
    UserRole.MANAGER,
    UserRole.DIRECTOR,
    UserRole.CHAIRPERSON,
    UserRole.CEO,
)


@router.get(
    "/{application_id}/workflow",
    response_model=WorkflowResponse,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def get_workflow(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> WorkflowResponse:
    """Current approval progress, and whether the caller is the one awaited."""
    loaded = await get_workflow_state(session, user, application_id)
    if loaded is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    _, state = loaded
    return WorkflowResponse(data=state, can_act=can_act(state, user.workflow_role))


@router.post(
    "/{application_id}/workflow/decisions",
    response_model=DecisionResponse,
    dependencies=[Depends(require_roles(*APPROVER_ROLES))],
)
async def decide(
    application_id: int,
    body: DecisionRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DecisionResponse:
    """Approve or reject the application at the caller's stage."""
    try:
        result = await submit_decision(session, user, application_id, body)
    except WorkflowForbiddenError as e:
        logger.warning(
            "Decision refused: user=%s role=%s app=%s: %s",
            user.user_id,
            user.role.value,
            application_id,
            e,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )
    except AmountValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    except WorkflowConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    return result
