# This project was developed with assistance from AI tools.
"""Approval decisions on loan applications.

Loads the application and its workflow, runs the decision through the
workflow engine, persists the outcome in one transaction, then notifies
the people concerned. Notification failures are logged and never undo a
committed decision.
"""

import logging
from decimal import Decimal

from db import LoanApplication, WorkflowLog
from db.enums import WorkflowAction
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from ..schemas.workflow import DecisionRequest, DecisionResponse, WorkflowState
from .amounts import AmountValidationError, parse_optional_amount, validate_monetary_amount
from .application import get_application
from .notification import dispatch_notifications
from .reasons import generate_downsizing_reason, generate_rejection_reason
from .workflow import ensure_can_act, plan_notifications, record_decision, status_for_event
from .workflow_store import (
    WorkflowConflictError,
    get_or_create_workflow,
    state_from_row,
    update_application_status,
    update_workflow,
)

logger = logging.getLogger(__name__)


async def get_workflow_state(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> tuple[LoanApplication, WorkflowState] | None:
    """Application and workflow state, creating the workflow if it is missing.

    Returns None if the application is not found or not accessible.
    """
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    row = await get_or_create_workflow(session, app)
    return app, state_from_row(row)


def _validate_approved_amount(app: LoanApplication, value: str | None) -> Decimal | None:
    """Reduced amount of a partial approval, or None for a full approval."""
    if parse_optional_amount(value) is None:
        return None
    approved = validate_monetary_amount(value)
    if approved <= 0:
        raise AmountValidationError("Approved amount must be greater than zero")
    if approved >= app.loan_amount:
        raise AmountValidationError(
            "Approved amount must be less than the requested amount for a partial approval"
        )
    return approved


async def submit_decision(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
    request: DecisionRequest,
) -> DecisionResponse | None:
    """Record the caller's approve/reject decision on an application.

    Empty notes are replaced with a generated rationale: a rejection
    reason when rejecting, a downsizing explanation for a partial approval.

    Returns None if the application is not found or not accessible.

    Raises:
        WorkflowForbiddenError: If the caller's role is not the current stage.
        AmountValidationError: If ``approved_amount`` or stored amounts are malformed.
        WorkflowConflictError: If another decision was written concurrently.
    """
    app = await get_application(session, user, application_id)
    if app is None:
        return None
    row = await get_or_create_workflow(session, app)
    state = state_from_row(row)
    role = user.workflow_role

    ensure_can_act(state, role)

    approved_amount = None
    if request.decision == WorkflowAction.APPROVE:
        approved_amount = _validate_approved_amount(app, request.approved_amount)

    notes = request.notes
    if not notes.strip():
        if request.decision == WorkflowAction.REJECT:
            notes = generate_rejection_reason(
                role, app.employment_status, app.loan_amount, app.monthly_income
            )
        elif approved_amount is not None:
            notes = generate_downsizing_reason(app.loan_amount, approved_amount, app.monthly_income)
        else:
            notes = None

    new_state, event = record_decision(
        state, role, request.decision, notes, actor_name=user.name
    )

    try:
        new_state = await update_workflow(
            session,
            row,
            new_state,
            expected_stage=state.current_stage,
            expected_version=state.version,
        )
    except WorkflowConflictError:
        await session.rollback()
        raise

    status = status_for_event(event)
    update_application_status(app, status, notes=notes)
    if approved_amount is not None:
        app.approved_amount = approved_amount
    session.add(
        WorkflowLog(
            loan_application_id=app.id,
            action=f"{request.decision.value} by {role.value}",
            performed_by=user.user_id,
            status=status.value,
            notes=notes,
        )
    )
    client_name = app.client_name
    submitted_by = app.created_by
    await session.commit()

    logger.info(
        "Decision recorded: app=%s role=%s decision=%s status=%s",
        application_id,
        role.value,
        request.decision.value,
        status.value,
    )

    plans = plan_notifications(
        event,
        application_id=application_id,
        client_name=client_name,
        submitted_by=submitted_by,
        actor_name=user.name,
    )
    try:
        await dispatch_notifications(session, plans)
    except Exception:
        logger.warning("Notification dispatch failed for application %s", application_id, exc_info=True)

    return DecisionResponse(
        data=new_state,
        event=event,
        application_status=status.value,
        message=_decision_message(request.decision, status.value, role.value),
    )


def _decision_message(decision: WorkflowAction, status: str, role: str) -> str:
    verb = "approved" if decision == WorkflowAction.APPROVE else "rejected"
    return f"Application {verb} by {role.replace('_', ' ')}; status is now {status}."
