# This project was developed with assistance from AI tools.
"""Persistence of workflow state.

Converts between ``LoanWorkflow`` rows and ``WorkflowState`` values and
writes new states with a conditional UPDATE guarded on the stage and
version the caller read. Two approvers racing on the same application
cannot both succeed: the second write matches no row and raises
``WorkflowConflictError``.
"""

import logging

from db import LoanApplication, LoanWorkflow
from db.enums import ApplicationStatus, DecisionStatus, FinalResult, WorkflowRole
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.workflow import RoleDecision, WorkflowState
from .workflow import new_workflow_state, status_for_state

logger = logging.getLogger(__name__)


class WorkflowConflictError(Exception):
    """Raised when the stored workflow changed since it was read."""

    pass


_APPROVED_FLAG = {
    DecisionStatus.PENDING: None,
    DecisionStatus.APPROVED: True,
    DecisionStatus.REJECTED: False,
}


def _decision_status(flag: bool | None) -> DecisionStatus:
    if flag is None:
        return DecisionStatus.PENDING
    return DecisionStatus.APPROVED if flag else DecisionStatus.REJECTED


def state_from_row(row: LoanWorkflow) -> WorkflowState:
    """Build the workflow value from its table row."""
    decisions = {
        role: RoleDecision(
            status=_decision_status(getattr(row, f"{role.value}_approved")),
            notes=getattr(row, f"{role.value}_notes"),
            actor_name=getattr(row, f"{role.value}_name"),
        )
        for role in WorkflowRole.approval_order()
    }
    return WorkflowState(
        application_id=row.loan_application_id,
        current_stage=row.current_stage,
        decisions=decisions,
        final_result=row.final_result or FinalResult.NONE,
        version=row.version or 0,
    )


def state_values(state: WorkflowState) -> dict:
    """Column values representing ``state`` (excluding ``version``)."""
    values = {
        "current_stage": state.current_stage,
        "final_result": state.final_result,
    }
    for role in WorkflowRole.approval_order():
        decision = state.decisions.get(role, RoleDecision())
        values[f"{role.value}_approved"] = _APPROVED_FLAG[decision.status]
        values[f"{role.value}_notes"] = decision.notes
        values[f"{role.value}_name"] = decision.actor_name
    return values


async def get_workflow(session: AsyncSession, application_id: int) -> LoanWorkflow | None:
    """Return the workflow row for an application, or None."""
    stmt = select(LoanWorkflow).where(LoanWorkflow.loan_application_id == application_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


def create_workflow(
    session: AsyncSession,
    application_id: int,
    submitted_by: str | None = None,
) -> tuple[LoanWorkflow, WorkflowState]:
    """Stage a workflow row in its initial state. The caller commits."""
    state = new_workflow_state(application_id, submitted_by=submitted_by)
    row = LoanWorkflow(loan_application_id=application_id, version=state.version, **state_values(state))
    session.add(row)
    return row, state


async def get_or_create_workflow(
    session: AsyncSession,
    application: LoanApplication,
) -> LoanWorkflow:
    """Return the application's workflow, creating the default one if missing.

    Applications imported without a workflow get one lazily on first read,
    and a still-open application has its status aligned with the new
    workflow. If another request creates it first, that row is returned
    instead.
    """
    application_id = application.id
    row = await get_workflow(session, application_id)
    if row is not None:
        return row

    logger.info("Creating missing workflow for application %s", application_id)
    row, state = create_workflow(session, application_id)
    if application.status not in ApplicationStatus.terminal_statuses():
        update_application_status(application, status_for_state(state))
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.info("Workflow for application %s created concurrently", application_id)
        row = await get_workflow(session, application_id)
        if row is None:
            raise
    return row


async def update_workflow(
    session: AsyncSession,
    row: LoanWorkflow,
    new_state: WorkflowState,
    *,
    expected_stage: WorkflowRole,
    expected_version: int,
) -> WorkflowState:
    """Write ``new_state`` only if the row is still at the stage and version read.

    Returns:
        ``new_state`` carrying the incremented version.

    Raises:
        WorkflowConflictError: If the stage or version moved underneath us.
    """
    next_version = expected_version + 1
    stmt = (
        update(LoanWorkflow)
        .where(
            LoanWorkflow.id == row.id,
            LoanWorkflow.current_stage == expected_stage,
            LoanWorkflow.version == expected_version,
        )
        .values(version=next_version, **state_values(new_state))
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    if result.rowcount != 1:
        logger.warning(
            "Stale workflow write: app=%s expected stage=%s version=%s",
            new_state.application_id,
            expected_stage.value,
            expected_version,
        )
        raise WorkflowConflictError(
            f"Application #{new_state.application_id} was updated by someone else. "
            "Reload the application and try again."
        )
    return new_state.model_copy(update={"version": next_version})


def update_application_status(
    application: LoanApplication,
    status: ApplicationStatus,
    *,
    notes: str | None = None,
) -> None:
    """Mirror the workflow outcome onto the application row. The caller commits."""
    application.status = status
    if status in (ApplicationStatus.REJECTED, ApplicationStatus.REJECTED_FINAL):
        application.rejection_reason = notes
    elif notes:
        application.approval_notes = notes
