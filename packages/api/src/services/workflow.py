# This project was developed with assistance from AI tools.
"""Loan approval workflow engine.

A linear state machine over the approval stages
field_officer -> manager -> director -> chairperson -> ceo. Any rejection
ends the workflow as failed; the CEO's approval ends it as successful.

Everything here is pure: callers pass in the current ``WorkflowState`` and
persist whatever comes back. Nothing in this module touches the database.
"""

import logging

from db.enums import (
    ApplicationStatus,
    DecisionStatus,
    FinalResult,
    WorkflowAction,
    WorkflowEventType,
    WorkflowRole,
)

from ..schemas.workflow import NotificationPlan, RoleDecision, WorkflowEvent, WorkflowState

logger = logging.getLogger(__name__)

SUBMISSION_NOTE = "Application submitted by field officer"


class WorkflowForbiddenError(Exception):
    """Raised when a role acts out of turn or after the workflow has ended."""

    def __init__(self, message: str, *, role: WorkflowRole | None, state: WorkflowState):
        super().__init__(message)
        self.role = role
        self.state = state


def new_workflow_state(application_id: int, submitted_by: str | None = None) -> WorkflowState:
    """Initial workflow for a freshly submitted application.

    Submission by the field officer counts as their approval, so the first
    decision actually awaited is the manager's.
    """
    decisions = {role: RoleDecision() for role in WorkflowRole.approval_order()}
    decisions[WorkflowRole.FIELD_OFFICER] = RoleDecision(
        status=DecisionStatus.APPROVED,
        notes=SUBMISSION_NOTE,
        actor_name=submitted_by,
    )
    return WorkflowState(
        application_id=application_id,
        current_stage=WorkflowRole.MANAGER,
        decisions=decisions,
    )


def can_act(state: WorkflowState, role: WorkflowRole | None) -> bool:
    """True if ``role`` is the stage currently awaited on a live workflow."""
    return role is not None and not state.is_terminal and state.current_stage == role


def ensure_can_act(state: WorkflowState, role: WorkflowRole | None) -> None:
    """Raise ``WorkflowForbiddenError`` unless ``role`` may decide now."""
    if state.is_terminal:
        raise WorkflowForbiddenError(
            f"No action required: application #{state.application_id} is already "
            f"{state.final_result.value}.",
            role=role,
            state=state,
        )
    if role is None:
        raise WorkflowForbiddenError(
            "No action required: your role does not take part in loan approval.",
            role=role,
            state=state,
        )
    if role != state.current_stage:
        raise WorkflowForbiddenError(
            f"No action required: application #{state.application_id} is awaiting the "
            f"{state.current_stage.value}, not the {role.value}.",
            role=role,
            state=state,
        )
    if state.decisions.get(role, RoleDecision()).status != DecisionStatus.PENDING:
        raise WorkflowForbiddenError(
            f"No action required: the {role.value} has already decided on "
            f"application #{state.application_id}.",
            role=role,
            state=state,
        )


def record_decision(
    state: WorkflowState,
    role: WorkflowRole,
    action: WorkflowAction,
    notes: str | None = None,
    *,
    actor_name: str | None = None,
) -> tuple[WorkflowState, WorkflowEvent]:
    """Record ``role``'s decision and compute the next workflow state.

    Notes are stored exactly as given; callers that want a generated
    rejection reason must produce it before calling.

    Returns:
        ``(new_state, event)``. The input state is left untouched.

    Raises:
        WorkflowForbiddenError: If the workflow is terminal or ``role`` is
            not the current stage.
    """
    ensure_can_act(state, role)

    decisions = dict(state.decisions)

    if action == WorkflowAction.REJECT:
        decisions[role] = RoleDecision(
            status=DecisionStatus.REJECTED, notes=notes, actor_name=actor_name
        )
        new_state = state.model_copy(
            update={"decisions": decisions, "final_result": FinalResult.FAILED}
        )
        event = WorkflowEvent(type=WorkflowEventType.REJECTED, by_role=role)
    else:
        decisions[role] = RoleDecision(
            status=DecisionStatus.APPROVED, notes=notes, actor_name=actor_name
        )
        next_role = role.next_role()
        if next_role is None:
            new_state = state.model_copy(
                update={"decisions": decisions, "final_result": FinalResult.SUCCESSFUL}
            )
            event = WorkflowEvent(type=WorkflowEventType.APPROVED_FINAL, by_role=role)
        else:
            new_state = state.model_copy(
                update={"decisions": decisions, "current_stage": next_role}
            )
            event = WorkflowEvent(
                type=WorkflowEventType.ADVANCED, from_role=role, to_role=next_role
            )

    logger.info(
        "Workflow app=%s: %s by %s -> stage=%s result=%s",
        state.application_id,
        action.value,
        role.value,
        new_state.current_stage.value,
        new_state.final_result.value,
    )
    return new_state, event


def status_for_event(event: WorkflowEvent) -> ApplicationStatus:
    """Application status mirroring the workflow after ``event``."""
    if event.type == WorkflowEventType.ADVANCED:
        return ApplicationStatus.pending_for(event.to_role)
    if event.type == WorkflowEventType.APPROVED_FINAL:
        return ApplicationStatus.APPROVED
    if event.by_role == WorkflowRole.CEO:
        return ApplicationStatus.REJECTED_FINAL
    return ApplicationStatus.REJECTED


def status_for_state(state: WorkflowState) -> ApplicationStatus:
    """Application status for a workflow that may not have a triggering event."""
    if state.final_result == FinalResult.SUCCESSFUL:
        return ApplicationStatus.APPROVED
    if state.final_result == FinalResult.FAILED:
        if state.current_stage == WorkflowRole.CEO:
            return ApplicationStatus.REJECTED_FINAL
        return ApplicationStatus.REJECTED
    if state.current_stage == WorkflowRole.FIELD_OFFICER:
        return ApplicationStatus.PENDING_MANAGER
    return ApplicationStatus.pending_for(state.current_stage)


def _role_label(role: WorkflowRole) -> str:
    return role.value.replace("_", " ")


def plan_notifications(
    event: WorkflowEvent,
    *,
    application_id: int,
    client_name: str,
    submitted_by: str | None,
    actor_name: str | None = None,
) -> list[NotificationPlan]:
    """Decide which notifications ``event`` calls for.

    The submitting field officer hears about every outcome; on an advance
    the next stage's role is told that an application is waiting for it.
    Delivery is the caller's job.
    """
    entity_id = str(application_id)
    actor = actor_name or _role_label(event.actor)
    plans: list[NotificationPlan] = []

    if event.type == WorkflowEventType.ADVANCED:
        submitter_message = (
            f"Loan application for {client_name} has been approved by {actor} "
            f"({_role_label(event.from_role)}) and moved to {_role_label(event.to_role)} stage."
        )
        plans.append(
            NotificationPlan(
                message=(
                    f"Loan application for {client_name} is awaiting your review "
                    f"as {_role_label(event.to_role)}."
                ),
                role=event.to_role,
                entity_id=entity_id,
            )
        )
    elif event.type == WorkflowEventType.APPROVED_FINAL:
        submitter_message = (
            f"Loan application for {client_name} has been APPROVED by {actor} "
            f"({_role_label(event.by_role)}). Congratulations!"
        )
    else:
        submitter_message = (
            f"Loan application for {client_name} has been rejected by {actor} "
            f"({_role_label(event.by_role)})."
        )

    if submitted_by:
        plans.insert(
            0,
            NotificationPlan(message=submitter_message, user_id=submitted_by, entity_id=entity_id),
        )
    return plans
