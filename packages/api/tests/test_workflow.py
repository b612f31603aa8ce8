# This project was developed with assistance from AI tools.
"""Tests for the approval workflow engine."""

import pytest
from db.enums import (
    ApplicationStatus,
    DecisionStatus,
    FinalResult,
    WorkflowAction,
    WorkflowEventType,
    WorkflowRole,
)

from src.schemas.workflow import WorkflowEvent
from src.services.workflow import (
    SUBMISSION_NOTE,
    WorkflowForbiddenError,
    can_act,
    ensure_can_act,
    new_workflow_state,
    plan_notifications,
    record_decision,
    status_for_event,
    status_for_state,
)

APPROVERS = [WorkflowRole.MANAGER, WorkflowRole.DIRECTOR, WorkflowRole.CHAIRPERSON, WorkflowRole.CEO]


def _approve_through(state, roles):
    for role in roles:
        state, _ = record_decision(state, role, WorkflowAction.APPROVE)
    return state


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------


def test_new_workflow_waits_on_manager():
    state = new_workflow_state(7, submitted_by="Grace Field")
    assert state.current_stage == WorkflowRole.MANAGER
    assert state.final_result == FinalResult.NONE
    assert state.version == 0
    fo = state.decisions[WorkflowRole.FIELD_OFFICER]
    assert fo.status == DecisionStatus.APPROVED
    assert fo.notes == SUBMISSION_NOTE
    assert fo.actor_name == "Grace Field"
    assert all(state.decisions[r].status == DecisionStatus.PENDING for r in APPROVERS)


# ---------------------------------------------------------------------------
# record_decision
# ---------------------------------------------------------------------------


def test_manager_reject_freezes_stage():
    state = new_workflow_state(1)
    new_state, event = record_decision(
        state, WorkflowRole.MANAGER, WorkflowAction.REJECT, "insufficient docs"
    )
    assert new_state.current_stage == WorkflowRole.MANAGER
    assert new_state.final_result == FinalResult.FAILED
    assert new_state.decisions[WorkflowRole.MANAGER].status == DecisionStatus.REJECTED
    assert new_state.decisions[WorkflowRole.MANAGER].notes == "insufficient docs"
    assert event == WorkflowEvent(type=WorkflowEventType.REJECTED, by_role=WorkflowRole.MANAGER)


def test_approve_advances_one_stage():
    state = new_workflow_state(1)
    new_state, event = record_decision(
        state, WorkflowRole.MANAGER, WorkflowAction.APPROVE, "ok", actor_name="Moses"
    )
    assert new_state.current_stage == WorkflowRole.DIRECTOR
    assert new_state.final_result == FinalResult.NONE
    assert new_state.decisions[WorkflowRole.MANAGER].actor_name == "Moses"
    assert event.type == WorkflowEventType.ADVANCED
    assert event.from_role == WorkflowRole.MANAGER
    assert event.to_role == WorkflowRole.DIRECTOR


def test_full_chain_succeeds_only_after_ceo():
    state = new_workflow_state(1)
    for role in APPROVERS[:-1]:
        state, event = record_decision(state, role, WorkflowAction.APPROVE)
        assert state.final_result == FinalResult.NONE
        assert event.type == WorkflowEventType.ADVANCED

    state, event = record_decision(state, WorkflowRole.CEO, WorkflowAction.APPROVE)
    assert state.final_result == FinalResult.SUCCESSFUL
    assert state.current_stage == WorkflowRole.CEO
    assert event == WorkflowEvent(type=WorkflowEventType.APPROVED_FINAL, by_role=WorkflowRole.CEO)


def test_exactly_one_outcome_per_decision():
    state = new_workflow_state(1)
    for role in APPROVERS:
        new_state, _ = record_decision(state, role, WorkflowAction.APPROVE)
        advanced = new_state.current_stage != state.current_stage
        finished = new_state.final_result != state.final_result
        assert advanced != finished
        state = new_state


def test_notes_recorded_verbatim():
    state = new_workflow_state(1)
    new_state, _ = record_decision(state, WorkflowRole.MANAGER, WorkflowAction.REJECT, "  ")
    assert new_state.decisions[WorkflowRole.MANAGER].notes == "  "


@pytest.mark.parametrize("role", [WorkflowRole.FIELD_OFFICER, WorkflowRole.DIRECTOR, WorkflowRole.CEO])
def test_out_of_turn_is_forbidden_and_state_untouched(role):
    state = new_workflow_state(3)
    snapshot = state.model_copy(deep=True)
    with pytest.raises(WorkflowForbiddenError, match="No action required") as exc_info:
        record_decision(state, role, WorkflowAction.APPROVE)
    assert exc_info.value.role == role
    assert state == snapshot


@pytest.mark.parametrize("action", list(WorkflowAction))
def test_terminal_state_is_forbidden(action):
    state = new_workflow_state(3)
    state, _ = record_decision(state, WorkflowRole.MANAGER, WorkflowAction.REJECT)
    with pytest.raises(WorkflowForbiddenError, match="already failed"):
        record_decision(state, WorkflowRole.MANAGER, action)


def test_approved_workflow_is_terminal():
    state = _approve_through(new_workflow_state(3), APPROVERS)
    with pytest.raises(WorkflowForbiddenError):
        record_decision(state, WorkflowRole.CEO, WorkflowAction.REJECT)


# ---------------------------------------------------------------------------
# can_act / ensure_can_act
# ---------------------------------------------------------------------------


def test_can_act():
    state = new_workflow_state(1)
    assert can_act(state, WorkflowRole.MANAGER)
    assert not can_act(state, WorkflowRole.DIRECTOR)
    assert not can_act(state, None)

    rejected, _ = record_decision(state, WorkflowRole.MANAGER, WorkflowAction.REJECT)
    assert not can_act(rejected, WorkflowRole.MANAGER)


def test_ensure_can_act_without_workflow_role():
    with pytest.raises(WorkflowForbiddenError, match="does not take part"):
        ensure_can_act(new_workflow_state(1), None)


# ---------------------------------------------------------------------------
# Status mirror
# ---------------------------------------------------------------------------


def test_status_for_event():
    assert status_for_event(
        WorkflowEvent(
            type=WorkflowEventType.ADVANCED,
            from_role=WorkflowRole.MANAGER,
            to_role=WorkflowRole.DIRECTOR,
        )
    ) == ApplicationStatus.PENDING_DIRECTOR
    assert status_for_event(
        WorkflowEvent(type=WorkflowEventType.APPROVED_FINAL, by_role=WorkflowRole.CEO)
    ) == ApplicationStatus.APPROVED
    assert status_for_event(
        WorkflowEvent(type=WorkflowEventType.REJECTED, by_role=WorkflowRole.DIRECTOR)
    ) == ApplicationStatus.REJECTED
    assert status_for_event(
        WorkflowEvent(type=WorkflowEventType.REJECTED, by_role=WorkflowRole.CEO)
    ) == ApplicationStatus.REJECTED_FINAL


def test_status_for_state():
    state = new_workflow_state(1)
    assert status_for_state(state) == ApplicationStatus.PENDING_MANAGER
    state = _approve_through(state, APPROVERS[:3])
    assert status_for_state(state) == ApplicationStatus.PENDING_CEO
    rejected, _ = record_decision(state, WorkflowRole.CEO, WorkflowAction.REJECT)
    assert status_for_state(rejected) == ApplicationStatus.REJECTED_FINAL
    approved, _ = record_decision(state, WorkflowRole.CEO, WorkflowAction.APPROVE)
    assert status_for_state(approved) == ApplicationStatus.APPROVED


# ---------------------------------------------------------------------------
# Notification planning
# ---------------------------------------------------------------------------


def test_plan_notifications_on_advance():
    event = WorkflowEvent(
        type=WorkflowEventType.ADVANCED,
        from_role=WorkflowRole.MANAGER,
        to_role=WorkflowRole.DIRECTOR,
    )
    plans = plan_notifications(
        event, application_id=9, client_name="John Mukasa", submitted_by="fo-1", actor_name="Moses"
    )
    assert len(plans) == 2
    assert plans[0].user_id == "fo-1"
    assert "approved by Moses (manager) and moved to director stage" in plans[0].message
    assert plans[1].role == WorkflowRole.DIRECTOR
    assert plans[1].user_id is None
    assert all(p.entity_id == "9" for p in plans)
    assert all(p.related_to == "loan_application" for p in plans)


def test_plan_notifications_on_final_outcomes():
    approved = plan_notifications(
        WorkflowEvent(type=WorkflowEventType.APPROVED_FINAL, by_role=WorkflowRole.CEO),
        application_id=9,
        client_name="John Mukasa",
        submitted_by="fo-1",
    )
    assert len(approved) == 1
    assert "APPROVED by ceo (ceo)" in approved[0].message

    rejected = plan_notifications(
        WorkflowEvent(type=WorkflowEventType.REJECTED, by_role=WorkflowRole.CHAIRPERSON),
        application_id=9,
        client_name="John Mukasa",
        submitted_by="fo-1",
        actor_name="Ruth",
    )
    assert rejected[0].message == (
        "Loan application for John Mukasa has been rejected by Ruth (chairperson)."
    )


def test_plan_notifications_without_submitter():
    plans = plan_notifications(
        WorkflowEvent(type=WorkflowEventType.REJECTED, by_role=WorkflowRole.MANAGER),
        application_id=9,
        client_name="John Mukasa",
        submitted_by=None,
    )
    assert plans == []
