# This project was developed with assistance from AI tools.
"""Workflow value types and schemas for workflow endpoints."""

from db.enums import (
    DecisionStatus,
    FinalResult,
    WorkflowAction,
    WorkflowEventType,
    WorkflowRole,
)
from pydantic import BaseModel, ConfigDict, Field


class RoleDecision(BaseModel):
    """One role's recorded decision on an application."""

    model_config = ConfigDict(frozen=True)

    status: DecisionStatus = DecisionStatus.PENDING
    notes: str | None = None
    actor_name: str | None = None


class WorkflowState(BaseModel):
    """Approval progress of a single loan application.

    Instances are never modified; the workflow engine returns a new state
    for every recorded decision.
    """

    model_config = ConfigDict(frozen=True)

    application_id: int
    current_stage: WorkflowRole
    decisions: dict[WorkflowRole, RoleDecision]
    final_result: FinalResult = FinalResult.NONE
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.final_result != FinalResult.NONE


class WorkflowEvent(BaseModel):
    """What a recorded decision changed.

    ``advanced`` carries ``from_role``/``to_role``; ``rejected`` and
    ``approved_final`` carry ``by_role``.
    """

    model_config = ConfigDict(frozen=True)

    type: WorkflowEventType
    from_role: WorkflowRole | None = None
    to_role: WorkflowRole | None = None
    by_role: WorkflowRole | None = None

    @property
    def actor(self) -> WorkflowRole:
        return self.by_role or self.from_role


class NotificationPlan(BaseModel):
    """A notification that is due, addressed to a user or to every holder of a role."""

    model_config = ConfigDict(frozen=True)

    message: str
    user_id: str | None = None
    role: WorkflowRole | None = None
    related_to: str = "loan_application"
    entity_id: str | None = None


# ---------------------------------------------------------------------------
# API schemas
# ---------------------------------------------------------------------------


class DecisionRequest(BaseModel):
    """Approve or reject the application at the caller's stage."""

    decision: WorkflowAction
    notes: str = Field(default="", max_length=4000)
    approved_amount: str | None = Field(
        default=None,
        description="Reduced amount for a partial approval, e.g. '8,000,000'.",
    )


class WorkflowResponse(BaseModel):
    data: WorkflowState
    can_act: bool = False


class DecisionResponse(BaseModel):
    data: WorkflowState
    event: WorkflowEvent
    application_status: str
    message: str
