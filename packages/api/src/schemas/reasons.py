# This project was developed with assistance from AI tools.
"""Schemas for generated decision rationale."""

from db.enums import WorkflowRole
from pydantic import BaseModel, Field


class RejectionReasonRequest(BaseModel):
    """Inputs for a rejection reason; amounts are form text."""

    role: WorkflowRole | None = Field(
        default=None,
        description="Rejecting role; defaults to the caller's own role.",
    )
    employment_status: str | None = None
    loan_amount: str
    monthly_income: str | None = None


class DownsizingReasonRequest(BaseModel):
    original_amount: str
    approved_amount: str
    monthly_income: str | None = None


class ReasonResponse(BaseModel):
    reason: str
