# This project was developed with assistance from AI tools.
"""
Domain enums for the loan approval workflow.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas / core services (api package).
"""

import enum


class WorkflowRole(str, enum.Enum):
    """Approval stages, declared in the fixed order decisions are taken."""

    FIELD_OFFICER = "field_officer"
    MANAGER = "manager"
    DIRECTOR = "director"
    CHAIRPERSON = "chairperson"
    CEO = "ceo"

    @classmethod
    def approval_order(cls) -> tuple["WorkflowRole", ...]:
        """Roles in the order an application moves through them."""
        return tuple(cls)

    def next_role(self) -> "WorkflowRole | None":
        """Role that decides after this one, or None for the CEO."""
        order = self.approval_order()
        index = order.index(self)
        if index == len(order) - 1:
            return None
        return order[index + 1]


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    FIELD_OFFICER = "field_officer"
    MANAGER = "manager"
    DIRECTOR = "director"
    CHAIRPERSON = "chairperson"
    CEO = "ceo"

    @property
    def workflow_role(self) -> WorkflowRole | None:
        """The workflow stage this user acts as, if any."""
        try:
            return WorkflowRole(self.value)
        except ValueError:
            return None


class DecisionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class FinalResult(str, enum.Enum):
    NONE = "none"
    SUCCESSFUL = "successful"
    FAILED = "failed"


class WorkflowAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


class WorkflowEventType(str, enum.Enum):
    ADVANCED = "advanced"
    REJECTED = "rejected"
    APPROVED_FINAL = "approved_final"


class ApplicationStatus(str, enum.Enum):
    """Denormalized mirror of the workflow stage kept on the application row."""

    PENDING_MANAGER = "pending_manager"
    PENDING_DIRECTOR = "pending_director"
    PENDING_CHAIRPERSON = "pending_chairperson"
    PENDING_CEO = "pending_ceo"
    APPROVED = "approved"
    REJECTED = "rejected"
    REJECTED_FINAL = "rejected_final"

    @classmethod
    def pending_for(cls, role: WorkflowRole) -> "ApplicationStatus":
        """Status of an application waiting on ``role``."""
        return cls(f"pending_{role.value}")

    @classmethod
    def terminal_statuses(cls) -> frozenset["ApplicationStatus"]:
        return frozenset({cls.APPROVED, cls.REJECTED, cls.REJECTED_FINAL})


class MatchType(str, enum.Enum):
    EXACT = "exact"
    PHONE = "phone"
    ID = "id"
    FUZZY = "fuzzy"
    PARTIAL = "partial"


class StatusCategory(str, enum.Enum):
    ACTIVE = "active"
    APPROVED = "approved"
    REJECTED = "rejected"


class RiskLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
