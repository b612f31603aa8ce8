# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
from .enums import (
    ApplicationStatus,
    DecisionStatus,
    FinalResult,
    MatchType,
    RiskLevel,
    StatusCategory,
    UserRole,
    WorkflowAction,
    WorkflowEventType,
    WorkflowRole,
)
from .models import (
    Client,
    LoanApplication,
    LoanWorkflow,
    Notification,
    StaffProfile,
    WorkflowLog,
)

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "ApplicationStatus",
    "DecisionStatus",
    "FinalResult",
    "MatchType",
    "RiskLevel",
    "StatusCategory",
    "UserRole",
    "WorkflowAction",
    "WorkflowEventType",
    "WorkflowRole",
    # Models
    "Client",
    "LoanApplication",
    "LoanWorkflow",
    "Notification",
    "StaffProfile",
    "WorkflowLog",
]
