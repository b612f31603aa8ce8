# This project was developed with assistance from AI tools.
"""
Loanflow -- domain models

Clients, loan applications, the per-application approval workflow,
staff profiles, notifications, and the workflow audit log.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import ApplicationStatus, FinalResult, RiskLevel, UserRole, WorkflowRole


class Client(Base):
    """Client record captured by field officers."""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(255), nullable=False, index=True)
    phone_number = Column(String(32), nullable=True)
    id_number = Column(String(32), nullable=True, index=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Client(id={self.id}, name='{self.full_name}')>"


class LoanApplication(Base):
    """Loan application submitted on behalf of a client.

    Client details are copied onto the application as free text; the link
    back to a ``Client`` is recovered by fuzzy matching, not by foreign key.
    """

    __tablename__ = "loan_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_identification_number = Column(String(32), unique=True, nullable=False, index=True)
    client_name = Column(String(255), nullable=False)
    phone_number = Column(String(32), nullable=True)
    id_number = Column(String(32), nullable=True)
    loan_amount = Column(Numeric(14, 2), nullable=False)
    approved_amount = Column(Numeric(14, 2), nullable=True)
    loan_type = Column(String(50), nullable=True)
    purpose_of_loan = Column(Text, nullable=True)
    employment_status = Column(String(50), nullable=True)
    monthly_income = Column(Numeric(14, 2), nullable=True)
    status = Column(
        Enum(ApplicationStatus, name="application_status", native_enum=False),
        nullable=False,
        default=ApplicationStatus.PENDING_MANAGER,
    )
    risk_assessment = Column(
        Enum(RiskLevel, name="risk_level", native_enum=False),
        nullable=True,
    )
    approval_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    workflow = relationship(
        "LoanWorkflow", back_populates="application", uselist=False, cascade="all, delete-orphan",
    )
    workflow_logs = relationship(
        "WorkflowLog", back_populates="application", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<LoanApplication(id={self.id}, status='{self.status}')>"


class LoanWorkflow(Base):
    """Approval progress of exactly one loan application.

    ``<role>_approved`` is tri-state: None while pending, True/False once the
    role has decided. ``version`` increases on every write and guards
    concurrent decisions.
    """

    __tablename__ = "loan_applications_workflow"

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_application_id = Column(
        Integer,
        ForeignKey("loan_applications.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )
    current_stage = Column(
        Enum(WorkflowRole, name="workflow_role", native_enum=False),
        nullable=False,
        default=WorkflowRole.MANAGER,
    )
    final_result = Column(
        Enum(FinalResult, name="final_result", native_enum=False),
        nullable=False,
        default=FinalResult.NONE,
    )

    field_officer_approved = Column(Boolean, nullable=True)
    field_officer_notes = Column(Text, nullable=True)
    field_officer_name = Column(String(255), nullable=True)
    manager_approved = Column(Boolean, nullable=True)
    manager_notes = Column(Text, nullable=True)
    manager_name = Column(String(255), nullable=True)
    director_approved = Column(Boolean, nullable=True)
    director_notes = Column(Text, nullable=True)
    director_name = Column(String(255), nullable=True)
    chairperson_approved = Column(Boolean, nullable=True)
    chairperson_notes = Column(Text, nullable=True)
    chairperson_name = Column(String(255), nullable=True)
    ceo_approved = Column(Boolean, nullable=True)
    ceo_notes = Column(Text, nullable=True)
    ceo_name = Column(String(255), nullable=True)

    version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    application = relationship("LoanApplication", back_populates="workflow")

    def __repr__(self):
        return (
            f"<LoanWorkflow(app_id={self.loan_application_id}, "
            f"stage='{self.current_stage}', result='{self.final_result}')>"
        )


class StaffProfile(Base):
    """Staff member known to the identity provider, used to address notifications."""

    __tablename__ = "profiles"

    id = Column(String(255), primary_key=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    role = Column(Enum(UserRole, name="user_role", native_enum=False), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<StaffProfile(id='{self.id}', role='{self.role}')>"


class Notification(Base):
    """In-app notification addressed to a single user."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, index=True)
    message = Column(Text, nullable=False)
    related_to = Column(String(50), nullable=False)
    entity_id = Column(String(64), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Notification(id={self.id}, user='{self.user_id}', read={self.is_read})>"


class WorkflowLog(Base):
    """Append-only record of every workflow action."""

    __tablename__ = "loan_workflow_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_application_id = Column(
        Integer, ForeignKey("loan_applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    action = Column(String(100), nullable=False)
    performed_by = Column(String(255), nullable=True)
    status = Column(String(50), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("LoanApplication", back_populates="workflow_logs")

    def __repr__(self):
        return f"<WorkflowLog(app_id={self.loan_application_id}, action='{self.action}')>"
