# This project was developed with assistance from AI tools.
"""create loanflow schema

Revision ID: 3c1f9a7d2b40
Revises:
Create Date: 2026-03-02 10:12:41.508213

"""

import sqlalchemy as sa
from alembic import op

revision = "3c1f9a7d2b40"
down_revision = None
branch_labels = None
depends_on = None

# Non-native enums store member names in a VARCHAR sized to the longest one.
_APPLICATION_STATUS = sa.Enum(
    "PENDING_MANAGER",
    "PENDING_DIRECTOR",
    "PENDING_CHAIRPERSON",
    "PENDING_CEO",
    "APPROVED",
    "REJECTED",
    "REJECTED_FINAL",
    name="application_status",
    native_enum=False,
)
_RISK_LEVEL = sa.Enum("LOW", "MEDIUM", "HIGH", name="risk_level", native_enum=False)
_WORKFLOW_ROLE = sa.Enum(
    "FIELD_OFFICER", "MANAGER", "DIRECTOR", "CHAIRPERSON", "CEO",
    name="workflow_role",
    native_enum=False,
)
_FINAL_RESULT = sa.Enum("NONE", "SUCCESSFUL", "FAILED", name="final_result", native_enum=False)
_USER_ROLE = sa.Enum(
    "ADMIN", "FIELD_OFFICER", "MANAGER", "DIRECTOR", "CHAIRPERSON", "CEO",
    name="user_role",
    native_enum=False,
)

_ROLES = ("field_officer", "manager", "director", "chairperson", "ceo")


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]
    if updated:
        columns.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)
        )
    return columns


def upgrade() -> None:
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("id_number", sa.String(32), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clients_full_name", "clients", ["full_name"])
    op.create_index("ix_clients_id_number", "clients", ["id_number"])
    op.create_index("ix_clients_created_by", "clients", ["created_by"])

    op.create_table(
        "loan_applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("loan_identification_number", sa.String(32), nullable=False),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("id_number", sa.String(32), nullable=True),
        sa.Column("loan_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("approved_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("loan_type", sa.String(50), nullable=True),
        sa.Column("purpose_of_loan", sa.Text(), nullable=True),
        sa.Column("employment_status", sa.String(50), nullable=True),
        sa.Column("monthly_income", sa.Numeric(14, 2), nullable=True),
        sa.Column("status", _APPLICATION_STATUS, nullable=False),
        sa.Column("risk_assessment", _RISK_LEVEL, nullable=True),
        sa.Column("approval_notes", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_loan_applications_loan_identification_number",
        "loan_applications",
        ["loan_identification_number"],
        unique=True,
    )
    op.create_index("ix_loan_applications_created_by", "loan_applications", ["created_by"])

    role_columns = []
    for role in _ROLES:
        role_columns += [
            sa.Column(f"{role}_approved", sa.Boolean(), nullable=True),
            sa.Column(f"{role}_notes", sa.Text(), nullable=True),
            sa.Column(f"{role}_name", sa.String(255), nullable=True),
        ]
    op.create_table(
        "loan_applications_workflow",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("loan_application_id", sa.Integer(), nullable=False),
        sa.Column("current_stage", _WORKFLOW_ROLE, nullable=False),
        sa.Column("final_result", _FINAL_RESULT, nullable=False),
        *role_columns,
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["loan_application_id"], ["loan_applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_loan_applications_workflow_loan_application_id",
        "loan_applications_workflow",
        ["loan_application_id"],
        unique=True,
    )

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("role", _USER_ROLE, nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_profiles_role", "profiles", ["role"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("related_to", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "loan_workflow_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("loan_application_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("performed_by", sa.String(255), nullable=True),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(updated=False),
        sa.ForeignKeyConstraint(["loan_application_id"], ["loan_applications.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_loan_workflow_log_loan_application_id", "loan_workflow_log", ["loan_application_id"])


def downgrade() -> None:
    op.drop_table("loan_workflow_log")
    op.drop_table("notifications")
    op.drop_table("profiles")
    op.drop_table("loan_applications_workflow")
    op.drop_table("loan_applications")
    op.drop_table("clients")
