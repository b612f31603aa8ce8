# This project was developed with assistance from AI tools.
"""
SQLAdmin configuration for database administration UI

Access the admin panel at: http://localhost:8000/admin

When AUTH_DISABLED=false, requires admin credentials via login form.
When AUTH_DISABLED=true, admin panel is open (dev mode).
"""

from db import (
    Client,
    LoanApplication,
    LoanWorkflow,
    Notification,
    StaffProfile,
    WorkflowLog,
)
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from sqlalchemy import create_engine
from starlette.requests import Request
from starlette.responses import Response

from .core.config import settings

# SQLAdmin requires a sync engine; derive from the async DATABASE_URL
_sync_url = settings.DATABASE_URL.replace("+asyncpg", "")
engine = create_engine(_sync_url, echo=False)


class AdminAuth(AuthenticationBackend):
    """Session-based auth gate for SQLAdmin.

    When AUTH_DISABLED=true, authenticate() always returns True (dev mode).
    Otherwise, requires login with credentials from SQLADMIN_USER / SQLADMIN_PASSWORD env vars.
    """

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = form.get("username")
        password = form.get("password")
        if username == settings.SQLADMIN_USER and password == settings.SQLADMIN_PASSWORD:
            request.session.update({"admin_authenticated": True})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> Response | bool:
        if settings.AUTH_DISABLED:
            return True
        return request.session.get("admin_authenticated", False)


class ClientAdmin(ModelView, model=Client):
    column_list = [
        Client.id,
        Client.full_name,
        Client.phone_number,
        Client.id_number,
        Client.created_at,
    ]
    column_searchable_list = [Client.full_name, Client.phone_number, Client.id_number]
    column_sortable_list = [Client.id, Client.full_name, Client.created_at]
    column_default_sort = [(Client.created_at, True)]
    name = "Client"
    name_plural = "Clients"
    icon = "fa-solid fa-user"


class LoanApplicationAdmin(ModelView, model=LoanApplication):
    column_list = [
        LoanApplication.id,
        LoanApplication.loan_identification_number,
        LoanApplication.client_name,
        LoanApplication.loan_amount,
        LoanApplication.status,
        LoanApplication.risk_assessment,
        LoanApplication.created_at,
    ]
    column_searchable_list = [
        LoanApplication.loan_identification_number,
        LoanApplication.client_name,
    ]
    column_sortable_list = [LoanApplication.id, LoanApplication.status, LoanApplication.created_at]
    column_default_sort = [(LoanApplication.created_at, True)]
    name = "Loan Application"
    name_plural = "Loan Applications"
    icon = "fa-solid fa-file-alt"


class LoanWorkflowAdmin(ModelView, model=LoanWorkflow):
    column_list = [
        LoanWorkflow.id,
        LoanWorkflow.loan_application_id,
        LoanWorkflow.current_stage,
        LoanWorkflow.final_result,
        LoanWorkflow.version,
        LoanWorkflow.updated_at,
    ]
    column_sortable_list = [LoanWorkflow.id, LoanWorkflow.current_stage, LoanWorkflow.updated_at]
    # Decisions go through the API so the concurrency guard applies.
    can_create = False
    can_edit = False
    can_delete = False
    name = "Workflow"
    name_plural = "Workflows"
    icon = "fa-solid fa-gavel"


class StaffProfileAdmin(ModelView, model=StaffProfile):
    column_list = [StaffProfile.id, StaffProfile.full_name, StaffProfile.email, StaffProfile.role]
    column_searchable_list = [StaffProfile.full_name, StaffProfile.email]
    column_sortable_list = [StaffProfile.full_name, StaffProfile.role]
    name = "Staff Profile"
    name_plural = "Staff Profiles"
    icon = "fa-solid fa-id-badge"


class NotificationAdmin(ModelView, model=Notification):
    column_list = [
        Notification.id,
        Notification.user_id,
        Notification.related_to,
        Notification.is_read,
        Notification.created_at,
    ]
    column_default_sort = [(Notification.created_at, True)]
    can_create = False
    name = "Notification"
    name_plural = "Notifications"
    icon = "fa-solid fa-bell"


class WorkflowLogAdmin(ModelView, model=WorkflowLog):
    column_list = [
        WorkflowLog.id,
        WorkflowLog.loan_application_id,
        WorkflowLog.action,
        WorkflowLog.performed_by,
        WorkflowLog.status,
        WorkflowLog.created_at,
    ]
    column_sortable_list = [WorkflowLog.id, WorkflowLog.created_at]
    column_default_sort = [(WorkflowLog.created_at, True)]
    can_create = False
    can_edit = False
    can_delete = False
    name = "Workflow Log"
    name_plural = "Workflow Log"
    icon = "fa-solid fa-shield-alt"


def setup_admin(app):
    """Set up SQLAdmin and mount it to the FastAPI app."""
    auth_backend = AdminAuth(
        secret_key=settings.SQLADMIN_SECRET_KEY,
    )
    admin = Admin(app, engine, title="Loanflow Admin", authentication_backend=auth_backend)

    admin.add_view(ClientAdmin)
    admin.add_view(LoanApplicationAdmin)
    admin.add_view(LoanWorkflowAdmin)
    admin.add_view(StaffProfileAdmin)
    admin.add_view(NotificationAdmin)
    admin.add_view(WorkflowLogAdmin)

    return admin
