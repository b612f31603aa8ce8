# This project was developed with assistance from AI tools.
"""Application service with role-based data scope filtering.

Every query is filtered through the caller's DataScope so that field
officers see only the applications they submitted while approvers and
admins see the whole pipeline.
"""

import logging
import random
from datetime import UTC, datetime

from db import LoanApplication, WorkflowLog
from db.enums import ApplicationStatus, WorkflowRole
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.application import ApplicationCreate
from ..schemas.auth import UserContext
from ..schemas.workflow import NotificationPlan
from ..services.scope import apply_data_scope
from .amounts import AmountValidationError, parse_optional_amount, validate_monetary_amount
from .notification import dispatch_notifications
from .risk import assess_risk
from .workflow import SUBMISSION_NOTE
from .workflow_store import create_workflow

logger = logging.getLogger(__name__)

_LOAN_ID_ATTEMPTS = 3


def generate_loan_identification_number(now: datetime | None = None) -> str:
    """Loan number of the form ``LN-YYYY-MM-NNNNN`` with a random suffix."""
    now = now or datetime.now(UTC)
    return f"LN-{now.year:04d}-{now.month:02d}-{random.randint(10000, 99999)}"


async def list_applications(
    session: AsyncSession,
    user: UserContext,
    *,
    offset: int = 0,
    limit: int = 20,
    filter_status: ApplicationStatus | None = None,
) -> tuple[list[LoanApplication], int]:
    """Return applications visible to the current user, newest first."""
    count_stmt = select(func.count(LoanApplication.id))
    count_stmt = apply_data_scope(count_stmt, user.data_scope, user)
    if filter_status is not None:
        count_stmt = count_stmt.where(LoanApplication.status == filter_status)
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        select(LoanApplication)
        .order_by(LoanApplication.created_at.desc(), LoanApplication.id.desc())
        .offset(offset)
        .limit(limit)
    )
    stmt = apply_data_scope(stmt, user.data_scope, user)
    if filter_status is not None:
        stmt = stmt.where(LoanApplication.status == filter_status)
    result = await session.execute(stmt)
    applications = list(result.scalars().all())

    return applications, total


async def get_application(
    session: AsyncSession,
    user: UserContext,
    application_id: int,
) -> LoanApplication | None:
    """Return a single application if visible to the current user.

    Returns None (which the route maps to 404) for out-of-scope applications
    rather than 403, to avoid leaking existence of resources.
    """
    stmt = select(LoanApplication).where(LoanApplication.id == application_id)
    stmt = apply_data_scope(stmt, user.data_scope, user)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_application(
    session: AsyncSession,
    user: UserContext,
    payload: ApplicationCreate,
) -> LoanApplication | None:
    """Submit an application and start its approval workflow.

    The submitting field officer's approval is implicit, so the application
    starts out waiting on the manager, and managers are notified.

    Raises:
        AmountValidationError: If the loan amount or income is malformed.
    """
    loan_amount = validate_monetary_amount(payload.loan_amount)
    if loan_amount <= 0:
        raise AmountValidationError("Loan amount must be greater than zero")
    monthly_income = parse_optional_amount(payload.monthly_income)
    if monthly_income is not None:
        monthly_income = validate_monetary_amount(monthly_income)

    risk = assess_risk(payload.employment_status, loan_amount, monthly_income)

    application = None
    for attempt in range(1, _LOAN_ID_ATTEMPTS + 1):
        application = LoanApplication(
            loan_identification_number=generate_loan_identification_number(),
            client_name=payload.client_name.strip(),
            phone_number=payload.phone_number,
            id_number=payload.id_number,
            loan_amount=loan_amount,
            loan_type=payload.loan_type,
            purpose_of_loan=payload.purpose_of_loan,
            employment_status=payload.employment_status,
            monthly_income=monthly_income,
            status=ApplicationStatus.PENDING_MANAGER,
            risk_assessment=risk,
            created_by=user.user_id,
        )
        session.add(application)
        try:
            await session.flush()
            break
        except IntegrityError:
            await session.rollback()
            if attempt == _LOAN_ID_ATTEMPTS:
                raise
            logger.warning("Loan number collision, retrying (attempt %d)", attempt)

    app_id = application.id  # capture before commit expires the object
    create_workflow(session, app_id, submitted_by=user.name)
    session.add(
        WorkflowLog(
            loan_application_id=app_id,
            action="submitted",
            performed_by=user.user_id,
            status=ApplicationStatus.PENDING_MANAGER.value,
            notes=SUBMISSION_NOTE,
        )
    )
    await session.commit()
    logger.info(
        "Application %s submitted by %s (risk=%s)", app_id, user.user_id, risk.value,
    )

    await dispatch_notifications(
        session,
        [
            NotificationPlan(
                message=(
                    f"New loan application for {payload.client_name.strip()} "
                    "is awaiting your review as manager."
                ),
                role=WorkflowRole.MANAGER,
                entity_id=str(app_id),
            )
        ],
    )
    return await get_application(session, user, app_id)
