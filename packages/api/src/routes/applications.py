# This project was developed with assistance from AI tools.
"""Application routes with RBAC enforcement."""

from db import get_db
from db.enums import ApplicationStatus, UserRole
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
)
from ..services import application as app_service
from ..services.amounts import AmountValidationError

router = APIRouter()

STAFF_ROLES = (
    UserRole.ADMIN,
    UserRole.FIELD_OFFICER,
    UserRole.MANAGER,
    UserRole.DIRECTOR,
    UserRole.CHAIRPERSON,
    UserRole.CEO,
)


@router.get(
    "/",
    response_model=ApplicationListResponse,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def list_applications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    filter_status: ApplicationStatus | None = None,
) -> ApplicationListResponse:
    """List applications visible to the current user's role and data scope."""
    applications, total = await app_service.list_applications(
        session,
        user,
        offset=offset,
        limit=limit,
        filter_status=filter_status,
    )
    return ApplicationListResponse(
        data=[ApplicationResponse.model_validate(app) for app in applications],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit) < total,
        ),
    )


@router.get(
    "/{application_id}",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def get_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Get a single application by ID."""
    app = await app_service.get_application(session, user, application_id)
    if app is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    return ApplicationResponse.model_validate(app)


@router.post(
    "/",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.FIELD_OFFICER, UserRole.ADMIN))],
)
async def create_application(
    body: ApplicationCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Submit a new application. Field officers and admins only."""
    try:
        app = await app_service.create_application(session, user, body)
    except AmountValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    if app is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    return ApplicationResponse.model_validate(app)
