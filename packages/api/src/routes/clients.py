# This project was developed with assistance from AI tools.
"""Client routes."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.application import ApplicationResponse
from ..schemas.client import (
    ClientApplicationsResponse,
    ClientCreate,
    ClientResponse,
    ClientStatisticsResponse,
    MatchedApplication,
)
from ..services import client as client_service
from .applications import STAFF_ROLES

router = APIRouter()


@router.post(
    "/",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.FIELD_OFFICER, UserRole.MANAGER, UserRole.ADMIN))],
)
async def create_client(
    body: ClientCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ClientResponse:
    client = await client_service.create_client(session, user, body)
    return ClientResponse.model_validate(client)


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def get_client(
    client_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ClientResponse:
    client = await client_service.get_client(session, user, client_id)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client not found",
        )
    return ClientResponse.model_validate(client)


@router.get(
    "/{client_id}/applications",
    response_model=ClientApplicationsResponse,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def get_client_applications(
    client_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ClientApplicationsResponse:
    """Applications attributed to the client by name, phone, or ID number."""
    client = await client_service.get_client(session, user, client_id)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client not found",
        )
    matches, stats = await client_service.find_client_applications(session, user, client)
    return ClientApplicationsResponse(
        client=ClientResponse.model_validate(client),
        statistics=ClientStatisticsResponse.model_validate(stats),
        data=[
            MatchedApplication(
                score=round(m.score, 2),
                match_type=m.match_type,
                application=ApplicationResponse.model_validate(m.application),
            )
            for m in matches
        ],
    )
