# This project was developed with assistance from AI tools.
"""Notification inbox for the current user."""

from db import get_db
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser
from ..schemas import Pagination
from ..schemas.notification import NotificationListResponse, NotificationResponse
from ..services import notification as notification_service

router = APIRouter()


@router.get("/", response_model=NotificationListResponse)
async def list_notifications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    unread_only: bool = Query(default=False),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> NotificationListResponse:
    notifications, total = await notification_service.list_notifications(
        session, user, unread_only=unread_only, offset=offset, limit=limit
    )
    return NotificationListResponse(
        data=[NotificationResponse.model_validate(n) for n in notifications],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit) < total,
        ),
    )


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> NotificationResponse:
    notification = await notification_service.mark_read(session, user, notification_id)
    if notification is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )
    return NotificationResponse.model_validate(notification)
