# This project was developed with assistance from AI tools.
"""In-app notifications.

Delivery is best-effort: a notification that cannot be stored is logged
and dropped, and never undoes the business change that triggered it.
"""

import logging

from db import Notification, StaffProfile
from db.enums import UserRole
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from ..schemas.workflow import NotificationPlan

logger = logging.getLogger(__name__)


async def notify(
    session: AsyncSession,
    user_id: str,
    message: str,
    related_to: str,
    entity_id: str | None = None,
) -> Notification | None:
    """Store one notification for ``user_id``. Returns None if the write failed."""
    notification = Notification(
        user_id=user_id,
        message=message,
        related_to=related_to,
        entity_id=entity_id,
    )
    session.add(notification)
    try:
        await session.commit()
    except Exception:
        logger.warning(
            "Failed to store notification for user %s (%s %s)",
            user_id,
            related_to,
            entity_id,
            exc_info=True,
        )
        await session.rollback()
        return None
    return notification


async def users_with_role(session: AsyncSession, role: UserRole) -> list[str]:
    """Ids of the staff profiles holding ``role``."""
    stmt = select(StaffProfile.id).where(StaffProfile.role == role).order_by(StaffProfile.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def dispatch_notifications(
    session: AsyncSession,
    plans: list[NotificationPlan],
) -> int:
    """Deliver planned notifications. Returns how many were stored.

    Role-addressed plans fan out to every staff profile holding that role.
    """
    delivered = 0
    for plan in plans:
        if plan.user_id:
            recipients = [plan.user_id]
        elif plan.role is not None:
            try:
                recipients = await users_with_role(session, UserRole(plan.role.value))
            except Exception:
                logger.warning("Could not resolve recipients for role %s", plan.role.value, exc_info=True)
                continue
            if not recipients:
                logger.info("No staff profile holds role %s; notification skipped", plan.role.value)
        else:
            recipients = []

        for user_id in recipients:
            if await notify(session, user_id, plan.message, plan.related_to, plan.entity_id):
                delivered += 1
    return delivered


async def list_notifications(
    session: AsyncSession,
    user: UserContext,
    *,
    unread_only: bool = False,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Notification], int]:
    """Notifications addressed to the current user, newest first."""
    count_stmt = select(func.count(Notification.id)).where(Notification.user_id == user.user_id)
    stmt = (
        select(Notification)
        .where(Notification.user_id == user.user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(offset)
        .limit(limit)
    )
    if unread_only:
        count_stmt = count_stmt.where(Notification.is_read.is_(False))
        stmt = stmt.where(Notification.is_read.is_(False))

    total = (await session.execute(count_stmt)).scalar() or 0
    result = await session.execute(stmt)
    return list(result.scalars().all()), total


async def mark_read(
    session: AsyncSession,
    user: UserContext,
    notification_id: int,
) -> Notification | None:
    """Mark one of the user's notifications as read.

    Returns None for unknown ids and for notifications addressed to someone
    else, so existence is not leaked.
    """
    stmt = select(Notification).where(
        Notification.id == notification_id,
        Notification.user_id == user.user_id,
    )
    result = await session.execute(stmt)
    notification = result.scalar_one_or_none()
    if notification is None:
        return None
    notification.is_read = True
    await session.commit()
    return notification
