# This project was developed with assistance from AI tools.
"""Notification response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from . import Pagination


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    message: str
    related_to: str
    entity_id: str | None = None
    is_read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    data: list[NotificationResponse]
    pagination: Pagination
