"""Notification schemas."""

from datetime import datetime
from typing import List

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: int
    message: str
    seen: bool
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    success: bool = True
    notifications: List[NotificationResponse]


class UnseenCountResponse(BaseModel):
    success: bool = True
    unseen: int
