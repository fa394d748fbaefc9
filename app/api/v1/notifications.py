"""Notification endpoints."""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user, get_notification_service
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
    UnseenCountResponse,
)
from app.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """Notifications of the current user, newest first."""
    return NotificationListResponse(notifications=await service.list_for_user(current_user.id))


@router.get("/unseen-count", response_model=UnseenCountResponse)
async def unseen_count(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return UnseenCountResponse(unseen=await service.unseen_count(current_user.id))


@router.put("/seen-all", response_model=MessageResponse)
async def mark_all_seen(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    updated = await service.mark_all_seen(current_user.id)
    return MessageResponse(message=f"{updated} notification(s) marked as seen")


@router.put("/{notification_id}/seen", response_model=NotificationResponse)
async def mark_seen(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.mark_seen(notification_id, current_user.id)
