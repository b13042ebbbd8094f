"""Notifications API - reminders produced by the daily job"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.api.deps import Page, Pagination, get_current_user
from autosathi.api.responses import pagination, success
from autosathi.domain.models import User
from autosathi.domain.models.notification import NotificationRead
from autosathi.infrastructure.database import get_session
from autosathi.repositories import notifications

router = APIRouter()


async def _get_owned_notification(session: AsyncSession, notification_id: UUID, user: User):
    notification = await notifications.find_by_id(session, notification_id, user.id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.get("/")
async def list_notifications(
    unread_only: bool = False,
    page: Page = Depends(Pagination(default_limit=20)),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """List notifications, newest first"""
    rows = await notifications.list_for_user(
        session, user.id, unread_only=unread_only, limit=page.limit, offset=page.offset
    )
    total = await notifications.count_for_user(session, user.id, unread_only=unread_only)
    unread = await notifications.count_for_user(session, user.id, unread_only=True)
    return success({
        "notifications": [NotificationRead.model_validate(n) for n in rows],
        "unread_count": unread,
        "pagination": pagination(page.page, page.limit, total),
    })


@router.put("/read-all")
async def mark_all_read(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    updated = await notifications.mark_all_read(session, user.id)
    return success({"updated": updated}, message="All notifications marked as read")


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    notification = await _get_owned_notification(session, notification_id, user)
    notification = await notifications.mark_read(session, notification)
    return success({"notification": NotificationRead.model_validate(notification)})


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    notification = await _get_owned_notification(session, notification_id, user)
    await notifications.delete(session, notification)
    return success(message="Notification deleted successfully")
