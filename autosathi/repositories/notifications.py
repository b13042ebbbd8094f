"""Notification accessors"""
from datetime import datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func, update as sql_update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.domain.models import Notification


async def list_for_user(
    session: AsyncSession,
    user_id: UUID,
    unread_only: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> Sequence[Notification]:
    query = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.is_read == False)  # noqa: E712

    query = query.order_by(Notification.created_at.desc()).offset(offset).limit(limit)
    result = await session.execute(query)
    return result.scalars().all()


async def count_for_user(session: AsyncSession, user_id: UUID, unread_only: bool = False) -> int:
    query = select(func.count()).select_from(Notification).where(Notification.user_id == user_id)
    if unread_only:
        query = query.where(Notification.is_read == False)  # noqa: E712

    result = await session.execute(query)
    return result.scalar_one()


async def find_by_id(session: AsyncSession, notification_id: UUID, user_id: UUID) -> Optional[Notification]:
    query = select(Notification).where(
        Notification.id == notification_id,
        Notification.user_id == user_id,
    )
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def mark_read(session: AsyncSession, notification: Notification) -> Notification:
    notification.is_read = True
    session.add(notification)
    await session.commit()
    await session.refresh(notification)
    return notification


async def mark_all_read(session: AsyncSession, user_id: UUID) -> int:
    statement = (
        sql_update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        .values(is_read=True)
    )
    result = await session.execute(statement)
    await session.commit()
    return result.rowcount or 0


async def delete(session: AsyncSession, notification: Notification) -> None:
    await session.delete(notification)
    await session.commit()


async def exists_since(
    session: AsyncSession,
    user_id: UUID,
    vehicle_id: UUID,
    notification_type: str,
    since: datetime,
) -> bool:
    """Whether this (user, vehicle, type) was already notified after `since`"""
    query = select(Notification.id).where(
        Notification.user_id == user_id,
        Notification.vehicle_id == vehicle_id,
        Notification.notification_type == notification_type,
        Notification.created_at >= since,
    ).limit(1)
    result = await session.execute(query)
    return result.first() is not None


async def create(
    session: AsyncSession,
    user_id: UUID,
    vehicle_id: UUID,
    notification_type: str,
    title: str,
    message: str,
) -> Notification:
    now = datetime.utcnow()
    notification = Notification(
        user_id=user_id,
        vehicle_id=vehicle_id,
        notification_type=notification_type,
        title=title,
        message=message,
        scheduled_date=now,
        created_at=now,
    )
    session.add(notification)
    await session.commit()
    return notification
