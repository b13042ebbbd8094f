"""Notification model - renewal and service reminders"""
from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4


class NotificationBase(SQLModel):
    user_id: UUID = Field(foreign_key="users.id", index=True)
    vehicle_id: Optional[UUID] = Field(foreign_key="vehicles.id", default=None, index=True)

    notification_type: str = Field(max_length=20)  # 'insurance', 'puc', 'service'
    title: str = Field(max_length=200)
    message: str

    is_read: bool = Field(default=False)
    scheduled_date: Optional[datetime] = None


class Notification(NotificationBase, table=True):
    __tablename__ = "notifications"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)


class NotificationRead(NotificationBase):
    id: UUID
    created_at: datetime
