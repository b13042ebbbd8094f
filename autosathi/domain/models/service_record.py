"""Service record model - workshop visits and the next service target"""
from typing import Optional
from datetime import date, datetime
from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4


class ServiceRecordBase(SQLModel):
    vehicle_id: UUID = Field(foreign_key="vehicles.id", index=True)
    service_date: date = Field(index=True)
    service_type: str = Field(max_length=50)  # 'regular', 'repair', 'oil_change', ...
    odometer_reading: Optional[int] = None
    cost: Optional[float] = None
    service_center: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None

    next_service_date: Optional[date] = None
    next_service_odometer: Optional[int] = None


class ServiceRecord(ServiceRecordBase, table=True):
    __tablename__ = "service_records"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ServiceRecordCreate(ServiceRecordBase):
    service_type: str = Field(min_length=1, max_length=50)
    odometer_reading: Optional[int] = Field(default=None, ge=0)
    cost: Optional[float] = Field(default=None, ge=0)
    next_service_odometer: Optional[int] = Field(default=None, ge=0)


class ServiceRecordRead(ServiceRecordBase):
    id: UUID
    created_at: datetime
    updated_at: datetime


class ServiceRecordUpdate(SQLModel):
    service_date: Optional[date] = None
    service_type: Optional[str] = Field(default=None, min_length=1, max_length=50)
    odometer_reading: Optional[int] = Field(default=None, ge=0)
    cost: Optional[float] = Field(default=None, ge=0)
    service_center: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    next_service_date: Optional[date] = None
    next_service_odometer: Optional[int] = Field(default=None, ge=0)
