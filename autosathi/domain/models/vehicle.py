"""Vehicle model"""
import re
from typing import Optional, Literal
from datetime import date, datetime
from pydantic import field_validator
from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4

VehicleType = Literal["car", "bike", "scooter", "truck", "bus"]
VehicleFuelType = Literal["petrol", "diesel", "cng", "electric", "hybrid"]

REGISTRATION_PATTERN = re.compile(r"^[A-Z0-9]+$")


def _check_year(value: Optional[int]) -> Optional[int]:
    if value is None:
        return value
    if not 1900 <= value <= date.today().year + 1:
        raise ValueError("Please provide a valid year")
    return value


def _normalize_registration(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip().upper()
    if not 5 <= len(value) <= 20:
        raise ValueError("Registration number must be between 5 and 20 characters")
    if not REGISTRATION_PATTERN.match(value):
        raise ValueError("Registration number should contain only letters and numbers")
    return value


class VehicleBase(SQLModel):
    make: str = Field(max_length=50)
    model: str = Field(max_length=50)
    year: int
    vehicle_type: str = Field(max_length=20)
    fuel_type: str = Field(max_length=20)
    registration_number: str = Field(index=True, max_length=20)
    chassis_number: Optional[str] = Field(default=None, max_length=50)
    engine_number: Optional[str] = Field(default=None, max_length=50)
    purchase_date: Optional[date] = None
    purchase_odometer: int = Field(default=0)
    current_odometer: int = Field(default=0)


class Vehicle(VehicleBase, table=True):
    __tablename__ = "vehicles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class VehicleCreate(SQLModel):
    make: str = Field(min_length=2, max_length=50)
    model: str = Field(min_length=2, max_length=50)
    year: int
    vehicle_type: VehicleType
    fuel_type: VehicleFuelType
    registration_number: str
    chassis_number: Optional[str] = Field(default=None, min_length=10, max_length=50)
    engine_number: Optional[str] = Field(default=None, min_length=5, max_length=50)
    purchase_date: Optional[date] = None
    purchase_odometer: int = Field(default=0, ge=0)
    current_odometer: int = Field(default=0, ge=0)

    @field_validator("year")
    @classmethod
    def check_year(cls, value):
        return _check_year(value)

    @field_validator("registration_number")
    @classmethod
    def normalize_registration(cls, value):
        return _normalize_registration(value)


class VehicleRead(VehicleBase):
    id: UUID
    user_id: UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime


class VehicleUpdate(SQLModel):
    make: Optional[str] = Field(default=None, min_length=2, max_length=50)
    model: Optional[str] = Field(default=None, min_length=2, max_length=50)
    year: Optional[int] = None
    vehicle_type: Optional[VehicleType] = None
    fuel_type: Optional[VehicleFuelType] = None
    registration_number: Optional[str] = None
    chassis_number: Optional[str] = Field(default=None, min_length=10, max_length=50)
    engine_number: Optional[str] = Field(default=None, min_length=5, max_length=50)
    purchase_date: Optional[date] = None
    current_odometer: Optional[int] = Field(default=None, ge=0)

    @field_validator("year")
    @classmethod
    def check_year(cls, value):
        return _check_year(value)

    @field_validator("registration_number")
    @classmethod
    def normalize_registration(cls, value):
        return _normalize_registration(value)


class OdometerUpdate(SQLModel):
    odometer_reading: int = Field(gt=0)
