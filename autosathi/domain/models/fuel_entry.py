"""Fuel entry model - one fill-up of one vehicle"""
from typing import Optional, Literal
from datetime import date, datetime
from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4

FuelType = Literal["petrol", "diesel", "cng"]


class FuelEntryBase(SQLModel):
    vehicle_id: UUID = Field(foreign_key="vehicles.id", index=True)
    fuel_date: date = Field(index=True)
    odometer_reading: int
    fuel_quantity: float
    fuel_price_per_liter: float
    total_cost: float
    fuel_station: Optional[str] = Field(default=None, max_length=100)
    fuel_type: str = Field(max_length=20)


class FuelEntry(FuelEntryBase, table=True):
    __tablename__ = "fuel_entries"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    # Distance per unit of fuel since the previous fill-up; None when not derivable
    mileage_calculated: Optional[float] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class FuelEntryCreate(SQLModel):
    vehicle_id: UUID
    fuel_date: date
    odometer_reading: int = Field(ge=0)
    fuel_quantity: float = Field(ge=0.1)
    fuel_price_per_liter: float = Field(ge=0.1)
    total_cost: float = Field(ge=0.1)
    fuel_station: Optional[str] = Field(default=None, max_length=100)
    fuel_type: FuelType


class FuelEntryRead(FuelEntryBase):
    id: UUID
    mileage_calculated: Optional[float]
    created_at: datetime
    updated_at: datetime


class FuelEntryUpdate(SQLModel):
    fuel_date: Optional[date] = None
    odometer_reading: Optional[int] = Field(default=None, ge=0)
    fuel_quantity: Optional[float] = Field(default=None, ge=0.1)
    fuel_price_per_liter: Optional[float] = Field(default=None, ge=0.1)
    total_cost: Optional[float] = Field(default=None, ge=0.1)
    fuel_station: Optional[str] = Field(default=None, max_length=100)
    fuel_type: Optional[FuelType] = None
