"""Insurance policy model"""
from typing import Optional
from datetime import date, datetime
from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4


class InsuranceBase(SQLModel):
    vehicle_id: UUID = Field(foreign_key="vehicles.id", index=True)
    policy_number: str = Field(max_length=50)
    insurance_company: str = Field(max_length=100)
    policy_type: Optional[str] = Field(default=None, max_length=50)  # 'comprehensive', 'third_party'
    start_date: Optional[date] = None
    expiry_date: date = Field(index=True)
    premium_amount: Optional[float] = None
    is_active: bool = Field(default=True)


class Insurance(InsuranceBase, table=True):
    __tablename__ = "insurance"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class InsuranceCreate(InsuranceBase):
    policy_number: str = Field(min_length=1, max_length=50)
    insurance_company: str = Field(min_length=1, max_length=100)
    premium_amount: Optional[float] = Field(default=None, ge=0)


class InsuranceRead(InsuranceBase):
    id: UUID
    created_at: datetime
    updated_at: datetime


class InsuranceUpdate(SQLModel):
    policy_number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    insurance_company: Optional[str] = Field(default=None, min_length=1, max_length=100)
    policy_type: Optional[str] = Field(default=None, max_length=50)
    start_date: Optional[date] = None
    expiry_date: Optional[date] = None
    premium_amount: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
