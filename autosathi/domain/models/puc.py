"""PUC (Pollution Under Control) certificate model"""
from typing import Optional
from datetime import date, datetime
from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4


class PucCertificateBase(SQLModel):
    vehicle_id: UUID = Field(foreign_key="vehicles.id", index=True)
    certificate_number: str = Field(max_length=50)
    testing_center: Optional[str] = Field(default=None, max_length=100)
    issue_date: Optional[date] = None
    expiry_date: date = Field(index=True)
    is_valid: bool = Field(default=True)


class PucCertificate(PucCertificateBase, table=True):
    __tablename__ = "puc"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class PucCertificateCreate(PucCertificateBase):
    certificate_number: str = Field(min_length=1, max_length=50)


class PucCertificateRead(PucCertificateBase):
    id: UUID
    created_at: datetime
    updated_at: datetime


class PucCertificateUpdate(SQLModel):
    certificate_number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    testing_center: Optional[str] = Field(default=None, max_length=100)
    issue_date: Optional[date] = None
    expiry_date: Optional[date] = None
    is_valid: Optional[bool] = None
