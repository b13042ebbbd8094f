"""Insurance, PUC and service record accessors

The three record types hang off a vehicle and share the same ownership rule:
a record is visible only through an active vehicle owned by the user.
"""
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Type, TypeVar
from uuid import UUID

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.domain.models import Insurance, PucCertificate, ServiceRecord, Vehicle

RecordT = TypeVar("RecordT", Insurance, PucCertificate, ServiceRecord)

# Column each record type is listed by, newest first
_ORDERING = {
    Insurance: Insurance.expiry_date,
    PucCertificate: PucCertificate.expiry_date,
    ServiceRecord: ServiceRecord.service_date,
}


def _owned(model: Type[RecordT], user_id: UUID):
    return (
        select(model)
        .join(Vehicle, model.vehicle_id == Vehicle.id)
        .where(Vehicle.user_id == user_id, Vehicle.is_active == True)  # noqa: E712
    )


async def create(session: AsyncSession, model: Type[RecordT], data: SQLModel) -> RecordT:
    record = model.model_validate(data)
    session.add(record)
    await session.commit()
    await session.refresh(record)
    return record


async def list_for_user(
    session: AsyncSession,
    model: Type[RecordT],
    user_id: UUID,
    vehicle_id: Optional[UUID] = None,
) -> Sequence[RecordT]:
    query = _owned(model, user_id)
    if vehicle_id:
        query = query.where(model.vehicle_id == vehicle_id)

    result = await session.execute(query.order_by(_ORDERING[model].desc()))
    return result.scalars().all()


async def find_by_id(
    session: AsyncSession,
    model: Type[RecordT],
    record_id: UUID,
    user_id: UUID,
) -> Optional[RecordT]:
    result = await session.execute(_owned(model, user_id).where(model.id == record_id))
    return result.scalar_one_or_none()


async def update(session: AsyncSession, record: RecordT, changes: dict) -> RecordT:
    for key, value in changes.items():
        setattr(record, key, value)
    record.updated_at = datetime.utcnow()

    session.add(record)
    await session.commit()
    await session.refresh(record)
    return record


async def delete(session: AsyncSession, record: SQLModel) -> None:
    await session.delete(record)
    await session.commit()


async def latest_service_records(
    session: AsyncSession,
    vehicle_ids: List[UUID],
) -> Dict[UUID, ServiceRecord]:
    """Most recent service visit per vehicle"""
    if not vehicle_ids:
        return {}
    query = (
        select(ServiceRecord)
        .where(ServiceRecord.vehicle_id.in_(vehicle_ids))
        .order_by(ServiceRecord.service_date.asc(), ServiceRecord.created_at.asc())
    )
    result = await session.execute(query)
    return {record.vehicle_id: record for record in result.scalars().all()}
