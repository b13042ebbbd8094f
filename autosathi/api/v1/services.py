"""Services API - workshop visits and next-service targets"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.api.deps import get_current_user, get_owned_vehicle
from autosathi.api.responses import success
from autosathi.domain.models import ServiceRecord, User
from autosathi.domain.models.service_record import (
    ServiceRecordCreate,
    ServiceRecordRead,
    ServiceRecordUpdate,
)
from autosathi.infrastructure.database import get_session
from autosathi.repositories import records, vehicles

router = APIRouter()


async def _get_owned_record(session: AsyncSession, record_id: UUID, user: User) -> ServiceRecord:
    record = await records.find_by_id(session, ServiceRecord, record_id, user.id)
    if not record:
        raise HTTPException(status_code=404, detail="Service record not found")
    return record


@router.post("/", status_code=201)
async def create_service_record(
    payload: ServiceRecordCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    vehicle = await get_owned_vehicle(session, payload.vehicle_id, user)
    record = await records.create(session, ServiceRecord, payload)

    # A workshop visit is also an odometer reading
    if record.odometer_reading and record.odometer_reading > vehicle.current_odometer:
        await vehicles.update_odometer(session, vehicle, record.odometer_reading)

    return success(
        {"service_record": ServiceRecordRead.model_validate(record)},
        message="Service record created successfully",
    )


@router.get("/")
async def list_service_records(
    vehicle_id: Optional[UUID] = None,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    rows = await records.list_for_user(session, ServiceRecord, user.id, vehicle_id=vehicle_id)
    return success({"service_records": [ServiceRecordRead.model_validate(r) for r in rows]})


@router.get("/{record_id}")
async def get_service_record(
    record_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    record = await _get_owned_record(session, record_id, user)
    return success({"service_record": ServiceRecordRead.model_validate(record)})


@router.put("/{record_id}")
async def update_service_record(
    record_id: UUID,
    payload: ServiceRecordUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    record = await _get_owned_record(session, record_id, user)

    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k not in ("service_date", "service_type")
    }
    record = await records.update(session, record, changes)

    vehicle = await get_owned_vehicle(session, record.vehicle_id, user)
    if record.odometer_reading and record.odometer_reading > vehicle.current_odometer:
        await vehicles.update_odometer(session, vehicle, record.odometer_reading)

    return success(
        {"service_record": ServiceRecordRead.model_validate(record)},
        message="Service record updated successfully",
    )


@router.delete("/{record_id}")
async def delete_service_record(
    record_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    record = await _get_owned_record(session, record_id, user)
    await records.delete(session, record)
    return success(message="Service record deleted successfully")
