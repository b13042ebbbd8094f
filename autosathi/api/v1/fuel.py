"""Fuel API - fill-up log, mileage and expense stats"""
from datetime import date
from typing import Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.api.deps import Page, Pagination, get_current_user, get_owned_vehicle
from autosathi.api.responses import pagination, success
from autosathi.domain.models import User
from autosathi.domain.models.fuel_entry import FuelEntryCreate, FuelEntryRead, FuelEntryUpdate
from autosathi.infrastructure.database import get_session
from autosathi.repositories import fuel_entries, vehicles

router = APIRouter()
logger = structlog.get_logger()


async def _get_owned_entry(session: AsyncSession, entry_id: UUID, user: User):
    entry = await fuel_entries.find_by_id(session, entry_id, user.id)
    if not entry:
        raise HTTPException(status_code=404, detail="Fuel entry not found")
    return entry


@router.post("/", status_code=201)
async def create_fuel_entry(
    payload: FuelEntryCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Log a fill-up; mileage is derived from the previous entry"""
    vehicle = await get_owned_vehicle(session, payload.vehicle_id, user)

    if payload.odometer_reading < vehicle.current_odometer:
        raise HTTPException(
            status_code=400,
            detail="Odometer reading cannot be less than current vehicle odometer",
        )

    entry = await fuel_entries.create(session, payload)

    if entry.odometer_reading > vehicle.current_odometer:
        await vehicles.update_odometer(session, vehicle, entry.odometer_reading)

    logger.info(
        "fuel_entry_created",
        entry_id=str(entry.id),
        vehicle_id=str(vehicle.id),
        mileage=entry.mileage_calculated,
    )
    return success({"fuel_entry": FuelEntryRead.model_validate(entry)}, message="Fuel entry created successfully")


@router.get("/")
async def list_fuel_entries(
    vehicle_id: Optional[UUID] = None,
    page: Page = Depends(Pagination(default_limit=50)),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """All fill-ups across the user's active vehicles"""
    rows = await fuel_entries.list_for_user(
        session, user.id, vehicle_id=vehicle_id, limit=page.limit, offset=page.offset
    )
    total = await fuel_entries.count_for_user(session, user.id, vehicle_id=vehicle_id)
    return success({
        "fuel_entries": [FuelEntryRead.model_validate(e) for e in rows],
        "pagination": pagination(page.page, page.limit, total),
    })


@router.get("/recent")
async def get_recent_entries(
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    entries = await fuel_entries.get_recent_entries(session, user.id, limit=limit)
    return success({"entries": entries})


@router.get("/vehicle/{vehicle_id}")
async def get_vehicle_entries(
    vehicle_id: UUID,
    page: Page = Depends(Pagination(default_limit=50)),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await get_owned_vehicle(session, vehicle_id, user)

    rows = await fuel_entries.list_for_user(
        session, user.id, vehicle_id=vehicle_id, limit=page.limit, offset=page.offset
    )
    total = await fuel_entries.count_for_user(session, user.id, vehicle_id=vehicle_id)
    return success({
        "fuel_entries": [FuelEntryRead.model_validate(e) for e in rows],
        "pagination": pagination(page.page, page.limit, total),
    })


@router.get("/vehicle/{vehicle_id}/stats/monthly")
async def get_monthly_stats(
    vehicle_id: UUID,
    months: int = Query(12, ge=1, le=120),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await get_owned_vehicle(session, vehicle_id, user)
    stats = await fuel_entries.get_monthly_stats(session, vehicle_id, user.id, months=months)
    return success({"stats": stats})


@router.get("/vehicle/{vehicle_id}/stats/mileage")
async def get_average_mileage(
    vehicle_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await get_owned_vehicle(session, vehicle_id, user)
    avg_mileage = await fuel_entries.get_average_mileage(session, vehicle_id, user.id)
    return success({"average_mileage": avg_mileage})


@router.get("/vehicle/{vehicle_id}/stats/expense")
async def get_total_expense(
    vehicle_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await get_owned_vehicle(session, vehicle_id, user)
    total = await fuel_entries.get_total_expense(
        session, vehicle_id, user.id, start_date=start_date, end_date=end_date
    )
    return success({"total_expense": total})


@router.get("/{entry_id}")
async def get_fuel_entry(
    entry_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    entry = await _get_owned_entry(session, entry_id, user)
    return success({"fuel_entry": FuelEntryRead.model_validate(entry)})


@router.put("/{entry_id}")
async def update_fuel_entry(
    entry_id: UUID,
    payload: FuelEntryUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Correct a fill-up; mileage is recomputed against the same vehicle"""
    entry = await _get_owned_entry(session, entry_id, user)

    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k == "fuel_station"
    }
    entry = await fuel_entries.update(session, entry, changes)

    vehicle = await get_owned_vehicle(session, entry.vehicle_id, user)
    if entry.odometer_reading > vehicle.current_odometer:
        await vehicles.update_odometer(session, vehicle, entry.odometer_reading)

    return success({"fuel_entry": FuelEntryRead.model_validate(entry)}, message="Fuel entry updated successfully")


@router.delete("/{entry_id}")
async def delete_fuel_entry(
    entry_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    entry = await _get_owned_entry(session, entry_id, user)
    await fuel_entries.delete(session, entry)
    return success(message="Fuel entry deleted successfully")
