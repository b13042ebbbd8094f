"""Vehicles API - vehicle registry for the authenticated user"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.api.deps import Page, Pagination, get_current_user, get_owned_vehicle
from autosathi.api.responses import pagination, success
from autosathi.domain.models import User
from autosathi.domain.models.vehicle import (
    OdometerUpdate,
    VehicleCreate,
    VehicleRead,
    VehicleUpdate,
)
from autosathi.infrastructure.database import get_session
from autosathi.repositories import vehicles

router = APIRouter()

DUPLICATE_REGISTRATION = "Vehicle with this registration number already exists"
# Optional columns a PUT may reset to null
CLEARABLE_FIELDS = ("chassis_number", "engine_number", "purchase_date")


@router.post("/", status_code=201)
async def create_vehicle(
    payload: VehicleCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    if await vehicles.find_by_registration_number(session, payload.registration_number, user.id):
        raise HTTPException(status_code=409, detail=DUPLICATE_REGISTRATION)

    vehicle = await vehicles.create(session, user.id, payload)
    return success({"vehicle": VehicleRead.model_validate(vehicle)}, message="Vehicle created successfully")


@router.get("/")
async def list_vehicles(
    page: Page = Depends(Pagination(default_limit=10)),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """List the user's active vehicles, newest first"""
    rows = await vehicles.list_for_user(session, user.id, limit=page.limit, offset=page.offset)
    total = await vehicles.count_for_user(session, user.id)
    return success({
        "vehicles": [VehicleRead.model_validate(v) for v in rows],
        "pagination": pagination(page.page, page.limit, total),
    })


@router.get("/stats")
async def get_vehicle_stats(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    stats = await vehicles.get_stats(session, user.id)
    return success({"stats": stats})


@router.get("/renewals")
async def get_upcoming_renewals(
    days: int = Query(30, ge=1, le=365),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Vehicles with insurance or PUC expiring within `days`"""
    renewals = await vehicles.get_upcoming_renewals(session, user.id, days=days)
    return success({"renewals": renewals})


@router.get("/{vehicle_id}")
async def get_vehicle(
    vehicle_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    vehicle = await get_owned_vehicle(session, vehicle_id, user)
    return success({"vehicle": VehicleRead.model_validate(vehicle)})


@router.put("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: UUID,
    payload: VehicleUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    vehicle = await get_owned_vehicle(session, vehicle_id, user)

    changes = {
        k: v for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in CLEARABLE_FIELDS
    }

    new_registration = changes.get("registration_number")
    if new_registration and new_registration != vehicle.registration_number:
        conflict = await vehicles.find_by_registration_number(session, new_registration, user.id)
        if conflict and conflict.id != vehicle.id:
            raise HTTPException(status_code=409, detail=DUPLICATE_REGISTRATION)

    vehicle = await vehicles.update(session, vehicle, changes)
    return success({"vehicle": VehicleRead.model_validate(vehicle)}, message="Vehicle updated successfully")


@router.patch("/{vehicle_id}/odometer")
async def update_odometer(
    vehicle_id: UUID,
    payload: OdometerUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    vehicle = await get_owned_vehicle(session, vehicle_id, user)
    vehicle = await vehicles.update_odometer(session, vehicle, payload.odometer_reading)
    return success({"vehicle": VehicleRead.model_validate(vehicle)}, message="Odometer updated successfully")


@router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Soft delete: the vehicle and its history stay in the database"""
    vehicle = await get_owned_vehicle(session, vehicle_id, user)
    await vehicles.soft_delete(session, vehicle)
    return success(message="Vehicle deleted successfully")
