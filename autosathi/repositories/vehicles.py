"""Vehicle accessors

Every lookup is scoped to the owning user and to active (not soft-deleted)
vehicles, so a vehicle that belongs to someone else looks exactly like a
vehicle that does not exist.
"""
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.domain.models import Insurance, PucCertificate, Vehicle
from autosathi.domain.models.vehicle import VehicleCreate

# Stats key per vehicle type
VEHICLE_TYPE_KEYS = {
    "car": "cars",
    "bike": "bikes",
    "scooter": "scooters",
    "truck": "trucks",
    "bus": "buses",
}
FUEL_TYPES = ("petrol", "diesel", "cng", "electric", "hybrid")


def _active_for_user(user_id: UUID):
    return select(Vehicle).where(Vehicle.user_id == user_id, Vehicle.is_active == True)  # noqa: E712


async def create(session: AsyncSession, user_id: UUID, data: VehicleCreate) -> Vehicle:
    vehicle = Vehicle(user_id=user_id, **data.model_dump())
    session.add(vehicle)
    await session.commit()
    await session.refresh(vehicle)
    return vehicle


async def list_for_user(
    session: AsyncSession,
    user_id: UUID,
    limit: int = 10,
    offset: int = 0,
) -> Sequence[Vehicle]:
    query = (
        _active_for_user(user_id)
        .order_by(Vehicle.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await session.execute(query)
    return result.scalars().all()


async def count_for_user(session: AsyncSession, user_id: UUID) -> int:
    query = select(func.count()).select_from(Vehicle).where(
        Vehicle.user_id == user_id,
        Vehicle.is_active == True,  # noqa: E712
    )
    result = await session.execute(query)
    return result.scalar_one()


async def find_by_id(session: AsyncSession, vehicle_id: UUID, user_id: UUID) -> Optional[Vehicle]:
    result = await session.execute(_active_for_user(user_id).where(Vehicle.id == vehicle_id))
    return result.scalar_one_or_none()


async def find_by_registration_number(
    session: AsyncSession,
    registration_number: str,
    user_id: UUID,
) -> Optional[Vehicle]:
    query = _active_for_user(user_id).where(
        Vehicle.registration_number == registration_number.upper()
    )
    result = await session.execute(query)
    return result.scalars().first()


async def update(session: AsyncSession, vehicle: Vehicle, changes: dict) -> Vehicle:
    for key, value in changes.items():
        setattr(vehicle, key, value)
    vehicle.updated_at = datetime.utcnow()

    session.add(vehicle)
    await session.commit()
    await session.refresh(vehicle)
    return vehicle


async def update_odometer(session: AsyncSession, vehicle: Vehicle, odometer_reading: int) -> Vehicle:
    return await update(session, vehicle, {"current_odometer": odometer_reading})


async def soft_delete(session: AsyncSession, vehicle: Vehicle) -> None:
    vehicle.is_active = False
    vehicle.updated_at = datetime.utcnow()
    session.add(vehicle)
    await session.commit()


async def get_stats(session: AsyncSession, user_id: UUID) -> Dict[str, int]:
    """Counts of active vehicles by type and fuel"""
    result = await session.execute(_active_for_user(user_id))
    vehicles = result.scalars().all()

    stats = {"total_vehicles": len(vehicles)}
    for key in VEHICLE_TYPE_KEYS.values():
        stats[key] = 0
    for fuel_type in FUEL_TYPES:
        stats[f"{fuel_type}_vehicles"] = 0

    for vehicle in vehicles:
        type_key = VEHICLE_TYPE_KEYS.get(vehicle.vehicle_type)
        if type_key:
            stats[type_key] += 1
        fuel_key = f"{vehicle.fuel_type}_vehicles"
        if fuel_key in stats:
            stats[fuel_key] += 1

    return stats


async def latest_insurance(session: AsyncSession, vehicle_ids: List[UUID]) -> Dict[UUID, Insurance]:
    """Current active policy per vehicle (latest expiry wins)"""
    if not vehicle_ids:
        return {}
    query = (
        select(Insurance)
        .where(Insurance.vehicle_id.in_(vehicle_ids), Insurance.is_active == True)  # noqa: E712
        .order_by(Insurance.expiry_date.asc())
    )
    result = await session.execute(query)
    # Ascending order: later rows overwrite earlier ones
    return {policy.vehicle_id: policy for policy in result.scalars().all()}


async def latest_puc(session: AsyncSession, vehicle_ids: List[UUID]) -> Dict[UUID, PucCertificate]:
    """Current valid certificate per vehicle (latest expiry wins)"""
    if not vehicle_ids:
        return {}
    query = (
        select(PucCertificate)
        .where(PucCertificate.vehicle_id.in_(vehicle_ids), PucCertificate.is_valid == True)  # noqa: E712
        .order_by(PucCertificate.expiry_date.asc())
    )
    result = await session.execute(query)
    return {cert.vehicle_id: cert for cert in result.scalars().all()}


async def get_upcoming_renewals(
    session: AsyncSession,
    user_id: UUID,
    days: int = 30,
    today: Optional[date] = None,
) -> List[dict]:
    """Vehicles whose insurance or PUC expires within `days` (or already has)."""
    today = today or date.today()
    horizon = today + timedelta(days=days)

    result = await session.execute(_active_for_user(user_id))
    vehicles = result.scalars().all()
    vehicle_ids = [v.id for v in vehicles]

    policies = await latest_insurance(session, vehicle_ids)
    certificates = await latest_puc(session, vehicle_ids)

    renewals = []
    for vehicle in vehicles:
        policy = policies.get(vehicle.id)
        certificate = certificates.get(vehicle.id)
        insurance_expiry = policy.expiry_date if policy else None
        puc_expiry = certificate.expiry_date if certificate else None

        due = [d for d in (insurance_expiry, puc_expiry) if d is not None and d <= horizon]
        if not due:
            continue

        renewals.append({
            "id": vehicle.id,
            "make": vehicle.make,
            "model": vehicle.model,
            "registration_number": vehicle.registration_number,
            "insurance_expiry": insurance_expiry,
            "puc_expiry": puc_expiry,
            "next_expiry": min(d for d in (insurance_expiry, puc_expiry) if d is not None),
        })

    renewals.sort(key=lambda r: r["next_expiry"])
    return renewals
