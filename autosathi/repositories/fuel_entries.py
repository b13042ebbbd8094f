"""Fuel entry accessors, including mileage derivation on write"""
from datetime import date, datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.domain.mileage import average, calculate_mileage, month_start, months_ago
from autosathi.domain.models import FuelEntry, Vehicle
from autosathi.domain.models.fuel_entry import FuelEntryCreate


def _owned(user_id: UUID):
    """Fuel entries joined to their vehicle, limited to the user's active vehicles"""
    return (
        select(FuelEntry)
        .join(Vehicle, FuelEntry.vehicle_id == Vehicle.id)
        .where(Vehicle.user_id == user_id, Vehicle.is_active == True)  # noqa: E712
    )


async def find_previous_entry(
    session: AsyncSession,
    vehicle_id: UUID,
    odometer_reading: int,
    exclude_id: Optional[UUID] = None,
) -> Optional[FuelEntry]:
    """Entry with the highest odometer strictly below `odometer_reading`.

    Ties on odometer go to the latest fuel date.
    """
    query = select(FuelEntry).where(
        FuelEntry.vehicle_id == vehicle_id,
        FuelEntry.odometer_reading < odometer_reading,
    )
    if exclude_id is not None:
        query = query.where(FuelEntry.id != exclude_id)

    query = query.order_by(
        FuelEntry.odometer_reading.desc(),
        FuelEntry.fuel_date.desc(),
    ).limit(1)
    result = await session.execute(query)
    return result.scalars().first()


async def derive_mileage(
    session: AsyncSession,
    vehicle_id: UUID,
    odometer_reading: int,
    fuel_quantity: float,
    exclude_id: Optional[UUID] = None,
) -> Optional[float]:
    previous = await find_previous_entry(session, vehicle_id, odometer_reading, exclude_id)
    return calculate_mileage(
        odometer_reading,
        previous.odometer_reading if previous else None,
        fuel_quantity,
    )


async def create(session: AsyncSession, data: FuelEntryCreate) -> FuelEntry:
    entry = FuelEntry(**data.model_dump())
    entry.mileage_calculated = await derive_mileage(
        session, entry.vehicle_id, entry.odometer_reading, entry.fuel_quantity
    )

    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return entry


async def update(session: AsyncSession, entry: FuelEntry, changes: dict) -> FuelEntry:
    for key, value in changes.items():
        setattr(entry, key, value)

    entry.mileage_calculated = await derive_mileage(
        session,
        entry.vehicle_id,
        entry.odometer_reading,
        entry.fuel_quantity,
        exclude_id=entry.id,
    )
    entry.updated_at = datetime.utcnow()

    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    return entry


async def delete(session: AsyncSession, entry: FuelEntry) -> None:
    await session.delete(entry)
    await session.commit()


async def find_by_id(session: AsyncSession, entry_id: UUID, user_id: UUID) -> Optional[FuelEntry]:
    result = await session.execute(_owned(user_id).where(FuelEntry.id == entry_id))
    return result.scalar_one_or_none()


async def list_for_user(
    session: AsyncSession,
    user_id: UUID,
    vehicle_id: Optional[UUID] = None,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[FuelEntry]:
    query = _owned(user_id)
    if vehicle_id:
        query = query.where(FuelEntry.vehicle_id == vehicle_id)

    query = (
        query.order_by(FuelEntry.fuel_date.desc(), FuelEntry.odometer_reading.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await session.execute(query)
    return result.scalars().all()


async def count_for_user(
    session: AsyncSession,
    user_id: UUID,
    vehicle_id: Optional[UUID] = None,
) -> int:
    query = (
        select(func.count())
        .select_from(FuelEntry)
        .join(Vehicle, FuelEntry.vehicle_id == Vehicle.id)
        .where(Vehicle.user_id == user_id, Vehicle.is_active == True)  # noqa: E712
    )
    if vehicle_id:
        query = query.where(FuelEntry.vehicle_id == vehicle_id)

    result = await session.execute(query)
    return result.scalar_one()


async def list_between(
    session: AsyncSession,
    user_id: UUID,
    vehicle_id: Optional[UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Sequence[FuelEntry]:
    query = _owned(user_id)
    if vehicle_id:
        query = query.where(FuelEntry.vehicle_id == vehicle_id)
    if start_date:
        query = query.where(FuelEntry.fuel_date >= start_date)
    if end_date:
        query = query.where(FuelEntry.fuel_date <= end_date)

    result = await session.execute(query.order_by(FuelEntry.fuel_date.asc()))
    return result.scalars().all()


def group_by_month(entries: Sequence[FuelEntry]) -> dict:
    months: dict = {}
    for entry in entries:
        months.setdefault(month_start(entry.fuel_date), []).append(entry)
    return months


async def get_monthly_stats(
    session: AsyncSession,
    vehicle_id: UUID,
    user_id: UUID,
    months: int = 12,
    today: Optional[date] = None,
) -> List[dict]:
    today = today or date.today()
    entries = await list_between(
        session, user_id, vehicle_id=vehicle_id, start_date=months_ago(today, months)
    )

    stats = []
    for month, rows in group_by_month(entries).items():
        stats.append({
            "month": month,
            "entries": len(rows),
            "total_fuel": round(sum(r.fuel_quantity for r in rows), 2),
            "total_cost": round(sum(r.total_cost for r in rows), 2),
            "avg_mileage": average(r.mileage_calculated for r in rows),
        })

    stats.sort(key=lambda s: s["month"], reverse=True)
    return stats


async def get_average_mileage(session: AsyncSession, vehicle_id: UUID, user_id: UUID) -> float:
    entries = await list_between(session, user_id, vehicle_id=vehicle_id)
    return average(e.mileage_calculated for e in entries) or 0


async def get_total_expense(
    session: AsyncSession,
    vehicle_id: UUID,
    user_id: UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> float:
    entries = await list_between(
        session, user_id, vehicle_id=vehicle_id, start_date=start_date, end_date=end_date
    )
    return round(sum(e.total_cost for e in entries), 2)


async def get_recent_entries(session: AsyncSession, user_id: UUID, limit: int = 10) -> List[dict]:
    """Latest fill-ups across all of the user's vehicles, with vehicle labels"""
    query = (
        select(FuelEntry, Vehicle)
        .join(Vehicle, FuelEntry.vehicle_id == Vehicle.id)
        .where(Vehicle.user_id == user_id, Vehicle.is_active == True)  # noqa: E712
        .order_by(FuelEntry.fuel_date.desc(), FuelEntry.created_at.desc())
        .limit(limit)
    )
    result = await session.execute(query)

    recent = []
    for entry, vehicle in result.all():
        row = entry.model_dump()
        row.update(
            make=vehicle.make,
            model=vehicle.model,
            registration_number=vehicle.registration_number,
        )
        recent.append(row)
    return recent
