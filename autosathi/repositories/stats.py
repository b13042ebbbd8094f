"""Dashboard aggregates

Aggregation happens in Python over the user's rows, which keeps the queries
portable across database backends.
"""
from datetime import date, timedelta
from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.domain.mileage import average, month_start, months_ago
from autosathi.domain.models import Vehicle
from autosathi.repositories import fuel_entries, notifications, records, vehicles

# A service is due when the odometer is within this many km of the target
SERVICE_ODOMETER_MARGIN = 500
DUE_SOON_DAYS = 30

HEALTH_PRIORITY = {"insurance_due": 1, "puc_due": 2, "service_due": 3, "healthy": 4}


async def _active_vehicles(session: AsyncSession, user_id: UUID) -> List[Vehicle]:
    query = select(Vehicle).where(Vehicle.user_id == user_id, Vehicle.is_active == True)  # noqa: E712
    result = await session.execute(query)
    return list(result.scalars().all())


def service_odometer_due(current_odometer: int, next_service_odometer: Optional[int]) -> bool:
    return (
        next_service_odometer is not None
        and current_odometer >= next_service_odometer - SERVICE_ODOMETER_MARGIN
    )


async def get_overview(session: AsyncSession, user_id: UUID, today: Optional[date] = None) -> dict:
    today = today or date.today()

    vehicle_stats = await vehicles.get_stats(session, user_id)
    renewals = await vehicles.get_upcoming_renewals(session, user_id, days=DUE_SOON_DAYS, today=today)
    month_entries = await fuel_entries.list_between(session, user_id, start_date=month_start(today))
    recent = await fuel_entries.get_recent_entries(session, user_id, limit=5)
    unread = await notifications.count_for_user(session, user_id, unread_only=True)

    return {
        "vehicle_stats": vehicle_stats,
        "upcoming_renewals": len(renewals),
        "current_month_expense": round(sum(e.total_cost for e in month_entries), 2),
        "recent_entries": recent,
        "unread_notifications": unread,
    }


async def get_mileage_stats(
    session: AsyncSession,
    user_id: UUID,
    months: int = 6,
    today: Optional[date] = None,
) -> List[dict]:
    today = today or date.today()
    entries = await fuel_entries.list_between(session, user_id, start_date=months_ago(today, months))

    by_vehicle: dict = {}
    for entry in entries:
        if entry.mileage_calculated is not None:
            by_vehicle.setdefault(entry.vehicle_id, []).append(entry.mileage_calculated)

    stats = []
    for vehicle in await _active_vehicles(session, user_id):
        values = by_vehicle.get(vehicle.id, [])
        stats.append({
            "id": vehicle.id,
            "make": vehicle.make,
            "model": vehicle.model,
            "registration_number": vehicle.registration_number,
            "avg_mileage": average(values),
            "fuel_entries_count": len(values),
        })

    # Highest average first, vehicles without any mileage last
    stats.sort(key=lambda s: (s["avg_mileage"] is None, -(s["avg_mileage"] or 0)))
    return stats


async def get_expense_trends(
    session: AsyncSession,
    user_id: UUID,
    months: int = 12,
    today: Optional[date] = None,
) -> List[dict]:
    today = today or date.today()
    entries = await fuel_entries.list_between(session, user_id, start_date=months_ago(today, months))

    trends = [
        {
            "month": month,
            "total_expense": round(sum(e.total_cost for e in rows), 2),
            "entries_count": len(rows),
        }
        for month, rows in fuel_entries.group_by_month(entries).items()
    ]
    trends.sort(key=lambda t: t["month"])
    return trends


async def get_service_reminders(
    session: AsyncSession,
    user_id: UUID,
    today: Optional[date] = None,
) -> List[dict]:
    today = today or date.today()
    horizon = today + timedelta(days=DUE_SOON_DAYS)

    active = await _active_vehicles(session, user_id)
    latest = await records.latest_service_records(session, [v.id for v in active])

    reminders = []
    for vehicle in active:
        record = latest.get(vehicle.id)
        if record is None or (record.next_service_odometer is None and record.next_service_date is None):
            continue

        is_due_soon = service_odometer_due(vehicle.current_odometer, record.next_service_odometer) or (
            record.next_service_date is not None and record.next_service_date <= horizon
        )
        reminders.append({
            "id": vehicle.id,
            "make": vehicle.make,
            "model": vehicle.model,
            "registration_number": vehicle.registration_number,
            "current_odometer": vehicle.current_odometer,
            "next_service_odometer": record.next_service_odometer,
            "next_service_date": record.next_service_date,
            "service_type": record.service_type,
            "is_due_soon": is_due_soon,
        })

    reminders.sort(key=lambda r: (
        not r["is_due_soon"],
        r["next_service_date"] is None,
        r["next_service_date"] or date.max,
    ))
    return reminders


async def get_vehicle_health(
    session: AsyncSession,
    user_id: UUID,
    today: Optional[date] = None,
) -> List[dict]:
    today = today or date.today()
    horizon = today + timedelta(days=DUE_SOON_DAYS)

    active = await _active_vehicles(session, user_id)
    vehicle_ids = [v.id for v in active]
    policies = await vehicles.latest_insurance(session, vehicle_ids)
    certificates = await vehicles.latest_puc(session, vehicle_ids)
    services = await records.latest_service_records(session, vehicle_ids)

    health = []
    for vehicle in active:
        policy = policies.get(vehicle.id)
        certificate = certificates.get(vehicle.id)
        service = services.get(vehicle.id)

        insurance_expiry = policy.expiry_date if policy else None
        puc_expiry = certificate.expiry_date if certificate else None

        if insurance_expiry is not None and insurance_expiry <= horizon:
            status = "insurance_due"
        elif puc_expiry is not None and puc_expiry <= horizon:
            status = "puc_due"
        elif service and service_odometer_due(vehicle.current_odometer, service.next_service_odometer):
            status = "service_due"
        else:
            status = "healthy"

        health.append({
            "id": vehicle.id,
            "make": vehicle.make,
            "model": vehicle.model,
            "registration_number": vehicle.registration_number,
            "current_odometer": vehicle.current_odometer,
            "status": status,
            "insurance_expiry": insurance_expiry,
            "puc_expiry": puc_expiry,
            "service_due_date": service.next_service_date if service else None,
        })

    health.sort(key=lambda h: HEALTH_PRIORITY[h["status"]])
    return health
