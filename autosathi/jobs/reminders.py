"""
Reminder job
Scans for upcoming insurance/PUC expirations and due services once a day and
turns them into notifications.
"""
import asyncio
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, List, Optional, Tuple

import structlog
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.config import Settings, settings as app_settings
from autosathi.domain.models import Insurance, PucCertificate, Vehicle
from autosathi.repositories import notifications, records
from autosathi.repositories.stats import service_odometer_due

logger = structlog.get_logger()

SERVICE_DATE_WINDOW_DAYS = 7
STARTUP_DELAY_SECONDS = 5


@dataclass
class ReminderResult:
    insurance: int = 0
    puc: int = 0
    service: int = 0

    @property
    def total(self) -> int:
        return self.insurance + self.puc + self.service


def _format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")


async def _already_notified(
    session: AsyncSession,
    vehicle: Vehicle,
    notification_type: str,
    since: datetime,
) -> bool:
    return await notifications.exists_since(session, vehicle.user_id, vehicle.id, notification_type, since)


async def _expiring_insurance(
    session: AsyncSession, today: date, horizon: date
) -> List[Tuple[Vehicle, Insurance]]:
    query = (
        select(Vehicle, Insurance)
        .join(Insurance, Insurance.vehicle_id == Vehicle.id)
        .where(
            Vehicle.is_active == True,  # noqa: E712
            Insurance.is_active == True,  # noqa: E712
            Insurance.expiry_date >= today,
            Insurance.expiry_date <= horizon,
        )
    )
    result = await session.execute(query)
    return list(result.all())


async def _expiring_puc(
    session: AsyncSession, today: date, horizon: date
) -> List[Tuple[Vehicle, PucCertificate]]:
    query = (
        select(Vehicle, PucCertificate)
        .join(PucCertificate, PucCertificate.vehicle_id == Vehicle.id)
        .where(
            Vehicle.is_active == True,  # noqa: E712
            PucCertificate.is_valid == True,  # noqa: E712
            PucCertificate.expiry_date >= today,
            PucCertificate.expiry_date <= horizon,
        )
    )
    result = await session.execute(query)
    return list(result.all())


async def _remind_insurance(session: AsyncSession, today: date, horizon: date, since: datetime) -> int:
    created = 0
    for vehicle, policy in await _expiring_insurance(session, today, horizon):
        if await _already_notified(session, vehicle, "insurance", since):
            continue

        days_left = (policy.expiry_date - today).days
        message = (
            f"Your vehicle insurance ({vehicle.registration_number}) for {vehicle.make} {vehicle.model} "
            f"expires in {days_left} days on {_format_date(policy.expiry_date)}. "
            f"Policy: {policy.policy_number} with {policy.insurance_company}."
        )
        await notifications.create(
            session, vehicle.user_id, vehicle.id, "insurance", "Insurance Renewal Reminder", message
        )
        created += 1
    return created


async def _remind_puc(session: AsyncSession, today: date, horizon: date, since: datetime) -> int:
    created = 0
    for vehicle, certificate in await _expiring_puc(session, today, horizon):
        if await _already_notified(session, vehicle, "puc", since):
            continue

        days_left = (certificate.expiry_date - today).days
        message = (
            f"Your PUC certificate ({certificate.certificate_number}) for {vehicle.make} {vehicle.model} "
            f"({vehicle.registration_number}) expires in {days_left} days on "
            f"{_format_date(certificate.expiry_date)}. "
            f"Tested at: {certificate.testing_center or 'unknown'}."
        )
        await notifications.create(
            session, vehicle.user_id, vehicle.id, "puc", "PUC Certificate Expiry", message
        )
        created += 1
    return created


async def _remind_service(session: AsyncSession, today: date, since: datetime) -> int:
    horizon = today + timedelta(days=SERVICE_DATE_WINDOW_DAYS)

    result = await session.execute(select(Vehicle).where(Vehicle.is_active == True))  # noqa: E712
    active = list(result.scalars().all())
    latest = await records.latest_service_records(session, [v.id for v in active])

    created = 0
    for vehicle in active:
        record = latest.get(vehicle.id)
        if record is None:
            continue

        odometer_due = service_odometer_due(vehicle.current_odometer, record.next_service_odometer)
        date_due = record.next_service_date is not None and record.next_service_date <= horizon
        if not (odometer_due or date_due):
            continue
        if await _already_notified(session, vehicle, "service", since):
            continue

        message = f"Your {vehicle.make} {vehicle.model} ({vehicle.registration_number}) is due for "
        if odometer_due:
            message += (
                f"service at odometer reading {record.next_service_odometer} km. "
                f"Current reading: {vehicle.current_odometer} km."
            )
        else:
            message += f"service on {_format_date(record.next_service_date)}."

        await notifications.create(
            session, vehicle.user_id, vehicle.id, "service", "Service Due Reminder", message
        )
        created += 1
    return created


def dedup_cutoff(today: date, days: int) -> datetime:
    """Local midnight `days` before `today`, as naive UTC.

    Notification timestamps are naive UTC, so the cutoff must be too.
    """
    local_midnight = datetime.combine(today - timedelta(days=days), time.min)
    return local_midnight.astimezone(timezone.utc).replace(tzinfo=None)


async def check_expiry_reminders(
    session_maker: Callable[[], AsyncSession],
    today: Optional[date] = None,
    settings: Settings = app_settings,
) -> Optional[ReminderResult]:
    """Run one reminder cycle.

    Failures are logged and swallowed so the scheduler keeps running; the
    return value is None in that case.
    """
    today = today or date.today()
    horizon = today + timedelta(days=settings.notification_days_before)
    since = dedup_cutoff(today, settings.reminder_dedup_days)

    logger.info("reminder_check_started", today=today.isoformat(), horizon=horizon.isoformat())

    try:
        async with session_maker() as session:
            result = ReminderResult(
                insurance=await _remind_insurance(session, today, horizon, since),
                puc=await _remind_puc(session, today, horizon, since),
                service=await _remind_service(session, today, since),
            )
    except Exception as e:
        logger.error("reminder_check_failed", error=str(e), exc_info=True)
        return None

    logger.info(
        "reminder_check_completed",
        insurance=result.insurance,
        puc=result.puc,
        service=result.service,
    )
    return result


def seconds_until(run_at: time, now: datetime) -> float:
    """Seconds from `now` until the next occurrence of `run_at`"""
    target = datetime.combine(now.date(), run_at)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class ReminderScheduler:
    """Runs the reminder check once a day at a fixed local time"""

    def __init__(self, session_maker: Callable[[], AsyncSession], settings: Settings = app_settings):
        self.session_maker = session_maker
        self.settings = settings
        self.run_at = time(settings.reminder_run_hour, settings.reminder_run_minute)
        self.running = False
        self._task: Optional[asyncio.Task] = None

    async def start(self, run_on_startup: bool = False):
        """Start the daily loop"""
        self.running = True
        self._task = asyncio.create_task(self._loop(run_on_startup))
        logger.info("reminder_scheduler_started", run_at=self.run_at.isoformat())

    async def stop(self):
        """Stop the loop, cancelling any pending sleep"""
        self.running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("reminder_scheduler_stopped")

    async def _loop(self, run_on_startup: bool):
        if run_on_startup:
            await asyncio.sleep(STARTUP_DELAY_SECONDS)
            await check_expiry_reminders(self.session_maker, settings=self.settings)

        while self.running:
            delay = seconds_until(self.run_at, datetime.now())
            logger.debug("reminder_next_run_scheduled", seconds=round(delay))
            await asyncio.sleep(delay)
            if not self.running:
                break
            await check_expiry_reminders(self.session_maker, settings=self.settings)
