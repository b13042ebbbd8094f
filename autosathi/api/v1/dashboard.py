"""Dashboard API - aggregate views across the user's vehicles"""
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.api.deps import get_current_user
from autosathi.api.responses import success
from autosathi.domain.models import User
from autosathi.infrastructure.database import get_session
from autosathi.repositories import stats

router = APIRouter()


@router.get("/overview")
async def get_overview(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    overview = await stats.get_overview(session, user.id)
    return success({"overview": overview})


@router.get("/mileage-stats")
async def get_mileage_stats(
    months: int = Query(6, ge=1, le=120),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    mileage_stats = await stats.get_mileage_stats(session, user.id, months=months)
    return success({"mileage_stats": mileage_stats})


@router.get("/expense-trends")
async def get_expense_trends(
    months: int = Query(12, ge=1, le=120),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    trends = await stats.get_expense_trends(session, user.id, months=months)
    return success({"expense_trends": trends})


@router.get("/service-reminders")
async def get_service_reminders(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    reminders = await stats.get_service_reminders(session, user.id)
    return success({"service_reminders": reminders})


@router.get("/vehicle-health")
async def get_vehicle_health(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    health = await stats.get_vehicle_health(session, user.id)
    return success({"vehicle_health": health})
