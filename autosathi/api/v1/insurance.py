"""Insurance API - policies attached to the user's vehicles"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.api.deps import get_current_user, get_owned_vehicle
from autosathi.api.responses import success
from autosathi.domain.models import Insurance, User
from autosathi.domain.models.insurance import InsuranceCreate, InsuranceRead, InsuranceUpdate
from autosathi.infrastructure.database import get_session
from autosathi.repositories import records

router = APIRouter()


async def _get_owned_policy(session: AsyncSession, insurance_id: UUID, user: User) -> Insurance:
    policy = await records.find_by_id(session, Insurance, insurance_id, user.id)
    if not policy:
        raise HTTPException(status_code=404, detail="Insurance not found")
    return policy


def _check_dates(start_date, expiry_date) -> None:
    if start_date and expiry_date and start_date > expiry_date:
        raise HTTPException(status_code=400, detail="Expiry date must be after start date")


@router.post("/", status_code=201)
async def create_insurance(
    payload: InsuranceCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await get_owned_vehicle(session, payload.vehicle_id, user)

    _check_dates(payload.start_date, payload.expiry_date)

    policy = await records.create(session, Insurance, payload)
    return success({"insurance": InsuranceRead.model_validate(policy)}, message="Insurance created successfully")


@router.get("/")
async def list_insurance(
    vehicle_id: Optional[UUID] = None,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    rows = await records.list_for_user(session, Insurance, user.id, vehicle_id=vehicle_id)
    return success({"insurance": [InsuranceRead.model_validate(r) for r in rows]})


@router.get("/{insurance_id}")
async def get_insurance(
    insurance_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    policy = await _get_owned_policy(session, insurance_id, user)
    return success({"insurance": InsuranceRead.model_validate(policy)})


@router.put("/{insurance_id}")
async def update_insurance(
    insurance_id: UUID,
    payload: InsuranceUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    policy = await _get_owned_policy(session, insurance_id, user)

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    _check_dates(
        changes.get("start_date", policy.start_date),
        changes.get("expiry_date", policy.expiry_date),
    )
    policy = await records.update(session, policy, changes)
    return success({"insurance": InsuranceRead.model_validate(policy)}, message="Insurance updated successfully")


@router.delete("/{insurance_id}")
async def delete_insurance(
    insurance_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    policy = await _get_owned_policy(session, insurance_id, user)
    await records.delete(session, policy)
    return success(message="Insurance deleted successfully")
