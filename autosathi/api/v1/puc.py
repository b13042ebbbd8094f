"""PUC API - emission certificates attached to the user's vehicles"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.api.deps import get_current_user, get_owned_vehicle
from autosathi.api.responses import success
from autosathi.domain.models import PucCertificate, User
from autosathi.domain.models.puc import (
    PucCertificateCreate,
    PucCertificateRead,
    PucCertificateUpdate,
)
from autosathi.infrastructure.database import get_session
from autosathi.repositories import records

router = APIRouter()


async def _get_owned_certificate(session: AsyncSession, puc_id: UUID, user: User) -> PucCertificate:
    certificate = await records.find_by_id(session, PucCertificate, puc_id, user.id)
    if not certificate:
        raise HTTPException(status_code=404, detail="PUC certificate not found")
    return certificate


def _check_dates(issue_date, expiry_date) -> None:
    if issue_date and expiry_date and issue_date > expiry_date:
        raise HTTPException(status_code=400, detail="Expiry date must be after issue date")


@router.post("/", status_code=201)
async def create_puc(
    payload: PucCertificateCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await get_owned_vehicle(session, payload.vehicle_id, user)
    _check_dates(payload.issue_date, payload.expiry_date)

    certificate = await records.create(session, PucCertificate, payload)
    return success(
        {"puc": PucCertificateRead.model_validate(certificate)},
        message="PUC certificate created successfully",
    )


@router.get("/")
async def list_puc(
    vehicle_id: Optional[UUID] = None,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    rows = await records.list_for_user(session, PucCertificate, user.id, vehicle_id=vehicle_id)
    return success({"puc": [PucCertificateRead.model_validate(r) for r in rows]})


@router.get("/{puc_id}")
async def get_puc(
    puc_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    certificate = await _get_owned_certificate(session, puc_id, user)
    return success({"puc": PucCertificateRead.model_validate(certificate)})


@router.put("/{puc_id}")
async def update_puc(
    puc_id: UUID,
    payload: PucCertificateUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    certificate = await _get_owned_certificate(session, puc_id, user)

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    _check_dates(
        changes.get("issue_date", certificate.issue_date),
        changes.get("expiry_date", certificate.expiry_date),
    )
    certificate = await records.update(session, certificate, changes)
    return success(
        {"puc": PucCertificateRead.model_validate(certificate)},
        message="PUC certificate updated successfully",
    )


@router.delete("/{puc_id}")
async def delete_puc(
    puc_id: UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    certificate = await _get_owned_certificate(session, puc_id, user)
    await records.delete(session, certificate)
    return success(message="PUC certificate deleted successfully")
