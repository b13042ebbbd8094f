"""Shared route dependencies"""
from typing import Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.domain.models import User, Vehicle
from autosathi.infrastructure.database import get_session
from autosathi.infrastructure.security import decode_access_token
from autosathi.repositories import users, vehicles

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(status_code=401, detail=message, headers={"WWW-Authenticate": "Bearer"})


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Resolve the bearer token to an active user"""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Access token required")

    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    try:
        user_id = UUID(payload["sub"])
    except (KeyError, ValueError):
        raise _unauthorized("Invalid token")

    user = await users.find_by_id(session, user_id)
    if not user or not user.is_active:
        raise _unauthorized("Invalid token")

    return user


async def get_owned_vehicle(
    session: AsyncSession,
    vehicle_id: UUID,
    user: User,
) -> Vehicle:
    """Active vehicle owned by the user, or 404"""
    vehicle = await vehicles.find_by_id(session, vehicle_id, user.id)
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return vehicle


class Pagination:
    """page/limit query parameters"""

    def __init__(self, default_limit: int = 10, max_limit: int = 100):
        self.default_limit = default_limit
        self.max_limit = max_limit

    def __call__(
        self,
        page: int = Query(1, ge=1),
        limit: Optional[int] = Query(None, ge=1),
    ) -> "Page":
        return Page(page, min(limit or self.default_limit, self.max_limit))


class Page:
    def __init__(self, page: int, limit: int):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
