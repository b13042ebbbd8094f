"""Auth API - registration, login and profile"""
import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.api.deps import get_current_user
from autosathi.api.responses import success
from autosathi.domain.models import User
from autosathi.domain.models.user import (
    PasswordChange,
    UserLogin,
    UserRead,
    UserRegister,
    UserUpdate,
)
from autosathi.infrastructure.database import get_session
from autosathi.infrastructure.security import create_access_token, verify_password
from autosathi.repositories import users

router = APIRouter()
logger = structlog.get_logger()

MIN_PASSWORD_LENGTH = 6


def _auth_payload(user: User) -> dict:
    return {
        "user": UserRead.model_validate(user),
        "token": create_access_token(user.id, user.email, user.role),
    }


@router.post("/register", status_code=201)
async def register(
    payload: UserRegister,
    session: AsyncSession = Depends(get_session),
):
    """Create an account and return a token for it"""
    if await users.find_by_email(session, payload.email):
        raise HTTPException(status_code=409, detail="Email already registered")

    user = await users.create(
        session,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        password=payload.password,
        phone=payload.phone,
    )
    logger.info("user_registered", user_id=str(user.id))
    return success(_auth_payload(user), message="User registered successfully")


@router.post("/login")
async def login(
    payload: UserLogin,
    session: AsyncSession = Depends(get_session),
):
    user = await users.find_by_email(session, payload.email)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not user.is_active:
        raise HTTPException(status_code=401, detail="Account is deactivated")

    if not verify_password(payload.password, user.password_hash):
        logger.info("login_failed", user_id=str(user.id))
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return success(_auth_payload(user), message="Login successful")


@router.get("/profile")
async def get_profile(user: User = Depends(get_current_user)):
    return success({"user": UserRead.model_validate(user)})


@router.put("/profile")
async def update_profile(
    payload: UserUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    changes = payload.model_dump(exclude_unset=True)
    for key in ("first_name", "last_name"):
        # Names are required columns; null means "leave as is"
        if key in changes and changes[key] is None:
            del changes[key]

    user = await users.update_profile(session, user, changes)
    return success({"user": UserRead.model_validate(user)}, message="Profile updated successfully")


@router.put("/change-password")
async def change_password(
    payload: PasswordChange,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    if not payload.current_password or not payload.new_password:
        raise HTTPException(status_code=400, detail="Current password and new password are required")

    if len(payload.new_password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"New password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )

    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")

    await users.update_password(session, user, payload.new_password)
    logger.info("password_changed", user_id=str(user.id))
    return success(message="Password changed successfully")


@router.delete("/profile")
async def deactivate_account(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Soft-delete the account; existing tokens stop working"""
    await users.deactivate(session, user)
    logger.info("user_deactivated", user_id=str(user.id))
    return success(message="Account deactivated successfully")
