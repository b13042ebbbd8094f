"""User accessors"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from autosathi.domain.models import User
from autosathi.infrastructure.security import hash_password


async def find_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def find_by_id(session: AsyncSession, user_id: UUID) -> Optional[User]:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create(
    session: AsyncSession,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    phone: Optional[str] = None,
    role: str = "user",
) -> User:
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email.lower(),
        password_hash=hash_password(password),
        phone=phone,
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def update_profile(session: AsyncSession, user: User, changes: dict) -> User:
    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = datetime.utcnow()

    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def update_password(session: AsyncSession, user: User, new_password: str) -> None:
    user.password_hash = hash_password(new_password)
    user.updated_at = datetime.utcnow()
    session.add(user)
    await session.commit()


async def deactivate(session: AsyncSession, user: User) -> None:
    user.is_active = False
    user.updated_at = datetime.utcnow()
    session.add(user)
    await session.commit()
