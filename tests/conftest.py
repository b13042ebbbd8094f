import os

# Settings are read at import time
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("REMINDER_SCHEDULER_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "autosathi-test-secret-0123456789abcdef")

from datetime import date
from typing import Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import autosathi.domain.models  # noqa: F401
from autosathi.infrastructure.database import get_session
from autosathi.main import app

PASSWORD = "Secret123"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


async def register(client: httpx.AsyncClient, email: str = "rahul@example.com", **extra) -> dict:
    payload = {
        "first_name": "Rahul",
        "last_name": "Sharma",
        "email": email,
        "password": PASSWORD,
    }
    payload.update(extra)
    response = await client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def create_vehicle(
    client: httpx.AsyncClient,
    headers: dict,
    registration_number: str = "MH12AB1234",
    current_odometer: int = 10000,
    **extra,
) -> dict:
    payload = {
        "make": "Maruti Suzuki",
        "model": "Swift",
        "year": 2020,
        "vehicle_type": "car",
        "fuel_type": "petrol",
        "registration_number": registration_number,
        "current_odometer": current_odometer,
    }
    payload.update(extra)
    response = await client.post("/api/vehicles/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["vehicle"]


async def add_fuel(
    client: httpx.AsyncClient,
    headers: dict,
    vehicle_id: str,
    odometer_reading: int,
    fuel_quantity: float = 8.0,
    fuel_date: Optional[date] = None,
    total_cost: float = 800.0,
) -> httpx.Response:
    return await client.post(
        "/api/fuel/",
        json={
            "vehicle_id": vehicle_id,
            "fuel_date": (fuel_date or date.today()).isoformat(),
            "odometer_reading": odometer_reading,
            "fuel_quantity": fuel_quantity,
            "fuel_price_per_liter": 100.0,
            "total_cost": total_cost,
            "fuel_type": "petrol",
        },
        headers=headers,
    )


@pytest_asyncio.fixture
async def auth(client) -> dict:
    """Headers for a freshly registered user"""
    data = await register(client)
    return bearer(data["token"])


@pytest_asyncio.fixture
async def other_auth(client) -> dict:
    data = await register(client, email="priya@example.com", first_name="Priya")
    return bearer(data["token"])
