"""
Seed data for local development
Creates tables, then a sample user with vehicles, fuel history, insurance,
PUC certificates and service records.

    python -m autosathi.seed_data
"""
import asyncio
from datetime import date, timedelta

from dotenv import load_dotenv
load_dotenv()

from autosathi.domain.models import (
    Insurance,
    PucCertificate,
    ServiceRecord,
    Vehicle,
)
from autosathi.domain.models.fuel_entry import FuelEntryCreate
from autosathi.infrastructure.database import dispose_engine, get_session_maker, init_db
from autosathi.repositories import fuel_entries, users

DEMO_EMAIL = "demo@autosathi.app"
DEMO_PASSWORD = "Demo1234"


async def seed_database():
    """Seed the database with test data"""
    print("Starting database seeding...")

    await init_db()
    print("Database initialized")

    today = date.today()

    async with get_session_maker()() as session:
        if await users.find_by_email(session, DEMO_EMAIL):
            print(f"{DEMO_EMAIL} already exists, nothing to do")
            return

        # 1. Create user
        user = await users.create(
            session,
            first_name="Rahul",
            last_name="Sharma",
            email=DEMO_EMAIL,
            password=DEMO_PASSWORD,
            phone="+91 98765 43210",
        )
        print(f"  User: {user.email} (password: {DEMO_PASSWORD})")

        # 2. Create vehicles
        vehicles_data = [
            {
                "make": "Maruti Suzuki",
                "model": "Swift",
                "year": 2020,
                "vehicle_type": "car",
                "fuel_type": "petrol",
                "registration_number": "MH12AB1234",
                "purchase_date": date(2020, 3, 15),
                "purchase_odometer": 0,
                "current_odometer": 10000,
            },
            {
                "make": "Honda",
                "model": "Activa",
                "year": 2021,
                "vehicle_type": "scooter",
                "fuel_type": "petrol",
                "registration_number": "MH12CD5678",
                "purchase_date": date(2021, 7, 1),
                "purchase_odometer": 0,
                "current_odometer": 4200,
            },
        ]

        vehicles = []
        for veh_data in vehicles_data:
            vehicle = Vehicle(user_id=user.id, **veh_data)
            session.add(vehicle)
            vehicles.append(vehicle)

        await session.commit()
        for v in vehicles:
            await session.refresh(v)
            print(f"  Vehicle: {v.make} {v.model} ({v.registration_number})")

        car, scooter = vehicles

        # 3. Fuel history, oldest first so mileage derives from the previous fill-up
        readings = [(10000, 30.0), (10450, 32.5), (10900, 31.0), (11380, 33.2)]
        for weeks_ago, (odometer, litres) in zip(range(len(readings) * 2, 0, -2), readings):
            entry = await fuel_entries.create(session, FuelEntryCreate(
                vehicle_id=car.id,
                fuel_date=today - timedelta(weeks=weeks_ago),
                odometer_reading=odometer,
                fuel_quantity=litres,
                fuel_price_per_liter=104.5,
                total_cost=round(litres * 104.5, 2),
                fuel_station="HP Petrol Pump, Baner",
                fuel_type="petrol",
            ))
            print(f"  Fuel: {entry.odometer_reading} km, mileage={entry.mileage_calculated}")

        car.current_odometer = readings[-1][0]
        session.add(car)

        # 4. Renewals and service history
        session.add(Insurance(
            vehicle_id=car.id,
            policy_number="POL-2024-001",
            insurance_company="ICICI Lombard",
            policy_type="comprehensive",
            start_date=today - timedelta(days=345),
            expiry_date=today + timedelta(days=20),
            premium_amount=12500.0,
        ))
        session.add(PucCertificate(
            vehicle_id=scooter.id,
            certificate_number="PUC-MH12-7788",
            testing_center="Shivaji Nagar PUC Centre",
            issue_date=today - timedelta(days=170),
            expiry_date=today + timedelta(days=10),
        ))
        session.add(ServiceRecord(
            vehicle_id=car.id,
            service_date=today - timedelta(days=150),
            service_type="regular",
            odometer_reading=7000,
            cost=4500.0,
            service_center="Maruti Authorised Service, Pune",
            next_service_date=today + timedelta(days=30),
            next_service_odometer=11500,
        ))
        await session.commit()
        print("  Insurance, PUC and service records created")

    print("Database seeded successfully!")


async def _seed_and_close():
    try:
        await seed_database()
    finally:
        await dispose_engine()


def main():
    asyncio.run(_seed_and_close())


if __name__ == "__main__":
    main()
