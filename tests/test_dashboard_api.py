from datetime import date, timedelta

import pytest

from conftest import add_fuel, create_vehicle


@pytest.mark.asyncio
async def test_overview(client, auth) -> None:
    vehicle = await create_vehicle(client, auth, current_odometer=10000)
    await create_vehicle(client, auth, registration_number="MH12CD5678", vehicle_type="bike")
    today = date.today()

    await add_fuel(client, auth, vehicle["id"], 10000, total_cost=3000, fuel_date=today)
    await add_fuel(client, auth, vehicle["id"], 10400, total_cost=800, fuel_date=today)
    await client.post(
        "/api/insurance/",
        json={
            "vehicle_id": vehicle["id"],
            "policy_number": "P-1",
            "insurance_company": "Acko",
            "expiry_date": (today + timedelta(days=5)).isoformat(),
        },
        headers=auth,
    )

    overview = (await client.get("/api/dashboard/overview", headers=auth)).json()["data"]["overview"]

    assert overview["vehicle_stats"]["total_vehicles"] == 2
    assert overview["vehicle_stats"]["bikes"] == 1
    assert overview["upcoming_renewals"] == 1
    assert overview["current_month_expense"] == 3800.0
    assert [e["odometer_reading"] for e in overview["recent_entries"]] == [10400, 10000]
    assert overview["unread_notifications"] == 0


@pytest.mark.asyncio
async def test_overview_for_new_user(client, auth) -> None:
    overview = (await client.get("/api/dashboard/overview", headers=auth)).json()["data"]["overview"]

    assert overview["vehicle_stats"]["total_vehicles"] == 0
    assert overview["current_month_expense"] == 0
    assert overview["recent_entries"] == []


@pytest.mark.asyncio
async def test_mileage_stats(client, auth) -> None:
    thirsty = await create_vehicle(client, auth, current_odometer=10000)
    frugal = await create_vehicle(client, auth, registration_number="MH12CD5678", current_odometer=4000)
    await create_vehicle(client, auth, registration_number="MH12EF9012")

    await add_fuel(client, auth, thirsty["id"], 10000, fuel_quantity=30)
    await add_fuel(client, auth, thirsty["id"], 10200, fuel_quantity=20)
    await add_fuel(client, auth, frugal["id"], 4000, fuel_quantity=3)
    await add_fuel(client, auth, frugal["id"], 4150, fuel_quantity=3)

    stats = (await client.get("/api/dashboard/mileage-stats", headers=auth)).json()["data"]["mileage_stats"]

    assert [s["id"] for s in stats[:2]] == [frugal["id"], thirsty["id"]]
    assert stats[0]["avg_mileage"] == 50.0
    assert stats[1]["avg_mileage"] == 10.0
    assert stats[2]["avg_mileage"] is None
    assert stats[2]["fuel_entries_count"] == 0


@pytest.mark.asyncio
async def test_mileage_stats_window(client, auth) -> None:
    vehicle = await create_vehicle(client, auth, current_odometer=10000)
    long_ago = date.today() - timedelta(days=400)

    await add_fuel(client, auth, vehicle["id"], 10000, fuel_date=long_ago - timedelta(days=7))
    await add_fuel(client, auth, vehicle["id"], 10400, fuel_date=long_ago)

    stats = (await client.get("/api/dashboard/mileage-stats?months=6", headers=auth)).json()["data"]["mileage_stats"]
    assert stats[0]["avg_mileage"] is None

    stats = (await client.get("/api/dashboard/mileage-stats?months=24", headers=auth)).json()["data"]["mileage_stats"]
    assert stats[0]["avg_mileage"] == 50.0


@pytest.mark.asyncio
async def test_expense_trends_are_chronological(client, auth) -> None:
    vehicle = await create_vehicle(client, auth, current_odometer=10000)
    this_month = date.today().replace(day=1)
    last_month = (this_month - timedelta(days=1)).replace(day=1)

    await add_fuel(client, auth, vehicle["id"], 10000, total_cost=1000, fuel_date=last_month)
    await add_fuel(client, auth, vehicle["id"], 10300, total_cost=1200, fuel_date=this_month)
    await add_fuel(client, auth, vehicle["id"], 10600, total_cost=900, fuel_date=this_month)

    trends = (await client.get("/api/dashboard/expense-trends", headers=auth)).json()["data"]["expense_trends"]

    assert trends == [
        {"month": last_month.isoformat(), "total_expense": 1000.0, "entries_count": 1},
        {"month": this_month.isoformat(), "total_expense": 2100.0, "entries_count": 2},
    ]


@pytest.mark.asyncio
async def test_service_reminders(client, auth) -> None:
    due = await create_vehicle(client, auth, current_odometer=9800)
    later = await create_vehicle(client, auth, registration_number="MH12CD5678", current_odometer=1000)
    await create_vehicle(client, auth, registration_number="MH12EF9012")
    today = date.today()

    for vehicle, target in ((due, 10000), (later, 6000)):
        await client.post(
            "/api/services/",
            json={
                "vehicle_id": vehicle["id"],
                "service_date": (today - timedelta(days=30)).isoformat(),
                "service_type": "regular",
                "next_service_odometer": target,
                "next_service_date": (today + timedelta(days=120)).isoformat(),
            },
            headers=auth,
        )

    reminders = (await client.get("/api/dashboard/service-reminders", headers=auth)).json()["data"]["service_reminders"]

    assert [r["id"] for r in reminders] == [due["id"], later["id"]]
    assert reminders[0]["is_due_soon"] is True
    assert reminders[1]["is_due_soon"] is False


@pytest.mark.asyncio
async def test_vehicle_health(client, auth) -> None:
    today = date.today()
    healthy = await create_vehicle(client, auth, registration_number="MH12AA0001")
    service = await create_vehicle(client, auth, registration_number="MH12AA0002", current_odometer=9900)
    puc = await create_vehicle(client, auth, registration_number="MH12AA0003")
    insurance = await create_vehicle(client, auth, registration_number="MH12AA0004")

    await client.post(
        "/api/insurance/",
        json={
            "vehicle_id": insurance["id"],
            "policy_number": "P-1",
            "insurance_company": "Acko",
            "expiry_date": (today + timedelta(days=3)).isoformat(),
        },
        headers=auth,
    )
    await client.post(
        "/api/puc/",
        json={"vehicle_id": puc["id"], "certificate_number": "C-1", "expiry_date": (today + timedelta(days=20)).isoformat()},
        headers=auth,
    )
    await client.post(
        "/api/services/",
        json={
            "vehicle_id": service["id"],
            "service_date": (today - timedelta(days=100)).isoformat(),
            "service_type": "regular",
            "next_service_odometer": 10000,
        },
        headers=auth,
    )

    health = (await client.get("/api/dashboard/vehicle-health", headers=auth)).json()["data"]["vehicle_health"]

    assert [(h["id"], h["status"]) for h in health] == [
        (insurance["id"], "insurance_due"),
        (puc["id"], "puc_due"),
        (service["id"], "service_due"),
        (healthy["id"], "healthy"),
    ]
