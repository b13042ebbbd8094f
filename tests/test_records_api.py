from datetime import date, timedelta

import pytest

from conftest import create_vehicle


def _policy(vehicle_id: str, **extra) -> dict:
    today = date.today()
    payload = {
        "vehicle_id": vehicle_id,
        "policy_number": "POL-2026-001",
        "insurance_company": "ICICI Lombard",
        "policy_type": "comprehensive",
        "start_date": (today - timedelta(days=300)).isoformat(),
        "expiry_date": (today + timedelta(days=65)).isoformat(),
        "premium_amount": 12500,
    }
    payload.update(extra)
    return payload


@pytest.mark.asyncio
async def test_insurance_lifecycle(client, auth) -> None:
    vehicle = await create_vehicle(client, auth)

    created = await client.post("/api/insurance/", json=_policy(vehicle["id"]), headers=auth)
    assert created.status_code == 201
    policy = created.json()["data"]["insurance"]
    assert policy["is_active"] is True

    listing = await client.get(f"/api/insurance/?vehicle_id={vehicle['id']}", headers=auth)
    assert [p["id"] for p in listing.json()["data"]["insurance"]] == [policy["id"]]

    updated = await client.put(
        f"/api/insurance/{policy['id']}", json={"premium_amount": 13000}, headers=auth
    )
    assert updated.json()["data"]["insurance"]["premium_amount"] == 13000
    assert updated.json()["data"]["insurance"]["policy_number"] == "POL-2026-001"

    deleted = await client.delete(f"/api/insurance/{policy['id']}", headers=auth)
    assert deleted.status_code == 200

    gone = await client.get(f"/api/insurance/{policy['id']}", headers=auth)
    assert gone.status_code == 404
    assert gone.json()["message"] == "Insurance not found"


@pytest.mark.asyncio
async def test_insurance_dates_must_be_ordered(client, auth) -> None:
    vehicle = await create_vehicle(client, auth)
    today = date.today()

    response = await client.post(
        "/api/insurance/",
        json=_policy(vehicle["id"], start_date=today.isoformat(), expiry_date=(today - timedelta(days=1)).isoformat()),
        headers=auth,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_records_are_scoped_to_owner(client, auth, other_auth) -> None:
    vehicle = await create_vehicle(client, auth)

    foreign = await client.post("/api/insurance/", json=_policy(vehicle["id"]), headers=other_auth)
    assert foreign.status_code == 404

    policy = (await client.post("/api/insurance/", json=_policy(vehicle["id"]), headers=auth)).json()["data"]["insurance"]

    hidden = await client.get(f"/api/insurance/{policy['id']}", headers=other_auth)
    assert hidden.status_code == 404

    listing = await client.get("/api/insurance/", headers=other_auth)
    assert listing.json()["data"]["insurance"] == []


@pytest.mark.asyncio
async def test_records_hidden_after_vehicle_deleted(client, auth) -> None:
    vehicle = await create_vehicle(client, auth)
    policy = (await client.post("/api/insurance/", json=_policy(vehicle["id"]), headers=auth)).json()["data"]["insurance"]

    await client.delete(f"/api/vehicles/{vehicle['id']}", headers=auth)

    response = await client.get(f"/api/insurance/{policy['id']}", headers=auth)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_puc_lifecycle(client, auth) -> None:
    vehicle = await create_vehicle(client, auth)
    today = date.today()

    created = await client.post(
        "/api/puc/",
        json={
            "vehicle_id": vehicle["id"],
            "certificate_number": "PUC-MH12-7788",
            "testing_center": "Shivaji Nagar PUC Centre",
            "issue_date": (today - timedelta(days=170)).isoformat(),
            "expiry_date": (today + timedelta(days=10)).isoformat(),
        },
        headers=auth,
    )
    assert created.status_code == 201
    certificate = created.json()["data"]["puc"]

    updated = await client.put(f"/api/puc/{certificate['id']}", json={"is_valid": False}, headers=auth)
    assert updated.json()["data"]["puc"]["is_valid"] is False

    deleted = await client.delete(f"/api/puc/{certificate['id']}", headers=auth)
    assert deleted.status_code == 200

    gone = await client.get(f"/api/puc/{certificate['id']}", headers=auth)
    assert gone.json()["message"] == "PUC certificate not found"


@pytest.mark.asyncio
async def test_service_record_advances_odometer(client, auth) -> None:
    vehicle = await create_vehicle(client, auth, current_odometer=10000)
    today = date.today()

    created = await client.post(
        "/api/services/",
        json={
            "vehicle_id": vehicle["id"],
            "service_date": today.isoformat(),
            "service_type": "regular",
            "odometer_reading": 10250,
            "cost": 4500,
            "next_service_date": (today + timedelta(days=180)).isoformat(),
            "next_service_odometer": 15250,
        },
        headers=auth,
    )
    assert created.status_code == 201
    record = created.json()["data"]["service_record"]
    assert record["next_service_odometer"] == 15250

    refreshed = await client.get(f"/api/vehicles/{vehicle['id']}", headers=auth)
    assert refreshed.json()["data"]["vehicle"]["current_odometer"] == 10250

    listing = await client.get("/api/services/", headers=auth)
    assert len(listing.json()["data"]["service_records"]) == 1

    updated = await client.put(f"/api/services/{record['id']}", json={"cost": 5000}, headers=auth)
    assert updated.json()["data"]["service_record"]["cost"] == 5000

    deleted = await client.delete(f"/api/services/{record['id']}", headers=auth)
    assert deleted.status_code == 200

    gone = await client.get(f"/api/services/{record['id']}", headers=auth)
    assert gone.json()["message"] == "Service record not found"


@pytest.mark.asyncio
async def test_insurance_update_keeps_dates_ordered(client, auth) -> None:
    vehicle = await create_vehicle(client, auth)
    today = date.today()
    policy = (await client.post(
        "/api/insurance/",
        json=_policy(vehicle["id"], start_date=today.isoformat(), expiry_date=(today + timedelta(days=365)).isoformat()),
        headers=auth,
    )).json()["data"]["insurance"]

    early_expiry = await client.put(
        f"/api/insurance/{policy['id']}",
        json={"expiry_date": (today - timedelta(days=10)).isoformat()},
        headers=auth,
    )
    assert early_expiry.status_code == 400
    assert early_expiry.json()["message"] == "Expiry date must be after start date"

    late_start = await client.put(
        f"/api/insurance/{policy['id']}",
        json={"start_date": (today + timedelta(days=400)).isoformat()},
        headers=auth,
    )
    assert late_start.status_code == 400

    stored = (await client.get(f"/api/insurance/{policy['id']}", headers=auth)).json()["data"]["insurance"]
    assert stored["start_date"] == today.isoformat()
    assert stored["expiry_date"] == (today + timedelta(days=365)).isoformat()

    renewed = await client.put(
        f"/api/insurance/{policy['id']}",
        json={"start_date": (today + timedelta(days=365)).isoformat(), "expiry_date": (today + timedelta(days=730)).isoformat()},
        headers=auth,
    )
    assert renewed.status_code == 200


@pytest.mark.asyncio
async def test_puc_dates_must_be_ordered(client, auth) -> None:
    vehicle = await create_vehicle(client, auth)
    today = date.today()

    backwards = await client.post(
        "/api/puc/",
        json={
            "vehicle_id": vehicle["id"],
            "certificate_number": "PUC-1",
            "issue_date": today.isoformat(),
            "expiry_date": (today - timedelta(days=1)).isoformat(),
        },
        headers=auth,
    )
    assert backwards.status_code == 400
    assert backwards.json()["message"] == "Expiry date must be after issue date"

    certificate = (await client.post(
        "/api/puc/",
        json={
            "vehicle_id": vehicle["id"],
            "certificate_number": "PUC-1",
            "issue_date": today.isoformat(),
            "expiry_date": (today + timedelta(days=180)).isoformat(),
        },
        headers=auth,
    )).json()["data"]["puc"]

    response = await client.put(
        f"/api/puc/{certificate['id']}",
        json={"expiry_date": (today - timedelta(days=5)).isoformat()},
        headers=auth,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_service_record_update_advances_odometer(client, auth) -> None:
    vehicle = await create_vehicle(client, auth, current_odometer=10000)
    record = (await client.post(
        "/api/services/",
        json={
            "vehicle_id": vehicle["id"],
            "service_date": date.today().isoformat(),
            "service_type": "regular",
            "odometer_reading": 9000,
        },
        headers=auth,
    )).json()["data"]["service_record"]

    corrected = await client.put(f"/api/services/{record['id']}", json={"odometer_reading": 10800}, headers=auth)
    assert corrected.status_code == 200

    refreshed = await client.get(f"/api/vehicles/{vehicle['id']}", headers=auth)
    assert refreshed.json()["data"]["vehicle"]["current_odometer"] == 10800

    # A lower reading never winds the vehicle back
    await client.put(f"/api/services/{record['id']}", json={"odometer_reading": 9500}, headers=auth)
    refreshed = await client.get(f"/api/vehicles/{vehicle['id']}", headers=auth)
    assert refreshed.json()["data"]["vehicle"]["current_odometer"] == 10800
