from __future__ import annotations

from datetime import date

from fastapi.testclient import TestClient

from babylog.babies import create_baby, ensure_user
from babylog.main import app

from log_helpers import auth_headers

client = TestClient(app)
HEADERS = auth_headers("parent-1", email="parent@example.com")


def _baby() -> str:
    ensure_user("parent-1")
    return create_baby("parent-1", name="Lev", birth_date=date(2024, 5, 1)).id


def _create(baby_id: str, **overrides) -> dict:
    payload = {
        "babyId": baby_id,
        "type": "FEEDING",
        "startTime": "2025-03-10T08:00:00Z",
        "amount": 4,
        "unit": "oz",
        **overrides,
    }
    resp = client.post("/api/v1/logs", json=payload, headers=HEADERS)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_and_list_logs_newest_first() -> None:
    baby_id = _baby()
    first = _create(baby_id, startTime="2025-03-10T08:00:00Z")
    second = _create(baby_id, type="SLEEP", startTime="2025-03-11T13:00:00Z", amount=90, unit="minutes")
    note = _create(
        baby_id,
        type="NOTE",
        startTime="2025-03-12T09:00:00-07:00",
        amount=None,
        unit=None,
        notes="Rolled over!",
        metadata={"milestone": True, "side": "left", "attempts": 3},
    )

    resp = client.get("/api/v1/logs", params={"babyId": baby_id}, headers=HEADERS)
    assert resp.status_code == 200
    ids = [item["id"] for item in resp.json()]
    assert ids == [note["id"], second["id"], first["id"]]
    assert resp.json()[0]["metadata"] == {"milestone": True, "side": "left", "attempts": 3}
    assert first["rawTranscript"] == ""


def test_list_logs_with_range() -> None:
    baby_id = _baby()
    _create(baby_id, startTime="2025-03-09T23:00:00Z")
    inside = _create(baby_id, startTime="2025-03-10T12:00:00Z")
    _create(baby_id, startTime="2025-03-12T00:00:01Z")

    resp = client.get(
        "/api/v1/logs",
        params={
            "babyId": baby_id,
            "startDate": "2025-03-10T00:00:00Z",
            "endDate": "2025-03-12T00:00:00Z",
        },
        headers=HEADERS,
    )
    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()] == [inside["id"]]


def test_end_time_must_follow_start_time() -> None:
    baby_id = _baby()
    resp = client.post(
        "/api/v1/logs",
        json={
            "babyId": baby_id,
            "type": "SLEEP",
            "startTime": "2025-03-10T08:00:00Z",
            "endTime": "2025-03-10T07:00:00Z",
            "amount": 1,
        },
        headers=HEADERS,
    )
    assert resp.status_code == 422


def test_reject_is_not_a_storable_type() -> None:
    baby_id = _baby()
    resp = client.post(
        "/api/v1/logs",
        json={"babyId": baby_id, "type": "REJECT", "startTime": "2025-03-10T08:00:00Z"},
        headers=HEADERS,
    )
    assert resp.status_code == 422


def test_update_and_delete_log() -> None:
    baby_id = _baby()
    created = _create(baby_id)

    resp = client.patch(
        f"/api/v1/logs/{created['id']}",
        json={"amount": 5, "notes": "Took it all"},
        headers=HEADERS,
    )
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["amount"] == 5
    assert updated["notes"] == "Took it all"
    assert updated["unit"] == "oz"
    assert updated["rawTranscript"] == created["rawTranscript"]

    bad = client.patch(
        f"/api/v1/logs/{created['id']}",
        json={"endTime": "2025-03-01T00:00:00Z"},
        headers=HEADERS,
    )
    assert bad.status_code == 400

    assert client.get(f"/api/v1/logs/{created['id']}", headers=HEADERS).status_code == 200
    assert client.delete(f"/api/v1/logs/{created['id']}", headers=HEADERS).status_code == 204
    assert client.get(f"/api/v1/logs/{created['id']}", headers=HEADERS).status_code == 404


def test_logs_are_private_to_owners() -> None:
    baby_id = _baby()
    created = _create(baby_id)
    stranger = auth_headers("stranger")

    assert client.get("/api/v1/logs", params={"babyId": baby_id}, headers=stranger).status_code == 403
    assert client.get(f"/api/v1/logs/{created['id']}", headers=stranger).status_code == 403
    assert client.delete(f"/api/v1/logs/{created['id']}", headers=stranger).status_code == 403
    assert client.get("/api/v1/logs", headers=HEADERS).status_code == 400


def test_list_logs_filtered_by_type() -> None:
    baby_id = _baby()
    feeding = _create(baby_id, startTime="2025-03-10T08:00:00Z")
    _create(baby_id, type="SLEEP", startTime="2025-03-10T13:00:00Z", amount=90, unit="minutes")
    late_feeding = _create(baby_id, startTime="2025-03-11T08:00:00Z")

    resp = client.get("/api/v1/logs", params={"babyId": baby_id, "type": "FEEDING"}, headers=HEADERS)
    assert resp.status_code == 200
    assert [item["id"] for item in resp.json()] == [late_feeding["id"], feeding["id"]]

    resp = client.get(
        "/api/v1/logs",
        params={"babyId": baby_id, "type": "FEEDING", "endDate": "2025-03-10T23:59:59Z"},
        headers=HEADERS,
    )
    assert [item["id"] for item in resp.json()] == [feeding["id"]]

    resp = client.get("/api/v1/logs", params={"babyId": baby_id, "type": "REJECT"}, headers=HEADERS)
    assert resp.status_code == 422
