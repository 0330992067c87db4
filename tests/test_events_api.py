import pytest
from httpx import AsyncClient
from sqlmodel import Session

from passport.models import User


@pytest.mark.asyncio
async def test_add_attendance_end_to_end(client: AsyncClient, session: Session, make_user, make_event, make_award, staff_headers):
    event = make_event(points_allocation=50)
    award = make_award(50, "Half Century")
    alice = make_user("alice@cmu.edu", name="Alice")

    response = await client.post(f"/events/{event.id}/attendances", json={"identifiers": ["alice@cmu.edu"]}, headers=staff_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["new_attendees"] == 1
    assert body["duplicates"] == 0
    assert body["points_added"] == 50
    assert body["new_awards_granted"] == 1
    assert body["invalid_identifiers"] == []
    assert body["processed_users"][0]["id"] == alice.id
    assert body["processed_users"][0]["current_points"] == 50
    assert [a["id"] for a in body["processed_users"][0]["awards"]] == [award.id]

    response = await client.post(f"/events/{event.id}/attendances", json=["alice@cmu.edu"], headers=staff_headers)
    body = response.json()
    assert body["new_attendees"] == 0
    assert body["duplicates"] == 1
    assert body["new_awards_granted"] == 0


@pytest.mark.asyncio
async def test_add_attendance_reports_invalid_identifiers(client: AsyncClient, make_user, make_event, staff_headers):
    event = make_event(points_allocation=10)
    one = make_user("one@cmu.edu")

    response = await client.post(
        f"/events/{event.id}/attendances",
        json={"identifiers": [str(one.id), "notanemail@@", "999"]},
        headers=staff_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["new_attendees"] == 1
    assert sorted(body["invalid_identifiers"]) == ["999", "notanemail@@"]


@pytest.mark.asyncio
async def test_add_attendance_missing_event(client: AsyncClient, make_user, staff_headers):
    make_user("alice@cmu.edu")
    response = await client.post("/events/4040/attendances", json=["alice@cmu.edu"], headers=staff_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Event not found"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"ids": ["1"]}, "alice@cmu.edu", [1, 2], {"identifiers": "1"}])
async def test_add_attendance_malformed_body(client: AsyncClient, make_event, staff_headers, payload):
    event = make_event()
    response = await client.post(f"/events/{event.id}/attendances", json=payload, headers=staff_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_add_attendance_requires_staff(client: AsyncClient, make_event, student_headers):
    event = make_event()
    response = await client.post(f"/events/{event.id}/attendances", json=["1"], headers=student_headers)
    assert response.status_code == 403

    response = await client.post(f"/events/{event.id}/attendances", json=["1"])
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_remove_attendance(client: AsyncClient, session: Session, make_user, make_event, staff_headers):
    event = make_event(points_allocation=25)
    alice = make_user("alice@cmu.edu")
    await client.post(f"/events/{event.id}/attendances", json=["alice@cmu.edu"], headers=staff_headers)

    response = await client.request(
        "DELETE", f"/events/{event.id}/attendances", json={"identifiers": ["alice@cmu.edu", "ghost@cmu.edu"]}, headers=staff_headers
    )
    assert response.status_code == 200
    body = response.json()
    assert body["removed_count"] == 1
    assert body["points_deducted"] == 25
    assert [u["id"] for u in body["processed_users"]] == [alice.id]
    assert body["invalid_identifiers"] == ["ghost@cmu.edu"]
    assert session.get(User, alice.id).current_points == 0


@pytest.mark.asyncio
async def test_delete_event_cascade(client: AsyncClient, session: Session, make_user, make_event, staff_headers):
    event = make_event(points_allocation=40)
    alice = make_user("alice@cmu.edu", points=10)
    await client.post(f"/events/{event.id}/attendances", json=["alice@cmu.edu"], headers=staff_headers)

    response = await client.delete(f"/events/{event.id}", headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["attendances_removed"] == 1
    assert session.get(User, alice.id).current_points == 10

    response = await client.delete(f"/events/{event.id}", headers=staff_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_and_read_event(client: AsyncClient, make_award, staff_headers):
    award = make_award(100)

    response = await client.post(
        "/events/",
        json={
            "name": "Hackathon",
            "points_allocation": 100,
            "start_time": "2026-10-01T09:00:00Z",
            "end_time": "2026-10-01T18:00:00Z",
            "award_ids": [award.id],
        },
        headers=staff_headers,
    )
    assert response.status_code == 201
    event = response.json()
    assert [a["id"] for a in event["awards"]] == [award.id]

    response = await client.get(f"/events/{event['id']}", headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Hackathon"

    response = await client.get("/events/", params={"order": "asc", "limit": 1}, headers=staff_headers)
    assert response.status_code == 200
    assert len(response.json()) == 1


@pytest.mark.asyncio
async def test_create_event_validation(client: AsyncClient, staff_headers):
    response = await client.post(
        "/events/",
        json={"name": "Backwards", "start_time": "2026-10-01T18:00:00Z", "end_time": "2026-10-01T09:00:00Z"},
        headers=staff_headers,
    )
    assert response.status_code == 400

    response = await client.post("/events/", json={"name": "Half", "start_time": "2026-10-01T18:00:00Z"}, headers=staff_headers)
    assert response.status_code == 400

    response = await client.post("/events/", json={"name": "Ghost awards", "award_ids": [777]}, headers=staff_headers)
    assert response.status_code == 400

    response = await client.get("/events/", params={"limit": 0}, headers=staff_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_attendees_and_point_history(client: AsyncClient, make_user, make_event, staff_headers):
    event = make_event(points_allocation=15, name="Career Fair")
    alice = make_user("alice@cmu.edu", name="Alice")
    await client.post(f"/events/{event.id}/attendances", json=["alice@cmu.edu"], headers=staff_headers)

    response = await client.get(f"/events/{event.id}/attendees", headers=staff_headers)
    assert response.json() == [{"id": alice.id, "name": "Alice", "email": "alice@cmu.edu"}]

    response = await client.get(f"/users/{alice.id}/points", headers=staff_headers)
    history = response.json()
    assert [(h["delta"], h["event_id"]) for h in history] == [(15, event.id)]

    response = await client.get(f"/users/{alice.id}", headers=staff_headers)
    assert response.json()["current_points"] == 15


@pytest.mark.asyncio
async def test_list_events_time_filters(client: AsyncClient, staff_headers):
    for name, day in [("Early", "01"), ("Middle", "10"), ("Late", "20")]:
        await client.post(
            "/events/",
            json={"name": name, "start_time": f"2026-10-{day}T09:00:00Z", "end_time": f"2026-10-{day}T17:00:00Z"},
            headers=staff_headers,
        )

    response = await client.get("/events/", params={"before_time": "2026-10-05T00:00:00Z"}, headers=staff_headers)
    assert [e["name"] for e in response.json()] == ["Early"]

    response = await client.get("/events/", params={"after_time": "2026-10-05T00:00:00Z", "order": "asc"}, headers=staff_headers)
    assert [e["name"] for e in response.json()] == ["Middle", "Late"]

    response = await client.get(
        "/events/", params={"between_time": "2026-10-05T00:00:00Z,2026-10-15T00:00:00Z"}, headers=staff_headers
    )
    assert [e["name"] for e in response.json()] == ["Middle"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"before_time": "yesterday"},
        {"after_time": "2026-13-01"},
        {"between_time": "2026-10-01T00:00:00Z"},
        {"between_time": "2026-10-01T00:00:00Z,soon"},
        {"between_time": "2026-10-15T00:00:00Z,2026-10-01T00:00:00Z"},
    ],
)
async def test_list_events_rejects_bad_time_filters(client: AsyncClient, staff_headers, params):
    response = await client.get("/events/", params=params, headers=staff_headers)
    assert response.status_code == 400
