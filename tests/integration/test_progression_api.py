"""Quest, run, routine and insights endpoints."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}


@pytest.mark.asyncio
async def test_list_quests(client: AsyncClient) -> None:
    response = await client.get("/api/quests")
    assert response.status_code == 200
    quests = response.json()["quests"]
    assert [q["id"] for q in quests] == ["q1", "q2", "q3", "q4"]
    assert quests[0] == {
        "id": "q1",
        "title": "2-min Breathing",
        "base_points": 10,
        "category": "mindfulness",
        "cooldown_sec": 0,
        "active": True,
    }


@pytest.mark.asyncio
async def test_complete_quest(client: AsyncClient) -> None:
    response = await client.post("/api/runs", json={"quest_id": "q1"}, headers=ALICE)
    assert response.status_code == 200
    data = response.json()
    assert data["completion"]["quest_id"] == "q1"
    assert data["completion"]["gained_xp"] == 11
    assert data["completion"]["streak_applied"] == 1
    assert data["progress"]["total_xp"] == 11
    assert data["progress"]["level"] == 2
    assert data["progress"]["current_streak"] == 1
    assert data["progress"]["last_active_date"] is not None
    assert data["meta"] == {"base_points": 10, "multiplier": 1.05, "leveled_up": True, "avatar_promoted": False}


@pytest.mark.asyncio
async def test_cooldown_returns_429_with_retry_after(client: AsyncClient) -> None:
    first = await client.post("/api/runs", json={"quest_id": "q2"}, headers=ALICE)
    assert first.status_code == 200

    second = await client.post("/api/runs", json={"quest_id": "q2"}, headers=ALICE)
    assert second.status_code == 429
    data = second.json()
    assert data["error"] == "RATE_LIMITED"
    assert 3590 <= data["retry_after_seconds"] <= 3600
    assert second.headers["retry-after"] == str(data["retry_after_seconds"])

    # Cooldowns are per user
    other = await client.post("/api/runs", json={"quest_id": "q2"}, headers=BOB)
    assert other.status_code == 200


@pytest.mark.asyncio
async def test_unknown_quest_is_400(client: AsyncClient) -> None:
    response = await client.post("/api/runs", json={"quest_id": "nope"}, headers=ALICE)
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_missing_quest_id_is_422(client: AsyncClient) -> None:
    response = await client.post("/api/runs", json={}, headers=ALICE)
    assert response.status_code == 422
    assert response.json()["error"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_progress_and_run_history(client: AsyncClient) -> None:
    empty = await client.get("/api/progress", headers=ALICE)
    assert empty.status_code == 200
    assert empty.json()["total_xp"] == 0
    assert empty.json()["level"] == 1
    assert empty.json()["last_active_date"] is None

    await client.post("/api/runs", json={"quest_id": "q1"}, headers=ALICE)
    await client.post("/api/runs", json={"quest_id": "q4"}, headers=ALICE)

    progress = (await client.get("/api/progress", headers=ALICE)).json()
    assert progress["user_id"] == "alice"
    assert progress["total_xp"] == 27  # 11 + 16
    assert progress["level_progress"] == {
        "level_floor_xp": 16,
        "next_level_xp": 36,
        "xp_into_level": 11,
        "xp_for_level": 20,
    }

    runs = (await client.get("/api/runs", headers=ALICE)).json()["runs"]
    assert [r["quest_id"] for r in runs] == ["q4", "q1"]
    limited = (await client.get("/api/runs", params={"limit": 1}, headers=ALICE)).json()["runs"]
    assert len(limited) == 1
    assert (await client.get("/api/runs", headers=BOB)).json()["runs"] == []


@pytest.mark.asyncio
async def test_routine_flow(client: AsyncClient) -> None:
    created = await client.post("/api/routines", json={"title": " Stretch ", "daily_target": 2}, headers=ALICE)
    assert created.status_code == 201
    routine = created.json()["routine"]
    assert routine["title"] == "Stretch"
    assert routine["base_points"] == 6
    assert routine["count_today"] == 0

    for _ in range(2):
        logged = await client.post(f"/api/routines/{routine['id']}/log", headers=ALICE)
        assert logged.status_code == 200
        assert "streak_applied" not in logged.json()["completion"]

    third = await client.post(f"/api/routines/{routine['id']}/log", headers=ALICE)
    assert third.status_code == 400
    assert third.json()["error"] == "LIMIT_REACHED"
    assert third.json()["daily_target"] == 2

    listed = (await client.get("/api/routines", headers=ALICE)).json()["routines"]
    assert [(r["id"], r["count_today"]) for r in listed] == [(routine["id"], 2)]

    deleted = await client.delete(f"/api/routines/{routine['id']}", headers=ALICE)
    assert deleted.status_code == 204
    assert (await client.get("/api/routines", headers=ALICE)).json()["routines"] == []

    again = await client.post(f"/api/routines/{routine['id']}/log", headers=ALICE)
    assert again.status_code == 404
    assert again.json()["error"] == "NOT_FOUND"
    assert (await client.delete(f"/api/routines/{routine['id']}", headers=ALICE)).status_code == 404


@pytest.mark.asyncio
async def test_routines_are_private(client: AsyncClient) -> None:
    routine = (await client.post("/api/routines", json={"title": "Read"}, headers=ALICE)).json()["routine"]
    response = await client.post(f"/api/routines/{routine['id']}/log", headers=BOB)
    assert response.status_code == 404
    assert (await client.get("/api/routines", headers=BOB)).json()["routines"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [{"title": "   "}, {"title": "Read", "daily_target": 0}, {"title": "Read", "base_points": -1}, {}],
)
async def test_invalid_routine_body_is_422(client: AsyncClient, body: dict) -> None:
    response = await client.post("/api/routines", json=body, headers=ALICE)
    assert response.status_code == 422
    assert response.json()["error"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_weekly_insights(client: AsyncClient) -> None:
    routine = (await client.post("/api/routines", json={"title": "Read"}, headers=ALICE)).json()["routine"]
    await client.post(f"/api/routines/{routine['id']}/log", headers=ALICE)
    await client.post("/api/runs", json={"quest_id": "q1"}, headers=ALICE)

    response = await client.get("/api/insights/weekly", headers=ALICE)
    assert response.status_code == 200
    data = response.json()
    assert len(data["series"]) == 7
    assert data["series"][-1]["date"] == data["window"]["end"]
    assert data["series"][-1]["routine_logs"] == 1
    assert data["series"][-1]["quests"] == 1
    assert data["completion"] == {"daily_target_total": 1, "days_met_target": 1, "completion_rate": 14}
    assert data["risk_band"] == "Red"
    assert data["avatar_mood"] == "tired"
    assert data["streak"] == {"current": 1, "longest": 1}
    assert data["message"]
