"""Integration tests: streak registry, participation and deletion via API."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.helpers import make_user


async def _create(client: AsyncClient, headers: dict, **body) -> dict:
    body.setdefault("title", "30 days no sugar")
    response = await client.post("/api/v1/streaks", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestRegistry:
    @pytest.mark.asyncio
    async def test_create_and_get(self, client: AsyncClient, db_session: AsyncSession):
        _, headers = await make_user(db_session, "anna")
        created = await _create(
            client, headers, description="No added sugar", category="health", tags=["Food", "food", " diet "]
        )
        assert created["user_streak_id"]
        assert created["streak"]["tags"] == ["food", "diet"]

        response = await client.get(f"/api/v1/streaks/{created['id']}", headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["streak"]["title"] == "30 days no sugar"
        assert data["user_streak"]["is_active"] is True
        assert data["user_streak"]["id"] == created["user_streak_id"]

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, client: AsyncClient, db_session: AsyncSession):
        _, headers = await make_user(db_session, "anna")
        response = await client.post("/api/v1/streaks", json={"title": "   "}, headers=headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_private_streak_hidden_from_others(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        _, other = await make_user(db_session, "ben")
        created = await _create(client, owner, title="Diary", is_public=False)

        response = await client.get(f"/api/v1/streaks/{created['id']}", headers=other)
        assert response.status_code == 403

        listing = await client.get("/api/v1/streaks", headers=other)
        assert listing.status_code == 200
        assert created["id"] not in [s["streak"]["id"] for s in listing.json()["streaks"]]

        own_listing = await client.get("/api/v1/streaks", headers=owner)
        assert created["id"] in [s["streak"]["id"] for s in own_listing.json()["streaks"]]

    @pytest.mark.asyncio
    async def test_list_filters(self, client: AsyncClient, db_session: AsyncSession):
        _, headers = await make_user(db_session, "anna")
        await _create(client, headers, title="Run", category="fitness")
        await _create(client, headers, title="Read", category="learning")

        response = await client.get("/api/v1/streaks?category=fitness", headers=headers)
        titles = [s["streak"]["title"] for s in response.json()["streaks"]]
        assert titles == ["Run"]

    @pytest.mark.asyncio
    async def test_unknown_streak(self, client: AsyncClient, db_session: AsyncSession):
        _, headers = await make_user(db_session, "anna")
        response = await client.get(
            "/api/v1/streaks/00000000-0000-4000-8000-000000000000", headers=headers
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Streak not found"}

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, client: AsyncClient, db_session: AsyncSession):
        _, headers = await make_user(db_session, "anna")
        response = await client.get("/api/v1/streaks/not-a-uuid", headers=headers)
        assert response.status_code == 400


class TestParticipation:
    @pytest.mark.asyncio
    async def test_join_via_action_then_conflict(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        _, member = await make_user(db_session, "ben")
        streak = await _create(client, owner)

        first = await client.post(f"/api/v1/streaks/{streak['id']}?action=join", headers=member)
        assert first.status_code == 200
        assert first.json()["user_streak"]["current_streak_days"] == 0

        second = await client.post(f"/api/v1/streaks/{streak['id']}?action=join", headers=member)
        assert second.status_code == 409
        assert second.json() == {"error": "Already joined this streak"}

    @pytest.mark.asyncio
    async def test_invalid_action(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        streak = await _create(client, owner)
        response = await client.post(f"/api/v1/streaks/{streak['id']}?action=explode", headers=owner)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_creator_cannot_join(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        streak = await _create(client, owner)
        response = await client.post(f"/api/v1/streaks/{streak['id']}?action=join", headers=owner)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_join_private_forbidden(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        _, member = await make_user(db_session, "ben")
        streak = await _create(client, owner, is_public=False)
        response = await client.post(f"/api/v1/streaks/{streak['id']}?action=join", headers=member)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_leave_endpoints(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        _, member = await make_user(db_session, "ben")
        streak = await _create(client, owner)

        await client.post(f"/api/v1/streaks/{streak['id']}?action=join", headers=member)
        left = await client.post(f"/api/v1/streaks/{streak['id']}/leave", headers=member)
        assert left.status_code == 200
        assert left.json()["streak_abandoned"] is False

        again = await client.post(f"/api/v1/streaks/{streak['id']}?action=leave", headers=member)
        assert again.status_code == 404

        last = await client.post(f"/api/v1/streaks/{streak['id']}?action=leave", headers=owner)
        assert last.json()["streak_abandoned"] is True

        detail = await client.get(f"/api/v1/streaks/{streak['id']}", headers=owner)
        assert detail.json()["streak"]["last_member_left_at"] is not None
        assert detail.json()["user_streak"] is None

    @pytest.mark.asyncio
    async def test_private_creator_cannot_leave(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        streak = await _create(client, owner, is_public=False)
        response = await client.post(f"/api/v1/streaks/{streak['id']}/leave", headers=owner)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_pin_cap_and_my_streaks_order(self, client: AsyncClient, db_session: AsyncSession):
        _, headers = await make_user(db_session, "anna")
        ids = [(await _create(client, headers, title=f"S{i}"))["id"] for i in range(4)]

        for sid in ids[:3]:
            response = await client.post(f"/api/v1/streaks/{sid}/pin", headers=headers)
            assert response.json()["evicted"] is False

        response = await client.post(f"/api/v1/streaks/{ids[3]}/pin", headers=headers)
        assert response.status_code == 200
        assert response.json()["evicted"] is True

        mine = (await client.get("/api/v1/streaks/mine", headers=headers)).json()["streaks"]
        pinned = [s["streak"]["id"] for s in mine if s["user_streak"]["pinned_at"]]
        assert len(pinned) == 3
        assert ids[0] not in pinned
        # most recently pinned comes first
        assert mine[0]["streak"]["id"] == ids[3]

        unpin = await client.post(f"/api/v1/streaks/{ids[0]}/unpin", headers=headers)
        assert unpin.status_code == 400


class TestStatsAndLeaderboard:
    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        _, member = await make_user(db_session, "ben")
        streak = await _create(client, owner)
        await client.post(f"/api/v1/streaks/{streak['id']}?action=join", headers=member)
        await client.post("/api/v1/checkins", json={
            "streak_id": streak["id"], "checkin_date": "2024-01-01",
        }, headers=member)
        await client.post("/api/v1/checkins", json={
            "streak_id": streak["id"], "checkin_date": "2024-01-02",
        }, headers=member)

        stats = (await client.get(f"/api/v1/streaks/{streak['id']}/stats", headers=owner)).json()
        assert stats["total_participants"] == 2
        assert stats["average_streak"] == 1
        assert stats["longest_streak"] == 2

    @pytest.mark.asyncio
    async def test_leaderboard_top_three(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        streak = await _create(client, owner)
        for i, name in enumerate(["ben", "cleo", "dana", "eli"]):
            _, headers = await make_user(db_session, name)
            await client.post(f"/api/v1/streaks/{streak['id']}?action=join", headers=headers)
            for day in range(1, i + 2):
                await client.post("/api/v1/checkins", json={
                    "streak_id": streak["id"], "checkin_date": f"2024-01-0{day}",
                }, headers=headers)

        response = await client.get(f"/api/v1/streaks/{streak['id']}/leaderboard", headers=owner)
        entries = response.json()["entries"]
        assert [e["username"] for e in entries] == ["eli", "dana", "cleo"]
        assert [e["rank"] for e in entries] == [1, 2, 3]
        assert entries[0]["current_streak_days"] == 4


class TestDeleteStreak:
    @pytest.mark.asyncio
    async def test_delete_private(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        streak = await _create(client, owner, title="Diary", is_public=False)
        await client.post("/api/v1/notes", json={"streak_id": streak["id"], "content": "hi"}, headers=owner)
        await client.post("/api/v1/checkins", json={
            "streak_id": streak["id"], "checkin_date": "2024-01-01",
        }, headers=owner)

        response = await client.delete(f"/api/v1/streaks/{streak['id']}", headers=owner)
        assert response.status_code == 200
        assert "Diary" in response.json()["message"]

        gone = await client.get(f"/api/v1/streaks/{streak['id']}", headers=owner)
        assert gone.status_code == 404
        checkins = await client.get("/api/v1/checkins", headers=owner)
        assert checkins.json()["count"] == 0

    @pytest.mark.asyncio
    async def test_delete_public_rejected(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        streak = await _create(client, owner)
        response = await client.delete(f"/api/v1/streaks/{streak['id']}", headers=owner)
        assert response.status_code == 400
        assert response.json()["error"] == "Cannot delete public streaks. You can only leave them."

    @pytest.mark.asyncio
    async def test_delete_by_non_owner(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        _, other = await make_user(db_session, "ben")
        streak = await _create(client, owner, is_public=False)
        response = await client.delete(f"/api/v1/streaks/{streak['id']}", headers=other)
        assert response.status_code == 403


class TestPopularAndActivity:
    @pytest.mark.asyncio
    async def test_popular_ranks_by_members(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        _, ben = await make_user(db_session, "ben")
        _, cleo = await make_user(db_session, "cleo")
        quiet = await _create(client, owner, title="Quiet")
        busy = await _create(client, owner, title="Busy")
        await _create(client, owner, title="Hidden", is_public=False)
        for headers in (ben, cleo):
            await client.post(f"/api/v1/streaks/{busy['id']}?action=join", headers=headers)

        response = await client.get("/api/v1/streaks/popular", headers=ben)
        assert response.status_code == 200
        data = response.json()
        assert [s["streak"]["id"] for s in data["streaks"]] == [busy["id"], quiet["id"]]
        assert [s["participant_count"] for s in data["streaks"]] == [3, 1]
        assert [s["has_joined"] for s in data["streaks"]] == [True, False]
        assert data["streaks"][0]["creator"]["username"] == "anna"
        assert data["total"] == 2
        assert data["has_more"] is False

        first_page = (await client.get("/api/v1/streaks/popular?limit=1", headers=ben)).json()
        assert first_page["has_more"] is True

    @pytest.mark.asyncio
    async def test_recent_activity_public(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        _, ben = await make_user(db_session, "ben")
        streak = await _create(client, owner)
        await client.post(f"/api/v1/streaks/{streak['id']}?action=join", headers=ben)
        await client.post("/api/v1/checkins", json={
            "streak_id": streak["id"], "checkin_date": "2024-01-01",
        }, headers=ben)
        await client.post("/api/v1/comments", json={
            "streak_id": streak["id"], "content": "Day one done",
        }, headers=ben)

        response = await client.get(f"/api/v1/streaks/{streak['id']}/recent-activity", headers=owner)
        assert response.status_code == 200
        activities = response.json()["activities"]
        assert {a["type"] for a in activities} == {"join", "checkin", "comment"}
        checkin = next(a for a in activities if a["type"] == "checkin")
        assert checkin["user"]["username"] == "ben"
        assert checkin["checkin_date"] == "2024-01-01"
        stamps = [a["timestamp"] for a in activities]
        assert stamps == sorted(stamps, reverse=True)

    @pytest.mark.asyncio
    async def test_recent_activity_private(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "anna")
        _, other = await make_user(db_session, "ben")
        streak = await _create(client, owner, title="Diary", is_public=False)
        await client.post("/api/v1/notes", json={
            "streak_id": streak["id"], "content": "x" * 80,
        }, headers=owner)

        activities = (await client.get(
            f"/api/v1/streaks/{streak['id']}/recent-activity", headers=owner
        )).json()["activities"]
        note = next(a for a in activities if a["type"] == "note")
        assert note["content"] == "x" * 50 + "..."

        denied = await client.get(f"/api/v1/streaks/{streak['id']}/recent-activity", headers=other)
        assert denied.status_code == 403
