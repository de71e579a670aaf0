"""Integration tests: comments, likes, notes and reports via API."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.helpers import make_user


async def _streak(client: AsyncClient, headers: dict, **body) -> str:
    body.setdefault("title", "Daily sketch")
    response = await client.post("/api/v1/streaks", json=body, headers=headers)
    return response.json()["id"]


class TestComments:
    @pytest.mark.asyncio
    async def test_comment_lifecycle(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "gus")
        _, other = await make_user(db_session, "hal")
        streak_id = await _streak(client, owner)

        created = await client.post("/api/v1/comments", json={
            "streak_id": streak_id, "content": "Nice work",
        }, headers=other)
        assert created.status_code == 201
        comment = created.json()
        assert comment["author"]["username"] == "hal"

        listing = await client.get(f"/api/v1/comments?streak_id={streak_id}", headers=owner)
        assert [c["content"] for c in listing.json()["comments"]] == ["Nice work"]

        forbidden = await client.put(
            f"/api/v1/comments?id={comment['id']}", json={"content": "mine now"}, headers=owner
        )
        assert forbidden.status_code == 403

        edited = await client.put(
            f"/api/v1/comments?id={comment['id']}", json={"content": "Great work"}, headers=other
        )
        assert edited.json()["content"] == "Great work"

        deleted = await client.delete(f"/api/v1/comments?id={comment['id']}", headers=other)
        assert deleted.status_code == 200
        missing = await client.delete(f"/api/v1/comments?id={comment['id']}", headers=other)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_private_streak_always_403(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "gus")
        streak_id = await _streak(client, owner, is_public=False)

        get = await client.get(f"/api/v1/comments?streak_id={streak_id}", headers=owner)
        post = await client.post("/api/v1/comments", json={
            "streak_id": streak_id, "content": "talking to myself",
        }, headers=owner)
        assert get.status_code == 403
        assert post.status_code == 403
        assert post.json() == {"error": "Access denied"}

    @pytest.mark.asyncio
    async def test_missing_streak_id(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "gus")
        response = await client.get("/api/v1/comments", headers=owner)
        assert response.status_code == 400


class TestLikes:
    @pytest.mark.asyncio
    async def test_like_check_unlike(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "gus")
        _, fan = await make_user(db_session, "ida")
        streak_id = await _streak(client, owner)

        liked = await client.post("/api/v1/likes", json={"streak_id": streak_id}, headers=fan)
        assert liked.status_code == 201
        again = await client.post("/api/v1/likes", json={"streak_id": streak_id}, headers=fan)
        assert again.status_code == 409

        check = await client.get(
            f"/api/v1/likes?streak_id={streak_id}&check_user_like=true", headers=fan
        )
        assert check.json() == {"has_liked": True, "like_id": liked.json()["id"]}

        listing = await client.get(f"/api/v1/likes?streak_id={streak_id}", headers=owner)
        assert listing.json()["count"] == 1

        removed = await client.delete(f"/api/v1/likes?streak_id={streak_id}", headers=fan)
        assert removed.status_code == 200
        check = await client.get(
            f"/api/v1/likes?streak_id={streak_id}&check_user_like=true", headers=fan
        )
        assert check.json() == {"has_liked": False, "like_id": None}

    @pytest.mark.asyncio
    async def test_unlike_without_target(self, client: AsyncClient, db_session: AsyncSession):
        _, fan = await make_user(db_session, "ida")
        response = await client.delete("/api/v1/likes", headers=fan)
        assert response.status_code == 400
        assert response.json() == {"error": "Either streak_id or like_id is required"}

    @pytest.mark.asyncio
    async def test_private_streak_like_403(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "gus")
        streak_id = await _streak(client, owner, is_public=False)
        response = await client.post("/api/v1/likes", json={"streak_id": streak_id}, headers=owner)
        assert response.status_code == 403


class TestNotes:
    @pytest.mark.asyncio
    async def test_private_notes(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "gus")
        _, other = await make_user(db_session, "jo")
        streak_id = await _streak(client, owner, is_public=False)

        created = await client.post("/api/v1/notes", json={
            "streak_id": streak_id, "content": "Felt tired today",
        }, headers=owner)
        assert created.status_code == 201

        own = await client.get(f"/api/v1/notes?streak_id={streak_id}", headers=owner)
        assert len(own.json()["notes"]) == 1
        peek = await client.get(f"/api/v1/notes?streak_id={streak_id}", headers=other)
        assert peek.status_code == 403

    @pytest.mark.asyncio
    async def test_blank_note(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "gus")
        streak_id = await _streak(client, owner)
        response = await client.post("/api/v1/notes", json={
            "streak_id": streak_id, "content": "  ",
        }, headers=owner)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_and_delete_author_only(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "gus")
        _, other = await make_user(db_session, "jo")
        streak_id = await _streak(client, owner)
        note = (await client.post("/api/v1/notes", json={
            "streak_id": streak_id, "content": "draft",
        }, headers=owner)).json()

        assert (await client.put(
            f"/api/v1/notes?id={note['id']}", json={"content": "x"}, headers=other
        )).status_code == 403
        updated = await client.put(f"/api/v1/notes?id={note['id']}", json={"content": "final"}, headers=owner)
        assert updated.json()["content"] == "final"
        assert (await client.delete(f"/api/v1/notes?id={note['id']}", headers=other)).status_code == 403
        assert (await client.delete(f"/api/v1/notes?id={note['id']}", headers=owner)).status_code == 200


class TestReports:
    @pytest.mark.asyncio
    async def test_report_and_resolve(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "gus")
        _, reporter = await make_user(db_session, "kim")
        _, admin = await make_user(db_session, "root_admin", is_admin=True)
        streak_id = await _streak(client, owner)

        created = await client.post("/api/v1/reports", json={
            "streak_id": streak_id, "reason": "spam", "description": "link farm",
        }, headers=reporter)
        assert created.status_code == 201
        report = created.json()
        assert report["status"] == "pending"

        assert (await client.get("/api/v1/reports", headers=reporter)).status_code == 403

        pending = await client.get("/api/v1/reports?status=pending", headers=admin)
        assert [r["id"] for r in pending.json()["reports"]] == [report["id"]]

        resolved = await client.post(
            f"/api/v1/reports/{report['id']}/resolve", json={"action": "hide_streak"}, headers=admin
        )
        assert resolved.status_code == 200
        assert resolved.json()["status"] == "resolved"

        hidden = await client.get(f"/api/v1/streaks/{streak_id}", headers=reporter)
        assert hidden.status_code == 403

        twice = await client.post(
            f"/api/v1/reports/{report['id']}/resolve", json={"action": "dismiss"}, headers=admin
        )
        assert twice.status_code == 409

    @pytest.mark.asyncio
    async def test_non_admin_cannot_resolve(self, client: AsyncClient, db_session: AsyncSession):
        _, owner = await make_user(db_session, "gus")
        streak_id = await _streak(client, owner)
        report = (await client.post("/api/v1/reports", json={
            "streak_id": streak_id, "reason": "spam",
        }, headers=owner)).json()

        response = await client.post(
            f"/api/v1/reports/{report['id']}/resolve", json={"action": "dismiss"}, headers=owner
        )
        assert response.status_code == 403
        assert response.json() == {"error": "Admin access required"}
