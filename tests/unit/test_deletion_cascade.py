"""Private-streak deletion: ownership rules, cascade order and rollback."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from golong.checkins.service import record_checkin
from golong.db.models import Checkin, Note, Participation, Streak
from golong.errors import Forbidden, NotFound, OperationFailed, ValidationFailed
from golong.social.note_service import create_note
from golong.streaks import deletion_service
from golong.streaks.deletion_service import PRIVATE_DELETE_STEPS, delete_private_streak
from golong.streaks.service import create_streak
from tests.helpers import make_user


async def _count(db: AsyncSession, model, *where) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*where))
    return result.scalar_one()


async def _private_streak_with_data(db: AsyncSession, owner_id: str) -> tuple[str, str]:
    streak, participation = await create_streak(db, owner_id, "Journal", is_public=False)
    await record_checkin(db, streak.id, owner_id, date(2024, 1, 1))
    await record_checkin(db, streak.id, owner_id, date(2024, 1, 2))
    await create_note(db, streak.id, owner_id, "Day one went fine")
    await db.commit()
    return streak.id, participation.id


class TestDeletePrivateStreak:
    @pytest.mark.asyncio
    async def test_removes_notes_checkins_and_participations(self, db_session: AsyncSession):
        owner, _ = await make_user(db_session, "hank")
        streak_id, participation_id = await _private_streak_with_data(db_session, owner.id)

        title = await delete_private_streak(db_session, streak_id, owner.id)

        assert title == "Journal"
        assert await _count(db_session, Streak, Streak.id == streak_id) == 0
        assert await _count(db_session, Note, Note.streak_id == streak_id) == 0
        assert await _count(db_session, Participation, Participation.streak_id == streak_id) == 0
        assert await _count(db_session, Checkin, Checkin.user_streak_id == participation_id) == 0

    @pytest.mark.asyncio
    async def test_missing_streak(self, db_session: AsyncSession):
        owner, _ = await make_user(db_session, "hank")
        with pytest.raises(NotFound):
            await delete_private_streak(db_session, "00000000-0000-4000-8000-000000000000", owner.id)

    @pytest.mark.asyncio
    async def test_public_streak_rejected(self, db_session: AsyncSession):
        owner, _ = await make_user(db_session, "hank")
        streak, _ = await create_streak(db_session, owner.id, "Open run")
        await db_session.commit()
        with pytest.raises(ValidationFailed, match="Cannot delete public streaks"):
            await delete_private_streak(db_session, streak.id, owner.id)

    @pytest.mark.asyncio
    async def test_non_owner_forbidden(self, db_session: AsyncSession):
        owner, _ = await make_user(db_session, "hank")
        other, _ = await make_user(db_session, "ivy")
        streak_id, _ = await _private_streak_with_data(db_session, owner.id)
        with pytest.raises(Forbidden):
            await delete_private_streak(db_session, streak_id, other.id)

    @pytest.mark.asyncio
    async def test_failed_step_rolls_back_everything(
        self, db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch
    ):
        """A failure deleting participations leaves notes and check-ins in place."""
        owner, _ = await make_user(db_session, "hank")
        streak_id, participation_id = await _private_streak_with_data(db_session, owner.id)

        async def _boom(db: AsyncSession, sid: str) -> None:
            raise OperationalError("DELETE FROM user_streaks", {}, Exception("disk I/O error"))

        patched = [(name, _boom if name == "user streaks" else step) for name, step in PRIVATE_DELETE_STEPS]
        monkeypatch.setattr(deletion_service, "PRIVATE_DELETE_STEPS", patched)

        with pytest.raises(OperationFailed) as exc_info:
            await delete_private_streak(db_session, streak_id, owner.id)

        assert exc_info.value.message == "Failed to delete user streaks"
        assert exc_info.value.status_code == 500
        assert await _count(db_session, Note, Note.streak_id == streak_id) == 1
        assert await _count(db_session, Checkin, Checkin.user_streak_id == participation_id) == 2
        assert await _count(db_session, Streak, Streak.id == streak_id) == 1
