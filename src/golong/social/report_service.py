"""Content reports and the admin review workflow.

Any user can report an existing streak. Admins resolve a pending report
either by dismissing it or by hiding the streak (making it private).
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from golong.db.models import Participation, ParticipationStatus, Report, ReportStatus
from golong.errors import Conflict, NotFound
from golong.streaks.service import require_streak

logger = structlog.get_logger()


class ResolveAction(str, enum.Enum):
    DISMISS = "dismiss"
    HIDE_STREAK = "hide_streak"


async def create_report(
    db: AsyncSession,
    streak_id: str,
    reporter_id: str,
    reason: str,
    description: str | None = None,
) -> Report:
    await require_streak(db, streak_id)
    report = Report(
        streak_id=streak_id,
        reporter_id=reporter_id,
        reason=reason.strip(),
        description=description,
        status=ReportStatus.PENDING,
    )
    db.add(report)
    await db.flush()
    logger.info("report_created", report_id=report.id, streak_id=streak_id, reporter_id=reporter_id)
    return report


async def list_reports(
    db: AsyncSession,
    status: ReportStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Report]:
    query = select(Report)
    if status is not None:
        query = query.where(Report.status == status)
    query = query.order_by(Report.created_at.desc()).offset(offset).limit(limit)
    result = await db.execute(query)
    return list(result.scalars())


async def resolve_report(
    db: AsyncSession,
    report_id: str,
    admin_id: str,
    action: ResolveAction,
) -> Report:
    result = await db.execute(select(Report).where(Report.id == report_id))
    report = result.scalar_one_or_none()
    if report is None:
        raise NotFound("Report not found")
    if report.status is not ReportStatus.PENDING:
        raise Conflict("Report has already been reviewed")

    now = datetime.now(timezone.utc)
    if action is ResolveAction.HIDE_STREAK:
        streak = await require_streak(db, report.streak_id)
        streak.is_public = False
        streak.last_member_left_at = None
        streak.updated_at = now
        # a private streak has no participant besides its creator
        others = await db.execute(
            select(Participation).where(
                Participation.streak_id == streak.id,
                Participation.user_id != streak.created_by,
                Participation.status == ParticipationStatus.ACTIVE,
            )
        )
        for participation in others.scalars():
            participation.status = ParticipationStatus.INACTIVE
            participation.left_at = now
            participation.pinned_at = None
        report.status = ReportStatus.RESOLVED
    else:
        report.status = ReportStatus.DISMISSED

    report.resolved_at = now
    report.resolved_by = admin_id
    await db.flush()
    logger.info("report_resolved", report_id=report_id, admin_id=admin_id, action=action.value)
    return report
