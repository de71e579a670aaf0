"""Initial schema: profiles, streaks, participation, check-ins, social tables.

Creates profiles, streaks, user_streaks, checkins, comments, likes, notes
and reports. The partial unique index on user_streaks allows any number of
inactive rows but only one active participation per (user, streak).

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

UUID = postgresql.UUID(as_uuid=False)


def _id() -> sa.Column:
    return sa.Column("id", UUID, primary_key=True, server_default=sa.text("gen_random_uuid()"))


def _ts(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False)


def _fk(name: str, target: str, ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(name, UUID, sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def upgrade() -> None:
    """Create every GoLong table."""
    # --- profiles ---
    op.create_table(
        "profiles",
        _id(),
        sa.Column("username", sa.String(32), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("display_name", sa.String(64), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("bio", sa.String(280), nullable=True),
        sa.Column("is_admin", sa.Boolean(), server_default="false", nullable=False),
        _ts("created_at"),
        _ts("updated_at"),
        sa.UniqueConstraint("username", name="uq_profiles_username"),
        sa.UniqueConstraint("email", name="uq_profiles_email"),
    )

    # --- streaks ---
    op.create_table(
        "streaks",
        _id(),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("tags", sa.JSON(), server_default=sa.text("'[]'::json"), nullable=False),
        sa.Column("is_public", sa.Boolean(), server_default="true", nullable=False),
        _fk("created_by", "profiles.id"),
        _ts("created_at"),
        _ts("updated_at"),
        _ts("last_member_left_at", nullable=True),
    )
    op.create_index("ix_streaks_created_by", "streaks", ["created_by"])
    op.create_index("ix_streaks_abandoned", "streaks", ["is_public", "last_member_left_at"])

    # --- user_streaks (participation) ---
    op.create_table(
        "user_streaks",
        _id(),
        _fk("user_id", "profiles.id"),
        _fk("streak_id", "streaks.id"),
        sa.Column("status", sa.String(16), server_default="active", nullable=False),
        sa.Column("current_streak_days", sa.Integer(), server_default="0", nullable=False),
        sa.Column("longest_streak_days", sa.Integer(), server_default="0", nullable=False),
        sa.Column("last_checkin_date", sa.Date(), nullable=True),
        _ts("joined_at"),
        _ts("left_at", nullable=True),
        _ts("pinned_at", nullable=True),
    )
    op.execute(
        "ALTER TABLE user_streaks ADD CONSTRAINT ck_user_streaks_status "
        "CHECK (status IN ('active', 'inactive'))"
    )
    op.create_index(
        "uq_user_streaks_active",
        "user_streaks",
        ["user_id", "streak_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )
    op.create_index("ix_user_streaks_streak_id", "user_streaks", ["streak_id"])
    op.create_index("ix_user_streaks_pinned", "user_streaks", ["user_id", "pinned_at"])

    # --- checkins ---
    op.create_table(
        "checkins",
        _id(),
        _fk("user_streak_id", "user_streaks.id"),
        sa.Column("checkin_date", sa.Date(), nullable=False),
        _ts("created_at"),
        sa.UniqueConstraint("user_streak_id", "checkin_date", name="uq_checkins_user_streak_date"),
    )

    # --- comments ---
    op.create_table(
        "comments",
        _id(),
        _fk("streak_id", "streaks.id"),
        _fk("user_id", "profiles.id"),
        sa.Column("content", sa.String(1000), nullable=False),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("ix_comments_streak_id", "comments", ["streak_id"])

    # --- likes ---
    op.create_table(
        "likes",
        _id(),
        _fk("streak_id", "streaks.id"),
        _fk("user_id", "profiles.id"),
        _ts("created_at"),
        sa.UniqueConstraint("streak_id", "user_id", name="uq_likes_streak_user"),
    )

    # --- notes ---
    op.create_table(
        "notes",
        _id(),
        _fk("streak_id", "streaks.id"),
        _fk("user_id", "profiles.id"),
        sa.Column("content", sa.Text(), nullable=False),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("ix_notes_streak_id", "notes", ["streak_id"])

    # --- reports ---
    op.create_table(
        "reports",
        _id(),
        _fk("streak_id", "streaks.id"),
        _fk("reporter_id", "profiles.id"),
        sa.Column("reason", sa.String(100), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        _ts("created_at"),
        _ts("resolved_at", nullable=True),
        _fk("resolved_by", "profiles.id", ondelete="SET NULL", nullable=True),
    )
    op.execute(
        "ALTER TABLE reports ADD CONSTRAINT ck_reports_status "
        "CHECK (status IN ('pending', 'resolved', 'dismissed'))"
    )
    op.create_index("ix_reports_streak_id", "reports", ["streak_id"])


def downgrade() -> None:
    """Drop every GoLong table."""
    for table in ("reports", "notes", "likes", "comments", "checkins", "user_streaks", "streaks", "profiles"):
        op.drop_table(table)
