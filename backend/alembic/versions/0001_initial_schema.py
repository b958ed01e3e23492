"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the event scheduler:
users, events, event_participants, event_responses.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

participant_role = sa.Enum("organizer", "attendee", name="participantrole")
response_status = sa.Enum("going", "maybe", "not_going", name="responsestatus")


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("time", sa.String(20), nullable=False),
        sa.Column("location", sa.String(500), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_events_date", "events", ["date"])

    # --- event_participants ---
    op.create_table(
        "event_participants",
        sa.Column("participant_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("role", participant_role, nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_participant"),
    )
    op.create_index("ix_event_participants_event_id", "event_participants", ["event_id"])
    op.create_index("ix_event_participants_user_id", "event_participants", ["user_id"])

    # --- event_responses (no FK to events: removed by explicit cascade) ---
    op.create_table(
        "event_responses",
        sa.Column("response_id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("status", response_status, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("event_id", "user_id", name="uq_event_response"),
    )
    op.create_index("ix_event_responses_event_id", "event_responses", ["event_id"])
    op.create_index("ix_event_responses_user_id", "event_responses", ["user_id"])


def downgrade() -> None:
    op.drop_table("event_responses")
    op.drop_table("event_participants")
    op.drop_table("events")
    op.drop_table("users")
    response_status.drop(op.get_bind(), checkfirst=True)
    participant_role.drop(op.get_bind(), checkfirst=True)
