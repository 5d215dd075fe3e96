"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates the PlanPact tables: users, pacts, guests, rsvps.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

pact_status = sa.Enum("active", "cancelled", name="pactstatus")
rsvp_status = sa.Enum("pending", "attending", "confirmed", "declined", name="rsvpstatus")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("email_verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "pacts",
        sa.Column("pact_id", sa.String(36), primary_key=True),
        sa.Column("host_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("event_date", sa.Date, nullable=False),
        sa.Column("event_time", sa.Time, nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("rsvp_deadline", sa.Date, nullable=True),
        sa.Column("send_reminders", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("allow_plus_ones", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("max_attendees", sa.Integer, nullable=True),
        sa.Column("status", pact_status, nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_pacts_host_id", "pacts", ["host_id"])
    # Reminder job scans by date.
    op.create_index("ix_pacts_event_date", "pacts", ["event_date"])

    op.create_table(
        "guests",
        sa.Column("guest_id", sa.String(36), primary_key=True),
        sa.Column(
            "pact_id", sa.String(36),
            sa.ForeignKey("pacts.pact_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=True),
        sa.Column("invited_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("pact_id", "email", name="uq_guests_pact_email"),
    )
    op.create_index("ix_guests_pact_id", "guests", ["pact_id"])

    op.create_table(
        "rsvps",
        sa.Column("rsvp_id", sa.String(36), primary_key=True),
        sa.Column(
            "guest_id", sa.String(36),
            sa.ForeignKey("guests.guest_id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        sa.Column(
            "pact_id", sa.String(36),
            sa.ForeignKey("pacts.pact_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("status", rsvp_status, nullable=False, server_default="pending"),
        sa.Column("plus_ones", sa.Integer, nullable=False, server_default="0"),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_rsvps_pact_id", "rsvps", ["pact_id"])


def downgrade() -> None:
    op.drop_table("rsvps")
    op.drop_table("guests")
    op.drop_table("pacts")
    op.drop_table("users")
    rsvp_status.drop(op.get_bind(), checkfirst=True)
    pact_status.drop(op.get_bind(), checkfirst=True)
