"""notification prefs and reminder logs

Revision ID: 0002_reminders
Revises: 0001_initial
Create Date: 2026-09-21 10:40:00.000000
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002_reminders"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "notification_prefs",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("remind_minutes_before_cutoff", sa.Integer(), nullable=False, server_default="90"),
        sa.Column("last_call_minutes_before_cutoff", sa.Integer(), nullable=False, server_default="15"),
        sa.Column("quiet_hours_start", sa.Integer(), nullable=True),
        sa.Column("quiet_hours_end", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_notification_prefs_user_id_users", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("user_id", name="uq_notification_prefs_user_id"),
    )

    op.create_table(
        "reminder_logs",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("cohort_id", sa.Uuid(), nullable=False),
        sa.Column("date_key", sa.String(length=10), nullable=False),
        sa.Column("type", sa.Enum("remind", "last_call", name="remindertype"), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_reminder_logs_user_id_users", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["cohort_id"], ["cohorts.id"], name="fk_reminder_logs_cohort_id_cohorts", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("user_id", "cohort_id", "date_key", "type", name="uq_reminder_log_per_day"),
    )
    op.create_index("ix_reminder_logs_date_key_type", "reminder_logs", ["date_key", "type"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_reminder_logs_date_key_type", table_name="reminder_logs")
    op.drop_table("reminder_logs")
    op.drop_table("notification_prefs")

    op.execute("DROP TYPE IF EXISTS remindertype")
