"""Create announcements, sermons and messages tables.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def _notification_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "notification_sent",
            sa.Boolean,
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("notification_sent_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "announcements",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=True),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("priority", sa.String(32), nullable=True),
        *_notification_columns(),
    )

    op.create_table(
        "sermons",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("speaker", sa.String(255), nullable=True),
        sa.Column("pastor", sa.String(255), nullable=True),
        sa.Column("status", sa.String(32), nullable=True),
        *_notification_columns(),
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("to_user_id", sa.String(128), nullable=True),
        sa.Column("from_user_id", sa.String(128), nullable=True),
        sa.Column("from_user_name", sa.String(255), nullable=True),
        sa.Column("subject", sa.String(255), nullable=True),
        sa.Column("body", sa.Text, nullable=True),
        *_notification_columns(),
    )


def downgrade() -> None:
    op.drop_table("messages")
    op.drop_table("sermons")
    op.drop_table("announcements")
