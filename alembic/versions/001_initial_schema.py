"""Initial schema: profiles, servers, channels, members.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.String(255), nullable=True, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("image_url", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=True)

    op.create_table(
        "servers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("image_url", sa.Text, nullable=False),
        sa.Column("invite_code", sa.String(64), nullable=False),
        sa.Column(
            "profile_id", sa.Integer,
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_servers_invite_code", "servers", ["invite_code"], unique=True)

    op.create_table(
        "channels",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="TEXT"),
        sa.Column(
            "profile_id", sa.Integer,
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "server_id", sa.Integer,
            sa.ForeignKey("servers.id", ondelete="CASCADE"), nullable=False,
        ),
        *_timestamps(),
    )
    op.create_index("ix_channels_server_id", "channels", ["server_id"])

    op.create_table(
        "members",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="GUEST"),
        sa.Column(
            "profile_id", sa.Integer,
            sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "server_id", sa.Integer,
            sa.ForeignKey("servers.id", ondelete="CASCADE"), nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("profile_id", "server_id", name="uq_members_profile_server"),
    )
    op.create_index("ix_members_server_id", "members", ["server_id"])


def downgrade() -> None:
    op.drop_table("members")
    op.drop_table("channels")
    op.drop_table("servers")
    op.drop_table("profiles")
