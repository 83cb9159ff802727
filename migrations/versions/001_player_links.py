"""Create player link tables: linked_players and linked_player_requests.

Revision ID: 001_player_links
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001_player_links"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Confirmed links, one per secondary identity
    op.create_table(
        "linked_players",
        sa.Column("secondary_id", sa.BINARY(16), primary_key=True),
        sa.Column("primary_id", sa.BINARY(16), nullable=False),
        sa.Column("primary_username", sa.String(16), nullable=False),
        mysql_engine="InnoDB",
    )
    op.create_index(
        "idx_linked_players_secondary_primary",
        "linked_players",
        ["secondary_id", "primary_id"],
    )

    # Pending link requests, one per primary username
    op.create_table(
        "linked_player_requests",
        sa.Column("primary_username", sa.String(16), primary_key=True),
        sa.Column("primary_id", sa.BINARY(16), nullable=False),
        sa.Column("link_code", sa.String(16), nullable=False),
        sa.Column("secondary_username", sa.String(16), nullable=False),
        sa.Column("requested_at", sa.BigInteger(), nullable=False),
        mysql_engine="InnoDB",
    )
    op.create_index(
        "ix_linked_player_requests_requested_at",
        "linked_player_requests",
        ["requested_at"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_linked_player_requests_requested_at",
        table_name="linked_player_requests",
    )
    op.drop_table("linked_player_requests")
    op.drop_index("idx_linked_players_secondary_primary", table_name="linked_players")
    op.drop_table("linked_players")
