"""Confirmed link model - durable secondary → primary identity pairing.

One row per secondary identity. A new link for the same secondary identity
overwrites the previous pairing (upsert), it never adds a second row.
"""

import uuid

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from playerlink.models.base import USERNAME_MAX_LENGTH, Base


class ConfirmedLink(Base):
    """A verified link between a secondary and a primary identity.

    Attributes:
        secondary_id: Secondary (Bedrock-side) identity, primary key.
        primary_id: Primary (Java-side) identity.
        primary_username: Username of the primary identity at link time.
    """

    __tablename__ = "linked_players"
    __table_args__ = (
        Index("idx_linked_players_secondary_primary", "secondary_id", "primary_id"),
        {"mysql_engine": "InnoDB"},
    )

    secondary_id: Mapped[uuid.UUID] = mapped_column(primary_key=True)
    primary_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    primary_username: Mapped[str] = mapped_column(
        String(USERNAME_MAX_LENGTH),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"ConfirmedLink(secondary_id={self.secondary_id}, "
            f"primary_id={self.primary_id}, "
            f"primary_username={self.primary_username!r})"
        )
