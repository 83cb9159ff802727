"""Pending link request model - staging row for an unverified link.

Keyed by the primary username: at most one request is in flight per
primary username, and a new request overwrites the old one. The row is
consumed when verification adjudicates it or swept once expired.
"""

import uuid

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from playerlink.models.base import USERNAME_MAX_LENGTH, Base

# Storage width for link codes (VARCHAR(16))
LINK_CODE_MAX_LENGTH = 16


class PendingLinkRequest(Base):
    """An in-progress link attempt awaiting its code.

    Attributes:
        primary_username: Username of the primary identity, primary key.
        primary_id: Primary (Java-side) identity that started the request.
        link_code: One-time code the player must submit.
        secondary_username: Claimed secondary username (not yet verified).
        requested_at: Creation time in seconds since the epoch.
    """

    __tablename__ = "linked_player_requests"
    __table_args__ = {"mysql_engine": "InnoDB"}

    primary_username: Mapped[str] = mapped_column(
        String(USERNAME_MAX_LENGTH),
        primary_key=True,
    )
    primary_id: Mapped[uuid.UUID] = mapped_column(nullable=False)
    link_code: Mapped[str] = mapped_column(
        String(LINK_CODE_MAX_LENGTH),
        nullable=False,
    )
    secondary_username: Mapped[str] = mapped_column(
        String(USERNAME_MAX_LENGTH),
        nullable=False,
    )
    requested_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        index=True,
    )

    def is_expired(self, timeout: int, now: int) -> bool:
        """Check whether the request is older than the timeout.

        Args:
            timeout: Request lifetime in seconds.
            now: Current time in seconds since the epoch.

        Returns:
            True if more than ``timeout`` seconds have passed since the request.
        """
        return now - self.requested_at > timeout

    def __repr__(self) -> str:
        # link_code is deliberately left out
        return (
            f"PendingLinkRequest(primary_username={self.primary_username!r}, "
            f"primary_id={self.primary_id}, "
            f"secondary_username={self.secondary_username!r}, "
            f"requested_at={self.requested_at})"
        )
