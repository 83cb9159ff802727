"""Repository for ConfirmedLink operations.

Durable secondary → primary links. Writes are single atomic statements
(upsert, delete-by-key) so concurrent callers never observe a torn row.
"""

import uuid

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from playerlink.core.database import build_upsert
from playerlink.models.confirmed_link import ConfirmedLink


class ConfirmedLinkRepository:
    """Stateless repository for the linked_players table.

    All methods are static; no instance state. Pass an AsyncSession
    for every call so the caller controls transaction boundaries.
    """

    @staticmethod
    async def is_linked(db: AsyncSession, identity: uuid.UUID) -> bool:
        """Check whether an identity takes part in any link.

        Args:
            db: Async database session.
            identity: Either a secondary or a primary identity.

        Returns:
            True if a row has this identity as secondary_id or primary_id.
        """
        stmt = (
            select(ConfirmedLink.secondary_id)
            .where(
                or_(
                    ConfirmedLink.secondary_id == identity,
                    ConfirmedLink.primary_id == identity,
                )
            )
            .limit(1)
        )
        result = await db.execute(stmt)
        return result.first() is not None

    @staticmethod
    async def get_by_secondary_id(
        db: AsyncSession, secondary_id: uuid.UUID
    ) -> ConfirmedLink | None:
        """Fetch a link by its secondary identity.

        Args:
            db: Async database session.
            secondary_id: Secondary identity (primary key).

        Returns:
            ConfirmedLink if found, None otherwise.
        """
        stmt = (
            select(ConfirmedLink)
            .where(ConfirmedLink.secondary_id == secondary_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def upsert(
        db: AsyncSession,
        *,
        secondary_id: uuid.UUID,
        primary_id: uuid.UUID,
        primary_username: str,
    ) -> None:
        """Create or replace the link for a secondary identity.

        On conflict primary_id and primary_username are overwritten, so
        repeating the call leaves exactly one row.

        Args:
            db: Async database session.
            secondary_id: Secondary identity (conflict key).
            primary_id: Primary identity to link to.
            primary_username: Primary identity's username.
        """
        stmt = build_upsert(
            db,
            ConfirmedLink,
            {
                "secondary_id": secondary_id,
                "primary_id": primary_id,
                "primary_username": primary_username,
            },
            conflict_key="secondary_id",
            update_columns=("primary_id", "primary_username"),
        )
        await db.execute(stmt)

    @staticmethod
    async def delete_by_identity(db: AsyncSession, identity: uuid.UUID) -> int:
        """Delete every link naming the identity on either side.

        Deleting a link that does not exist is a no-op.

        Args:
            db: Async database session.
            identity: Either a secondary or a primary identity.

        Returns:
            Number of deleted rows.
        """
        stmt = delete(ConfirmedLink).where(
            or_(
                ConfirmedLink.secondary_id == identity,
                ConfirmedLink.primary_id == identity,
            )
        )
        result = await db.execute(stmt)
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count
