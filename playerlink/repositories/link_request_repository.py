"""Repository for PendingLinkRequest operations.

One pending request per primary username; a new request replaces the old
one. Rows are consumed by verification or swept once expired.
"""

import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from playerlink.core.database import build_upsert
from playerlink.models.pending_request import PendingLinkRequest


class LinkRequestRepository:
    """Stateless repository for the linked_player_requests table.

    All methods are static; no instance state.
    """

    @staticmethod
    async def upsert(
        db: AsyncSession,
        *,
        primary_username: str,
        primary_id: uuid.UUID,
        link_code: str,
        secondary_username: str,
        requested_at: int,
    ) -> None:
        """Store a link request, replacing any request for the same username.

        Args:
            db: Async database session.
            primary_username: Primary username (conflict key).
            primary_id: Primary identity starting the request.
            link_code: One-time code.
            secondary_username: Claimed secondary username.
            requested_at: Creation time in seconds since the epoch.
        """
        stmt = build_upsert(
            db,
            PendingLinkRequest,
            {
                "primary_username": primary_username,
                "primary_id": primary_id,
                "link_code": link_code,
                "secondary_username": secondary_username,
                "requested_at": requested_at,
            },
            conflict_key="primary_username",
            update_columns=(
                "primary_id",
                "link_code",
                "secondary_username",
                "requested_at",
            ),
        )
        await db.execute(stmt)

    @staticmethod
    async def get(db: AsyncSession, primary_username: str) -> PendingLinkRequest | None:
        """Look up the pending request for a primary username.

        Args:
            db: Async database session.
            primary_username: Primary username.

        Returns:
            PendingLinkRequest if found, None otherwise.
        """
        stmt = (
            select(PendingLinkRequest)
            .where(PendingLinkRequest.primary_username == primary_username)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def delete(db: AsyncSession, primary_username: str) -> int:
        """Delete the request for a primary username.

        Args:
            db: Async database session.
            primary_username: Primary username.

        Returns:
            Number of deleted rows (0 if there was no request).
        """
        stmt = delete(PendingLinkRequest).where(
            PendingLinkRequest.primary_username == primary_username
        )
        result = await db.execute(stmt)
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count

    @staticmethod
    async def consume(
        db: AsyncSession,
        primary_username: str,
        *,
        link_code: str,
        requested_at: int,
    ) -> int:
        """Delete a request only if it is still the one that was read.

        A request replaced in the meantime carries a new code and timestamp,
        so it does not match and survives.

        Args:
            db: Async database session.
            primary_username: Primary username.
            link_code: Code of the request as read.
            requested_at: Timestamp of the request as read.

        Returns:
            Number of deleted rows (0 if the request is gone or was replaced).
        """
        stmt = delete(PendingLinkRequest).where(
            PendingLinkRequest.primary_username == primary_username,
            PendingLinkRequest.link_code == link_code,
            PendingLinkRequest.requested_at == requested_at,
        )
        result = await db.execute(stmt)
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count

    @staticmethod
    async def delete_expired(db: AsyncSession, *, now: int, timeout: int) -> int:
        """Delete all requests older than the timeout (periodic cleanup).

        Args:
            db: Async database session.
            now: Current time in seconds since the epoch.
            timeout: Request lifetime in seconds.

        Returns:
            Number of deleted rows.
        """
        stmt = delete(PendingLinkRequest).where(
            PendingLinkRequest.requested_at < now - timeout
        )
        result = await db.execute(stmt)
        row_count: int = result.rowcount  # type: ignore[attr-defined]
        return row_count
