"""Tests for ConfirmedLinkRepository.

Covers lookup by either identity, idempotent upsert keyed on the secondary
identity, and delete-by-either-identity.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from playerlink.models import ConfirmedLink
from playerlink.repositories.confirmed_link_repository import ConfirmedLinkRepository
from tests.conftest import (
    OTHER_PRIMARY_ID,
    OTHER_SECONDARY_ID,
    PRIMARY_ID,
    SECONDARY_ID,
)


async def _count_links(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(ConfirmedLink))
    return int(result.scalar_one())


class TestUpsert:
    """Test ConfirmedLinkRepository.upsert()."""

    async def test_creates_link(self, db_session: AsyncSession):
        await ConfirmedLinkRepository.upsert(
            db_session,
            secondary_id=SECONDARY_ID,
            primary_id=PRIMARY_ID,
            primary_username="Alice",
        )

        link = await ConfirmedLinkRepository.get_by_secondary_id(
            db_session, SECONDARY_ID
        )
        assert link is not None
        assert link.secondary_id == SECONDARY_ID
        assert link.primary_id == PRIMARY_ID
        assert link.primary_username == "Alice"

    async def test_same_arguments_twice_leaves_one_row(self, db_session: AsyncSession):
        for _ in range(2):
            await ConfirmedLinkRepository.upsert(
                db_session,
                secondary_id=SECONDARY_ID,
                primary_id=PRIMARY_ID,
                primary_username="Alice",
            )

        assert await _count_links(db_session) == 1

    async def test_conflict_overwrites_primary(self, db_session: AsyncSession):
        """A new link for the same secondary identity replaces the old one."""
        await ConfirmedLinkRepository.upsert(
            db_session,
            secondary_id=SECONDARY_ID,
            primary_id=PRIMARY_ID,
            primary_username="Alice",
        )
        await ConfirmedLinkRepository.get_by_secondary_id(db_session, SECONDARY_ID)

        await ConfirmedLinkRepository.upsert(
            db_session,
            secondary_id=SECONDARY_ID,
            primary_id=OTHER_PRIMARY_ID,
            primary_username="Bob",
        )

        link = await ConfirmedLinkRepository.get_by_secondary_id(
            db_session, SECONDARY_ID
        )
        assert link is not None
        assert link.primary_id == OTHER_PRIMARY_ID
        assert link.primary_username == "Bob"
        assert await _count_links(db_session) == 1


class TestIsLinked:
    """Test ConfirmedLinkRepository.is_linked()."""

    async def test_matches_secondary_and_primary(self, db_session: AsyncSession):
        await ConfirmedLinkRepository.upsert(
            db_session,
            secondary_id=SECONDARY_ID,
            primary_id=PRIMARY_ID,
            primary_username="Alice",
        )

        assert await ConfirmedLinkRepository.is_linked(db_session, SECONDARY_ID)
        assert await ConfirmedLinkRepository.is_linked(db_session, PRIMARY_ID)

    async def test_unknown_identity(self, db_session: AsyncSession):
        assert not await ConfirmedLinkRepository.is_linked(db_session, PRIMARY_ID)


class TestGetBySecondaryId:
    """Test ConfirmedLinkRepository.get_by_secondary_id()."""

    async def test_does_not_match_primary_identity(self, db_session: AsyncSession):
        await ConfirmedLinkRepository.upsert(
            db_session,
            secondary_id=SECONDARY_ID,
            primary_id=PRIMARY_ID,
            primary_username="Alice",
        )

        assert (
            await ConfirmedLinkRepository.get_by_secondary_id(db_session, PRIMARY_ID)
            is None
        )


class TestDeleteByIdentity:
    """Test ConfirmedLinkRepository.delete_by_identity()."""

    async def _seed(self, db: AsyncSession) -> None:
        await ConfirmedLinkRepository.upsert(
            db,
            secondary_id=SECONDARY_ID,
            primary_id=PRIMARY_ID,
            primary_username="Alice",
        )
        await ConfirmedLinkRepository.upsert(
            db,
            secondary_id=OTHER_SECONDARY_ID,
            primary_id=OTHER_PRIMARY_ID,
            primary_username="Bob",
        )

    async def test_delete_by_secondary(self, db_session: AsyncSession):
        await self._seed(db_session)

        removed = await ConfirmedLinkRepository.delete_by_identity(
            db_session, SECONDARY_ID
        )

        assert removed == 1
        assert not await ConfirmedLinkRepository.is_linked(db_session, PRIMARY_ID)
        assert await ConfirmedLinkRepository.is_linked(db_session, OTHER_PRIMARY_ID)

    async def test_delete_by_primary(self, db_session: AsyncSession):
        await self._seed(db_session)

        removed = await ConfirmedLinkRepository.delete_by_identity(
            db_session, PRIMARY_ID
        )

        assert removed == 1
        assert not await ConfirmedLinkRepository.is_linked(db_session, SECONDARY_ID)

    async def test_missing_link_is_noop(self, db_session: AsyncSession):
        removed = await ConfirmedLinkRepository.delete_by_identity(
            db_session, SECONDARY_ID
        )
        assert removed == 0
