"""Player link store: the public contract callers depend on.

PlayerLinkStore is the capability interface; DatabasePlayerLink implements
it over a relational database. Every operation is a coroutine that opens
its own session, commits on success and releases the connection on every
exit path. Storage faults are logged here, at the point of origin, and
re-raised as StorageError. Verification outcomes are plain return values.
"""

import contextlib
import time
import uuid
from collections.abc import AsyncIterator, Callable
from typing import Protocol

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from playerlink.core.config import Settings
from playerlink.core.database import create_engine, create_session_factory, create_tables
from playerlink.core.errors import InvalidUsernameError, StorageError
from playerlink.models import USERNAME_MAX_LENGTH, ConfirmedLink
from playerlink.repositories.confirmed_link_repository import ConfirmedLinkRepository
from playerlink.repositories.link_request_repository import LinkRequestRepository
from playerlink.services import link_verification
from playerlink.services.link_code import DEFAULT_LINK_CODE_LENGTH
from playerlink.services.link_verification import LinkRequestResult

logger = structlog.get_logger()

DEFAULT_LINK_REQUEST_TIMEOUT_SECONDS = 300


def _epoch_seconds() -> int:
    return int(time.time())


def _check_username(field: str, value: str) -> None:
    if not value or len(value) > USERNAME_MAX_LENGTH:
        raise InvalidUsernameError(field, value, USERNAME_MAX_LENGTH)


class PlayerLinkStore(Protocol):
    """Operations every player link backend provides."""

    async def is_linked(self, identity: uuid.UUID) -> bool: ...

    async def get_link(self, secondary_id: uuid.UUID) -> ConfirmedLink | None: ...

    async def link_player(
        self,
        secondary_id: uuid.UUID,
        primary_id: uuid.UUID,
        primary_username: str,
    ) -> None: ...

    async def unlink_player(self, identity: uuid.UUID) -> None: ...

    async def create_link_request(
        self,
        primary_id: uuid.UUID,
        primary_username: str,
        secondary_username: str,
    ) -> str: ...

    async def verify_link_request(
        self,
        secondary_id: uuid.UUID,
        primary_username: str,
        secondary_username: str,
        code: str,
        now: int | None = None,
    ) -> LinkRequestResult: ...

    async def clean_expired_requests(
        self,
        now: int | None = None,
        timeout: int | None = None,
    ) -> int: ...


class DatabasePlayerLink:
    """PlayerLinkStore backed by a SQLAlchemy async engine.

    The backend owns its engine (and therefore the connection pool) and the
    session factory bound to it. Use load() once at startup and stop() at
    shutdown.

    Args:
        engine: Async engine for DB access.
        link_request_timeout: Seconds a link request stays valid.
        link_code_length: Digits per generated link code.
        clock: Returns the current time in seconds since the epoch.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        link_request_timeout: int = DEFAULT_LINK_REQUEST_TIMEOUT_SECONDS,
        link_code_length: int = DEFAULT_LINK_CODE_LENGTH,
        clock: Callable[[], int] = _epoch_seconds,
    ) -> None:
        self._engine = engine
        self._session_factory: async_sessionmaker[AsyncSession] = (
            create_session_factory(engine)
        )
        self._link_request_timeout = link_request_timeout
        self._link_code_length = link_code_length
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabasePlayerLink":
        """Build a backend (engine, pool and session factory) from settings."""
        return cls(
            create_engine(settings),
            link_request_timeout=settings.link_request_timeout_seconds,
            link_code_length=settings.link_code_length,
        )

    @property
    def link_request_timeout(self) -> int:
        """Seconds a link request stays valid."""
        return self._link_request_timeout

    async def load(self) -> None:
        """Create the link tables if needed.

        Raises:
            StorageError: If the database cannot be reached or initialized.
        """
        logger.info("database_connecting", url=self._engine.url.render_as_string())
        try:
            await create_tables(self._engine)
        except SQLAlchemyError as exc:
            logger.error("database_load_failed", error=str(exc))
            raise StorageError("load") from exc
        logger.info("database_connected")

    async def stop(self) -> None:
        """Close every pooled connection."""
        await self._engine.dispose()
        logger.info("database_closed")

    @contextlib.asynccontextmanager
    async def _session(self, operation: str, key: object) -> AsyncIterator[AsyncSession]:
        """Scoped session: commit on success, rollback and wrap on failure."""
        async with self._session_factory() as db:
            try:
                yield db
                await db.commit()
            except SQLAlchemyError as exc:
                # A dead connection can fail the rollback too
                with contextlib.suppress(SQLAlchemyError):
                    await db.rollback()
                logger.error(
                    "storage_operation_failed",
                    operation=operation,
                    key=str(key),
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                raise StorageError(operation, key) from exc

    async def is_linked(self, identity: uuid.UUID) -> bool:
        """Check whether an identity is on either side of a link."""
        async with self._session("is_linked", identity) as db:
            return await ConfirmedLinkRepository.is_linked(db, identity)

    async def get_link(self, secondary_id: uuid.UUID) -> ConfirmedLink | None:
        """Fetch the link for a secondary identity, or None."""
        async with self._session("get_link", secondary_id) as db:
            return await ConfirmedLinkRepository.get_by_secondary_id(db, secondary_id)

    async def link_player(
        self,
        secondary_id: uuid.UUID,
        primary_id: uuid.UUID,
        primary_username: str,
    ) -> None:
        """Link a secondary identity to a primary one, replacing any old link."""
        _check_username("primary_username", primary_username)
        async with self._session("link_player", secondary_id) as db:
            await ConfirmedLinkRepository.upsert(
                db,
                secondary_id=secondary_id,
                primary_id=primary_id,
                primary_username=primary_username,
            )
        logger.info(
            "player_linked",
            secondary_id=str(secondary_id),
            primary_id=str(primary_id),
        )

    async def unlink_player(self, identity: uuid.UUID) -> None:
        """Remove any link naming the identity on either side."""
        async with self._session("unlink_player", identity) as db:
            removed = await ConfirmedLinkRepository.delete_by_identity(db, identity)
        logger.info("player_unlinked", identity=str(identity), removed=removed)

    async def create_link_request(
        self,
        primary_id: uuid.UUID,
        primary_username: str,
        secondary_username: str,
    ) -> str:
        """Start a link request and return the code to deliver to the player."""
        _check_username("primary_username", primary_username)
        _check_username("secondary_username", secondary_username)
        async with self._session("create_link_request", primary_username) as db:
            return await link_verification.create_link_request(
                db,
                primary_id=primary_id,
                primary_username=primary_username,
                secondary_username=secondary_username,
                now=self._clock(),
                code_length=self._link_code_length,
            )

    async def verify_link_request(
        self,
        secondary_id: uuid.UUID,
        primary_username: str,
        secondary_username: str,
        code: str,
        now: int | None = None,
    ) -> LinkRequestResult:
        """Verify a submitted link code; see link_verification for the rules."""
        async with self._session("verify_link_request", primary_username) as db:
            return await link_verification.verify_link_request(
                db,
                secondary_id=secondary_id,
                primary_username=primary_username,
                secondary_username=secondary_username,
                code=code,
                now=self._clock() if now is None else now,
                timeout=self._link_request_timeout,
            )

    async def clean_expired_requests(
        self,
        now: int | None = None,
        timeout: int | None = None,
    ) -> int:
        """Delete every link request older than the timeout.

        Returns:
            Number of requests removed.
        """
        now = self._clock() if now is None else now
        timeout = self._link_request_timeout if timeout is None else timeout
        async with self._session("clean_expired_requests", None) as db:
            return await LinkRequestRepository.delete_expired(
                db, now=now, timeout=timeout
            )
