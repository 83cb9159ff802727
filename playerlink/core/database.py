"""Async database engine, session factory and dialect helpers.

The engine and session factory are built explicitly and handed to the
player link backend, which owns them; there is no module-level engine.
Connection pooling is SQLAlchemy's.
"""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import Insert
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from playerlink.core.config import Settings
from playerlink.core.errors import StorageError
from playerlink.models import Base


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database."""
    return create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine.

    expire_on_commit is off so rows returned by an operation stay readable
    after its session has closed.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all player link tables if they do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)


def build_upsert(
    db: AsyncSession,
    model: type[Base],
    values: dict[str, Any],
    *,
    conflict_key: str,
    update_columns: Iterable[str],
) -> Insert:
    """Build an insert-or-update statement for the session's dialect.

    MySQL gets ``ON DUPLICATE KEY UPDATE``; PostgreSQL and SQLite get
    ``ON CONFLICT (conflict_key) DO UPDATE``. Either way the row is written
    atomically by the database, so concurrent upserts on the same key never
    leave a torn row.

    Args:
        db: Session the statement will be executed on.
        model: ORM model to insert into.
        values: Column values for the new row.
        conflict_key: Primary key column that identifies an existing row.
        update_columns: Columns overwritten when the row already exists.

    Returns:
        Dialect-specific INSERT statement.

    Raises:
        StorageError: If the dialect has no supported upsert form.
    """
    dialect = db.get_bind().dialect.name
    columns = list(update_columns)

    if dialect in ("mysql", "mariadb"):
        mysql_stmt = mysql.insert(model).values(**values)
        return mysql_stmt.on_duplicate_key_update(
            {column: mysql_stmt.inserted[column] for column in columns}
        )

    if dialect == "postgresql":
        pg_stmt = postgresql.insert(model).values(**values)
        return pg_stmt.on_conflict_do_update(
            index_elements=[conflict_key],
            set_={column: pg_stmt.excluded[column] for column in columns},
        )

    if dialect == "sqlite":
        sqlite_stmt = sqlite.insert(model).values(**values)
        return sqlite_stmt.on_conflict_do_update(
            index_elements=[conflict_key],
            set_={column: sqlite_stmt.excluded[column] for column in columns},
        )

    raise StorageError("upsert", key=dialect)
