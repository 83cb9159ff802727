"""Player link entry point.

Wires settings, logging, the database backend and the janitor together
for a host process (game proxy, login server, ...):

    async with player_link_lifespan() as runtime:
        code = await runtime.store.create_link_request(java_id, "Alice", "AliceBE")
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import structlog

from playerlink.core.config import Settings, get_settings
from playerlink.core.logging import configure_logging
from playerlink.services.player_link import DatabasePlayerLink
from playerlink.services.request_janitor import LinkRequestJanitor

logger = structlog.get_logger()


@dataclass(frozen=True)
class PlayerLinkRuntime:
    """Running player link components.

    Attributes:
        store: Database-backed player link store.
        janitor: Background sweeper for expired link requests.
    """

    store: DatabasePlayerLink
    janitor: LinkRequestJanitor


def create_player_link(settings: Settings | None = None) -> PlayerLinkRuntime:
    """Create (but do not start) the player link components.

    Args:
        settings: Settings to use; defaults to the cached environment settings.

    Returns:
        PlayerLinkRuntime with an unloaded store and a stopped janitor.
    """
    settings = settings or get_settings()
    store = DatabasePlayerLink.from_settings(settings)
    janitor = LinkRequestJanitor(
        store,
        interval_seconds=settings.cleanup_interval_seconds,
        timeout=settings.link_request_timeout_seconds,
    )
    return PlayerLinkRuntime(store=store, janitor=janitor)


@asynccontextmanager
async def player_link_lifespan(
    settings: Settings | None = None,
) -> AsyncIterator[PlayerLinkRuntime]:
    """Start player linking for the duration of the context.

    On enter: configure logging, create tables, start the janitor.
    On exit, including a failed load: stop the janitor, close the connection
    pool.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, json_logs=settings.log_json)

    runtime = create_player_link(settings)
    try:
        await runtime.store.load()
        runtime.janitor.start()
        logger.info("player_link_started", environment=settings.environment)
        yield runtime
    finally:
        await runtime.janitor.stop()
        await runtime.store.stop()
        logger.info("player_link_stopped")
