"""Expired link request janitor.

asyncio background task that sweeps expired link requests on a fixed
interval. Verification already consumes the requests it inspects; the
janitor only clears requests nobody ever tried to verify.
"""

import asyncio
import contextlib
import logging
from datetime import UTC, datetime

from playerlink.core.errors import StorageError
from playerlink.services.player_link import PlayerLinkStore

logger = logging.getLogger(__name__)

# Default interval: 3 minutes
DEFAULT_INTERVAL_SECONDS = 3 * 60


class LinkRequestJanitor:
    """Background worker that periodically deletes expired link requests.

    Lifecycle:
    - start() creates an asyncio task that runs the sweep loop.
    - stop() cancels the task and waits for graceful shutdown.
    - sweep() executes a single pass (also used by the loop).

    Args:
        store: Player link store to sweep.
        interval_seconds: Seconds between sweeps.
        timeout: Request lifetime in seconds; None uses the store's own.
    """

    def __init__(
        self,
        store: PlayerLinkStore,
        *,
        interval_seconds: int = DEFAULT_INTERVAL_SECONDS,
        timeout: int | None = None,
    ) -> None:
        self._store = store
        self._interval_seconds = interval_seconds
        self._timeout = timeout
        self._task: asyncio.Task[None] | None = None
        self._last_run_at: datetime | None = None
        self._last_removed = 0
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the background task is currently active."""
        return self._running and self._task is not None and not self._task.done()

    @property
    def last_run_at(self) -> datetime | None:
        """Timestamp of the most recent completed sweep."""
        return self._last_run_at

    @property
    def last_removed(self) -> int:
        """Number of requests removed by the most recent completed sweep."""
        return self._last_removed

    def start(self) -> None:
        """Start the background sweep loop.

        Creates an asyncio task. No-op if already running.
        Must be called from an async context (running event loop).
        """
        if self.is_running:
            logger.warning("Link request janitor already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "Link request janitor started (interval=%ds)", self._interval_seconds
        )

    async def stop(self) -> None:
        """Stop the background sweep loop.

        Cancels the task and waits for it to finish.
        """
        self._running = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        logger.info("Link request janitor stopped")

    async def sweep(self, now: int | None = None) -> int:
        """Delete expired link requests once.

        Storage failures are logged and swallowed; the next sweep retries.

        Args:
            now: Current time in seconds since the epoch; None uses the
                store's clock.

        Returns:
            Number of requests removed (0 if the sweep failed).
        """
        try:
            removed = await self._store.clean_expired_requests(
                now=now, timeout=self._timeout
            )
        except StorageError as exc:
            logger.error("Link request sweep failed: %s", exc.message)
            return 0

        self._last_run_at = datetime.now(UTC)
        self._last_removed = removed
        if removed:
            logger.info("Removed %d expired link requests", removed)
        return removed

    async def _run_loop(self) -> None:
        """Background loop: sweep → sleep → repeat."""
        try:
            while self._running:
                try:
                    await self.sweep()
                except Exception:  # noqa: BLE001
                    logger.exception("Error in link request sweep")
                await asyncio.sleep(self._interval_seconds)
        except asyncio.CancelledError:
            logger.debug("Link request sweep loop cancelled")
            raise
