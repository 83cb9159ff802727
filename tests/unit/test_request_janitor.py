"""Tests for the expired link request janitor.

Lifecycle (start/stop/sweep) against a mocked store, plus one sweep
against a real database-backed store.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from playerlink.core.errors import StorageError
from playerlink.services.player_link import DatabasePlayerLink
from playerlink.services.request_janitor import (
    DEFAULT_INTERVAL_SECONDS,
    LinkRequestJanitor,
)
from tests.conftest import (
    OTHER_PRIMARY_ID,
    PRIMARY_ID,
    TEST_NOW,
    TEST_TIMEOUT,
    FakeClock,
    fetch_request,
)


def _mock_store(removed: int = 0) -> MagicMock:
    store = MagicMock()
    store.clean_expired_requests = AsyncMock(return_value=removed)
    return store


class TestJanitorLifecycle:
    """Tests for LinkRequestJanitor start/stop."""

    async def test_start_sets_running(self) -> None:
        janitor = LinkRequestJanitor(_mock_store(), interval_seconds=60)

        with patch.object(janitor, "_run_loop", new_callable=AsyncMock):
            janitor.start()
            assert janitor.is_running is True
            await janitor.stop()

    async def test_stop_clears_running(self) -> None:
        janitor = LinkRequestJanitor(_mock_store(), interval_seconds=60)

        with patch.object(janitor, "_run_loop", new_callable=AsyncMock):
            janitor.start()
            await janitor.stop()
            assert janitor.is_running is False

    async def test_start_is_idempotent(self) -> None:
        janitor = LinkRequestJanitor(_mock_store(), interval_seconds=60)

        with patch.object(janitor, "_run_loop", new_callable=AsyncMock):
            janitor.start()
            janitor.start()
            assert janitor.is_running is True
            await janitor.stop()

    async def test_stop_without_start_is_safe(self) -> None:
        janitor = LinkRequestJanitor(_mock_store())
        await janitor.stop()

    async def test_default_interval(self) -> None:
        janitor = LinkRequestJanitor(_mock_store())
        assert janitor._interval_seconds == DEFAULT_INTERVAL_SECONDS

    async def test_loop_sweeps_until_stopped(self) -> None:
        store = _mock_store()
        janitor = LinkRequestJanitor(store, interval_seconds=3600)

        janitor.start()
        for _ in range(10):
            await asyncio.sleep(0)
            if store.clean_expired_requests.await_count:
                break
        await janitor.stop()

        store.clean_expired_requests.assert_awaited_once()
        assert janitor.is_running is False


class TestJanitorSweep:
    """Tests for LinkRequestJanitor.sweep()."""

    async def test_sweep_passes_now_and_timeout(self) -> None:
        store = _mock_store(removed=3)
        janitor = LinkRequestJanitor(store, timeout=42)

        removed = await janitor.sweep(now=TEST_NOW)

        assert removed == 3
        store.clean_expired_requests.assert_awaited_once_with(
            now=TEST_NOW, timeout=42
        )

    async def test_sweep_records_last_run(self) -> None:
        janitor = LinkRequestJanitor(_mock_store(removed=2))
        assert janitor.last_run_at is None

        await janitor.sweep()

        assert janitor.last_run_at is not None
        assert janitor.last_removed == 2

    async def test_sweep_swallows_storage_error(self) -> None:
        store = MagicMock()
        store.clean_expired_requests = AsyncMock(
            side_effect=StorageError("clean_expired_requests")
        )
        janitor = LinkRequestJanitor(store)

        removed = await janitor.sweep()

        assert removed == 0
        assert janitor.last_run_at is None

    async def test_sweep_against_database(
        self,
        player_link: DatabasePlayerLink,
        session_factory: async_sessionmaker[AsyncSession],
        clock: FakeClock,
    ) -> None:
        await player_link.create_link_request(PRIMARY_ID, "Alice", "AliceBE")
        clock.advance(TEST_TIMEOUT)
        await player_link.create_link_request(OTHER_PRIMARY_ID, "Bob", "BobBE")
        clock.advance(1)
        janitor = LinkRequestJanitor(player_link)

        removed = await janitor.sweep()

        assert removed == 1
        assert await fetch_request(session_factory, "Alice") is None
        assert await fetch_request(session_factory, "Bob") is not None
