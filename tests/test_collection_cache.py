import asyncio
from unittest.mock import AsyncMock

import pytest

from exam_wallet.core.collection_cache import CacheState, CollectionCache
from exam_wallet.core.errors import RemoteError


def _make_cache(clock, loader=None, fallback=None):
    loader = loader or AsyncMock(return_value=["a", "b"])
    cache = CollectionCache("things", loader=loader, fallback=fallback, freshness_seconds=3600, clock=clock)
    return cache, loader


class TestFreshness:
    async def test_second_fetch_within_window_skips_remote(self, clock) -> None:
        cache, loader = _make_cache(clock)

        first = await cache.fetch()
        clock.advance(3599)
        second = await cache.fetch()

        assert loader.await_count == 1
        assert second is first
        assert second == ["a", "b"]

    async def test_fetch_after_window_goes_to_remote(self, clock) -> None:
        cache, loader = _make_cache(clock)

        await cache.fetch()
        clock.advance(3600)
        await cache.fetch()

        assert loader.await_count == 2

    async def test_force_ignores_window(self, clock) -> None:
        cache, loader = _make_cache(clock)

        await cache.fetch()
        await cache.fetch(force=True)

        assert loader.await_count == 2

    async def test_invalidate(self, clock) -> None:
        cache, loader = _make_cache(clock)

        await cache.fetch()
        cache.invalidate()
        await cache.fetch()

        assert loader.await_count == 2

    async def test_success_replaces_items_wholesale(self, clock) -> None:
        loader = AsyncMock(side_effect=[["a", "b", "c"], ["c"]])
        cache, _ = _make_cache(clock, loader)

        await cache.fetch()
        await cache.fetch(force=True)

        assert cache.items == ["c"]
        assert cache.last_fetched == clock.now


class TestConcurrentFetch:
    async def test_fetch_while_loading_does_not_call_remote(self, clock) -> None:
        release = asyncio.Event()

        async def slow_loader():
            await release.wait()
            return ["x"]

        loader = AsyncMock(side_effect=slow_loader)
        cache, _ = _make_cache(clock, loader)

        pending = asyncio.ensure_future(cache.fetch())
        await asyncio.sleep(0)
        assert cache.state is CacheState.LOADING

        during = await cache.fetch(force=True)
        release.set()
        after = await pending

        assert loader.await_count == 1
        assert during == []
        assert after == ["x"]
        assert cache.state is CacheState.READY


class TestFailure:
    async def test_failure_keeps_previous_items(self, clock) -> None:
        loader = AsyncMock(side_effect=[["a"], RemoteError("boom", status=500)])
        cache, _ = _make_cache(clock, loader, fallback=lambda: ["seed"])

        await cache.fetch()
        stamped = cache.last_fetched
        clock.advance(4000)
        with pytest.raises(RemoteError, match="boom"):
            await cache.fetch()

        assert cache.items == ["a"]
        assert cache.last_fetched == stamped
        assert cache.state is CacheState.ERROR
        assert not cache.loading

    async def test_failure_on_empty_cache_installs_fallback(self, clock) -> None:
        loader = AsyncMock(side_effect=RemoteError("offline"))
        cache, _ = _make_cache(clock, loader, fallback=lambda: ["seed-1", "seed-2"])

        with pytest.raises(RemoteError):
            await cache.fetch()

        assert cache.items == ["seed-1", "seed-2"]
        assert cache.last_fetched == clock.now
        assert isinstance(cache.error, RemoteError)

        # fallback counts as fresh, no retry inside the window
        assert await cache.fetch() == ["seed-1", "seed-2"]
        assert loader.await_count == 1

    async def test_failure_without_fallback_stays_empty(self, clock) -> None:
        cache, _ = _make_cache(clock, AsyncMock(side_effect=RemoteError("offline")))

        with pytest.raises(RemoteError):
            await cache.fetch()

        assert cache.items == []
        assert cache.last_fetched is None

    async def test_other_errors_are_wrapped(self, clock) -> None:
        cache, _ = _make_cache(clock, AsyncMock(side_effect=KeyError("id")))

        with pytest.raises(RemoteError) as info:
            await cache.fetch()

        assert isinstance(info.value.__cause__, KeyError)

    async def test_success_clears_error(self, clock) -> None:
        loader = AsyncMock(side_effect=[RemoteError("offline"), ["a"]])
        cache, _ = _make_cache(clock, loader)

        with pytest.raises(RemoteError):
            await cache.fetch()
        await cache.fetch()

        assert cache.error is None
        assert cache.state is CacheState.READY


class TestMutations:
    async def test_patch_keeps_fetch_timestamp(self, clock) -> None:
        cache, _ = _make_cache(clock)
        await cache.fetch()
        stamped = cache.last_fetched
        clock.advance(10)

        updated = cache.patch(lambda item: item == "b", lambda item: item.upper())

        assert updated == 1
        assert cache.items == ["a", "B"]
        assert cache.last_fetched == stamped

    async def test_remove_and_append_mutate_in_place(self, clock) -> None:
        cache, _ = _make_cache(clock)
        items = await cache.fetch()

        cache.append("c")
        removed = cache.remove(lambda item: item == "a")

        assert removed == 1
        assert items is cache.items
        assert items == ["b", "c"]

    def test_initial_state(self, clock) -> None:
        cache, _ = _make_cache(clock)

        assert cache.state is CacheState.EMPTY
        assert not cache.is_fresh()
        stats = cache.get_stats()
        assert stats["state"] == "empty"
        assert stats["total_items"] == 0
        assert stats["last_fetched"] is None
