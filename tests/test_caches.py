"""
Tests for DocumentCache and ProjectionCache.
"""

import asyncio

import pytest

from chuk_mcp_patterns.cache import DocumentCache, ProjectionCache
from chuk_mcp_patterns.errors import NotFoundError
from chuk_mcp_patterns.models import Pattern, Projection


class GatedLoader:
    """Loader that blocks until released, counting calls per id."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.release = asyncio.Event()
        self.error: Exception | None = None

    async def __call__(self, id: str) -> Pattern:
        self.calls.append(id)
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return Pattern(id=id, version="v1", title=f"{id}-*")


class TestDocumentCache:
    """Tests for DocumentCache."""

    @pytest.mark.asyncio
    async def test_concurrent_gets_coalesce(self) -> None:
        """Concurrent misses share one loader call and one instance."""
        loader = GatedLoader()
        cache = DocumentCache(loader)

        tasks = [asyncio.create_task(cache.get("a")) for _ in range(3)]
        await asyncio.sleep(0)
        loader.release.set()
        results = await asyncio.gather(*tasks)

        assert loader.calls == ["a"]
        assert results[0] is results[1] is results[2]
        assert cache.peek("a") is results[0]

    @pytest.mark.asyncio
    async def test_different_ids_fetch_separately(self) -> None:
        loader = GatedLoader()
        loader.release.set()
        cache = DocumentCache(loader)

        a, b = await asyncio.gather(cache.get("a"), cache.get("b"))

        assert sorted(loader.calls) == ["a", "b"]
        assert a is not b

    @pytest.mark.asyncio
    async def test_failure_reaches_every_waiter(self) -> None:
        """All waiters see the loader's error and nothing is cached."""
        loader = GatedLoader()
        loader.error = NotFoundError("gone", pattern_id="a")
        cache = DocumentCache(loader)

        tasks = [asyncio.create_task(cache.get("a")) for _ in range(2)]
        await asyncio.sleep(0)
        loader.release.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert all(isinstance(r, NotFoundError) for r in results)
        assert "a" not in cache
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_pending_entry_cleared_after_settling(self) -> None:
        """A failed fetch does not block the next attempt."""
        loader = GatedLoader()
        loader.error = RuntimeError("boom")
        loader.release.set()
        cache = DocumentCache(loader)

        with pytest.raises(RuntimeError):
            await cache.get("a")

        loader.error = None
        pattern = await cache.get("a")
        assert pattern.id == "a"
        assert loader.calls == ["a", "a"]

    @pytest.mark.asyncio
    async def test_invalidate_while_in_flight(self) -> None:
        """An entry invalidated mid-fetch is not repopulated by that fetch."""
        loader = GatedLoader()
        cache = DocumentCache(loader)

        task = asyncio.create_task(cache.get("a"))
        await asyncio.sleep(0)
        cache.invalidate("a")
        loader.release.set()
        stale = await task

        assert stale.id == "a"
        assert "a" not in cache
        assert await cache.get("a") is not stale

    @pytest.mark.asyncio
    async def test_set_and_delete(self) -> None:
        """Registered instances are returned until deleted."""
        loader = GatedLoader()
        loader.release.set()
        cache = DocumentCache(loader)
        pattern = Pattern(id="a", version="v0", title="a-*")

        cache.set("a", pattern)
        assert await cache.get("a") is pattern
        assert loader.calls == []

        cache.delete("a")
        assert await cache.get("a") is not pattern

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_fetch(self) -> None:
        """Cancelling one waiter leaves the shared fetch running."""
        loader = GatedLoader()
        cache = DocumentCache(loader)

        owner = asyncio.create_task(cache.get("a"))
        await asyncio.sleep(0)
        waiter = asyncio.create_task(cache.get("a"))
        await asyncio.sleep(0)
        waiter.cancel()
        loader.release.set()

        pattern = await owner
        assert pattern.id == "a"
        assert waiter.cancelled()
        assert cache.peek("a") is pattern

    @pytest.mark.asyncio
    async def test_cancelled_first_caller_does_not_fail_joiners(self) -> None:
        """Waiters that joined a fetch still get its result if its starter is cancelled."""
        loader = GatedLoader()
        cache = DocumentCache(loader)

        first = asyncio.create_task(cache.get("a"))
        await asyncio.sleep(0)
        joiner = asyncio.create_task(cache.get("a"))
        await asyncio.sleep(0)
        first.cancel()
        await asyncio.sleep(0)
        loader.release.set()

        pattern = await joiner
        assert first.cancelled()
        assert pattern.id == "a"
        assert cache.peek("a") is pattern
        assert loader.calls == ["a"]

    @pytest.mark.asyncio
    async def test_set_during_fetch_wins(self) -> None:
        """A pattern registered while a fetch is in flight is what the waiters get."""
        loader = GatedLoader()
        cache = DocumentCache(loader)
        registered = Pattern(id="a", version="v2", title="a-*")

        task = asyncio.create_task(cache.get("a"))
        await asyncio.sleep(0)
        cache.set("a", registered)
        loader.release.set()

        assert await task is registered
        assert cache.peek("a") is registered


class FindCounter:
    """Store double answering find() only."""

    def __init__(self, titles: dict[str, str]):
        self.titles = titles
        self.calls = []

    async def find(self, options):
        from chuk_mcp_patterns.models import SavedObject

        self.calls.append(options)
        await asyncio.sleep(0)
        return [
            SavedObject(id=id, type=options.type, attributes={"title": title, "secret": "x"})
            for id, title in self.titles.items()
        ]


class TestProjectionCache:
    """Tests for ProjectionCache."""

    @pytest.mark.asyncio
    async def test_views_share_one_fetch(self) -> None:
        store = FindCounter({"a": "a-*", "b": "b-*"})
        cache = ProjectionCache(store)

        assert await cache.get_ids() == ["a", "b"]
        assert [t.title for t in await cache.get_titles()] == ["a-*", "b-*"]
        assert await cache.get_fields(["title"]) == [{"title": "a-*"}, {"title": "b-*"}]
        assert len(store.calls) == 1

    @pytest.mark.asyncio
    async def test_force_refresh_replaces_wholesale(self) -> None:
        store = FindCounter({"a": "a-*"})
        cache = ProjectionCache(store)
        await cache.get_ids()

        store.titles = {"c": "c-*"}

        assert await cache.get_ids() == ["a"]
        assert await cache.get_ids(force_refresh=True) == ["c"]
        assert len(store.calls) == 2

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_coalesce(self) -> None:
        store = FindCounter({"a": "a-*"})
        cache = ProjectionCache(store)

        await asyncio.gather(cache.get_ids(), cache.get_titles(), cache.get_fields(["id"]))

        assert len(store.calls) == 1

    @pytest.mark.asyncio
    async def test_title_always_requested(self) -> None:
        store = FindCounter({})
        cache = ProjectionCache(store, fields=["timeFieldName", "id"], per_page=25)

        await cache.get_ids()

        assert store.calls[0].fields == ["title", "timeFieldName"]
        assert store.calls[0].per_page == 25

    @pytest.mark.asyncio
    async def test_upsert_and_remove(self) -> None:
        """Local edits keep list views current without refetching."""
        store = FindCounter({"a": "a-*"})
        cache = ProjectionCache(store)

        # Nothing to update before the first fetch
        cache.upsert(Projection(id="z", attributes={"title": "z-*"}))
        assert not cache.loaded

        await cache.get_ids()
        cache.upsert(Projection(id="a", attributes={"title": "renamed-*", "fields": []}))
        cache.upsert(Projection(id="b", attributes={"title": "b-*"}))
        cache.remove("missing")

        rows = await cache.get_fields(["id", "title", "fields"])
        assert rows == [
            {"id": "a", "title": "renamed-*", "fields": None},
            {"id": "b", "title": "b-*", "fields": None},
        ]

        cache.remove("a")
        assert await cache.get_ids() == ["b"]
        assert len(store.calls) == 1

    @pytest.mark.asyncio
    async def test_clear_forces_fetch(self) -> None:
        store = FindCounter({"a": "a-*"})
        cache = ProjectionCache(store)
        await cache.get_ids()

        cache.clear()
        await cache.get_ids()

        assert len(store.calls) == 2
