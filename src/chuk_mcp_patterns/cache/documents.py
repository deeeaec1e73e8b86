"""
Document cache - one live Pattern instance per id.

This is a correctness cache, not a memory-bounded one: entries stay until
they are invalidated or deleted, so every caller that asks for the same id
shares the same object instead of holding divergent copies.

Concurrent misses for the same id share a single fetch. The first caller
starts a fetch task and registers it in the pending table; every caller,
the first included, awaits that task through asyncio.shield, so cancelling
one caller never cancels the fetch for the others. The pending entry is
cleared as soon as the fetch settles.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from chuk_mcp_patterns.models.pattern import Pattern

logger = logging.getLogger(__name__)

PatternLoader = Callable[[str], Awaitable[Pattern]]


class DocumentCache:
    """
    Identity-stable cache of fully hydrated patterns.

    The cache owns the canonical instance for each id; get() hands out a
    shared reference that stays canonical until the entry is removed.
    """

    def __init__(self, loader: PatternLoader):
        """
        Initialize the cache.

        Args:
            loader: Async function fetching and hydrating a pattern by id
        """
        self._loader = loader
        self._entries: dict[str, Pattern] = {}
        self._pending: dict[str, asyncio.Task[Pattern]] = {}

    def __contains__(self, id: object) -> bool:
        return id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, id: str) -> Pattern:
        """
        Get the cached pattern, fetching it on a miss.

        Raises whatever the loader raises; every caller waiting on the same
        fetch receives the same exception and nothing is cached.
        """
        if id in self._entries:
            return self._entries[id]

        pending = self._pending.get(id)
        if pending is not None:
            logger.debug("Joining in-flight fetch for %s", id)
            return await asyncio.shield(pending)

        logger.debug("Cache miss for %s", id)
        task = asyncio.create_task(self._fetch(id))
        self._pending[id] = task
        return await asyncio.shield(task)

    def peek(self, id: str) -> Pattern | None:
        """Get a cached pattern without fetching."""
        return self._entries.get(id)

    def set(self, id: str, pattern: Pattern) -> None:
        """Register a pattern as the canonical instance for id."""
        self._pending.pop(id, None)
        self._entries[id] = pattern

    def invalidate(self, id: str) -> None:
        """Drop the entry so the next get() fetches again."""
        self._entries.pop(id, None)
        self._pending.pop(id, None)

    def delete(self, id: str) -> None:
        """Drop the entry after the document was deleted from the store."""
        self.invalidate(id)

    def clear(self) -> None:
        self._entries.clear()
        self._pending.clear()

    async def _fetch(self, id: str) -> Pattern:
        task = asyncio.current_task()
        try:
            pattern = await self._loader(id)
        except BaseException:
            self._release(id, task)
            raise

        if self._release(id, task):
            self._entries[id] = pattern
            return pattern
        # Invalidated while in flight: not repopulated. If set() registered a
        # newer instance meanwhile, waiters get that one.
        return self._entries.get(id, pattern)

    def _release(self, id: str, task: asyncio.Task[Pattern] | None) -> bool:
        """Clear the pending entry if it is still ours."""
        if self._pending.get(id) is task:
            del self._pending[id]
            return True
        return False
