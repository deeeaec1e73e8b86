"""
Projection cache - lightweight list views over all patterns.

get_ids(), get_titles() and get_fields() are three views over one bulk
fetch of (id, attribute subset) records. Absent a forced refresh they
cost at most one store round-trip between them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from chuk_mcp_patterns.constants import DEFAULT_PER_PAGE, DEFAULT_PROJECTION_FIELDS, PATTERN_TYPE
from chuk_mcp_patterns.models.saved_object import FindOptions, PatternTitle, Projection
from chuk_mcp_patterns.store.base import VersionedStore

logger = logging.getLogger(__name__)


class ProjectionCache:
    """
    Shared cache of pattern projections.

    The projected attribute set is fixed when the cache is built and always
    includes 'title'. Names outside it resolve to None in get_fields().
    """

    def __init__(
        self,
        store: VersionedStore,
        type: str = PATTERN_TYPE,
        fields: list[str] | None = None,
        per_page: int = DEFAULT_PER_PAGE,
    ):
        """
        Initialize the cache.

        Args:
            store: Store to fetch projections from
            type: Type tag of the projected documents
            fields: Attributes to project (title is always added)
            per_page: Page-size ceiling for the bulk fetch
        """
        self.store = store
        self.type = type
        self.fields = ["title"] + [
            f for f in (fields or DEFAULT_PROJECTION_FIELDS) if f not in ("title", "id")
        ]
        self.per_page = per_page
        self._projections: list[Projection] | None = None
        self._pending: asyncio.Future[list[Projection]] | None = None

    @property
    def loaded(self) -> bool:
        return self._projections is not None

    async def refresh(self) -> list[Projection]:
        """
        Fetch all projections and replace the cache wholesale.

        Concurrent refreshes share one fetch.
        """
        if self._pending is not None:
            return await asyncio.shield(self._pending)

        future: asyncio.Future[list[Projection]] = asyncio.get_running_loop().create_future()
        self._pending = future
        try:
            saved_objects = await self.store.find(
                FindOptions(type=self.type, fields=list(self.fields), per_page=self.per_page)
            )
        except asyncio.CancelledError:
            self._pending = None
            future.cancel()
            raise
        except Exception as e:
            self._pending = None
            future.set_exception(e)
            future.exception()
            raise

        projections = [Projection.from_saved_object(s) for s in saved_objects]
        if self._pending is future:
            self._projections = projections
            self._pending = None
        logger.debug("Fetched %d projections", len(projections))
        future.set_result(projections)
        return projections

    async def get_ids(self, force_refresh: bool = False) -> list[str]:
        projections = await self._get(force_refresh)
        return [p.id for p in projections]

    async def get_titles(self, force_refresh: bool = False) -> list[PatternTitle]:
        projections = await self._get(force_refresh)
        return [PatternTitle(id=p.id, title=p.title or "") for p in projections]

    async def get_fields(
        self, field_names: list[str], force_refresh: bool = False
    ) -> list[dict[str, Any]]:
        """
        Get selected attributes for every pattern.

        Args:
            field_names: Names to return; 'id' gives the document id
            force_refresh: Fetch again even if the cache is populated

        Returns:
            One dict per pattern with exactly the requested names
        """
        projections = await self._get(force_refresh)
        return [
            {name: p.id if name == "id" else p.attributes.get(name) for name in field_names}
            for p in projections
        ]

    def upsert(self, projection: Projection) -> None:
        """
        Insert or replace one projection, reduced to the projected attributes.

        Does nothing until the first fetch has populated the cache.
        """
        if self._projections is None:
            return

        reduced = Projection(
            id=projection.id,
            attributes={k: v for k, v in projection.attributes.items() if k in self.fields},
        )
        for i, current in enumerate(self._projections):
            if current.id == projection.id:
                self._projections[i] = reduced
                return
        self._projections.append(reduced)

    def remove(self, id: str) -> None:
        if self._projections is not None:
            self._projections = [p for p in self._projections if p.id != id]

    def clear(self) -> None:
        """Forget all projections; the next access fetches again."""
        self._projections = None
        self._pending = None

    async def _get(self, force_refresh: bool) -> list[Projection]:
        if force_refresh or self._projections is None:
            return await self.refresh()
        return self._projections
