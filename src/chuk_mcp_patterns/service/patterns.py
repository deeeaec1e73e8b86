"""
Pattern Service - handles pattern lifecycle against a versioned store.

Provides async operations for getting, making, saving and deleting patterns.
Full patterns are cached by id (one shared instance per id); list views are
served from a projection cache filled by a single bulk fetch.

Saves use optimistic concurrency: the pattern's version token is sent with
every update and a mismatch surfaces as ConflictError. Nothing here retries
or merges; that decision belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any

from chuk_mcp_patterns.cache import DocumentCache, ProjectionCache
from chuk_mcp_patterns.config import ServiceSettings
from chuk_mcp_patterns.constants import ErrorMessages, PersistenceStatus
from chuk_mcp_patterns.errors import (
    ConflictError,
    DiscoveryError,
    DuplicatePatternError,
    NotFoundError,
    PatternError,
)
from chuk_mcp_patterns.fields import FieldsFetcher
from chuk_mcp_patterns.models.pattern import FieldSpec, Pattern, PatternSpec
from chuk_mcp_patterns.models.saved_object import FindOptions, PatternTitle, Projection
from chuk_mcp_patterns.store import VersionedStore

logger = logging.getLogger(__name__)


class PatternService:
    """
    Manages pattern lifecycle with store persistence.

    Patterns returned by get() are shared: while an id stays cached every
    caller receives the same object, and in-place edits are visible to all
    holders. save() writes whatever state that object has at the time.
    """

    def __init__(
        self,
        store: VersionedStore,
        fields_fetcher: FieldsFetcher,
        settings: ServiceSettings | None = None,
    ):
        """
        Initialize the service.

        Args:
            store: Versioned document store
            fields_fetcher: Field discovery collaborator
            settings: Service settings (defaults if omitted)
        """
        self.store = store
        self.fields_fetcher = fields_fetcher
        self.settings = settings or ServiceSettings()
        self.documents = DocumentCache(self._load)
        self.projections = ProjectionCache(
            store,
            type=self.settings.pattern_type,
            fields=self.settings.projection_fields,
            per_page=self.settings.per_page,
        )

    @property
    def pattern_type(self) -> str:
        return self.settings.pattern_type

    # List views

    async def get_ids(self, force_refresh: bool = False) -> list[str]:
        return await self.projections.get_ids(force_refresh)

    async def get_titles(self, force_refresh: bool = False) -> list[PatternTitle]:
        return await self.projections.get_titles(force_refresh)

    async def get_fields(
        self, field_names: list[str], force_refresh: bool = False
    ) -> list[dict[str, Any]]:
        return await self.projections.get_fields(field_names, force_refresh)

    async def find(self, search: str, size: int = 10) -> list[Pattern]:
        """
        Find patterns by title.

        Args:
            search: Wildcard expression matched against titles
            size: Maximum number of results

        Returns:
            Matching patterns, hydrated through the document cache
        """
        saved_objects = await self.store.find(
            FindOptions(
                type=self.pattern_type,
                fields=["title"],
                per_page=size,
                search=search,
                search_fields=["title"],
            )
        )
        return [await self.get(s.id) for s in saved_objects]

    # Single patterns

    async def get(self, id: str) -> Pattern:
        """
        Get a pattern by id.

        Checks the cache first, then loads from the store. Concurrent calls
        for the same uncached id share one store fetch.

        Raises:
            NotFoundError: The store has no such document
        """
        return await self.documents.get(id)

    async def make(self, id: str | None = None, spec: PatternSpec | None = None) -> Pattern:
        """
        Build a pattern, discover its fields and persist it.

        With an id, the stored document is read straight from the store
        (bypassing the cache); if there is none, a new pattern is built from
        spec under that id. Every call writes to the store, so two calls for
        the same id give two instances holding successive version tokens.

        Args:
            id: Id of the pattern to load (or to create under)
            spec: Construction parameters, used only when nothing is stored

        Returns:
            The persisted pattern, registered in the cache

        Raises:
            DiscoveryError: Field discovery failed (nothing is registered)
            ValueError: Neither a stored document nor a spec was available
        """
        pattern: Pattern | None = None
        if id is not None:
            try:
                saved = await self.store.get(self.pattern_type, id)
                pattern = Pattern.from_saved_object(saved)
            except NotFoundError:
                if spec is None:
                    raise

        if pattern is None:
            if spec is None:
                raise ValueError(ErrorMessages.MISSING_TITLE)
            pattern = Pattern.from_spec(spec.model_copy(update={"id": id or spec.id}))

        await self.refresh_fields(pattern)
        await self.save(pattern)
        self.documents.set(pattern.id, pattern)
        return pattern

    async def create(self, spec: PatternSpec, skip_fetch_fields: bool = False) -> Pattern:
        """
        Build an unsaved pattern without writing to the store.

        Args:
            spec: Construction parameters
            skip_fetch_fields: Keep spec.fields instead of discovering fields

        Returns:
            The new, unsaved pattern (not cached)
        """
        pattern = Pattern.from_spec(spec)
        if not skip_fetch_fields:
            await self.refresh_fields(pattern)
        return pattern

    async def create_and_save(
        self,
        spec: PatternSpec,
        override: bool = False,
        skip_fetch_fields: bool = False,
    ) -> Pattern:
        """
        Create a pattern and persist it, refusing duplicate titles.

        Args:
            spec: Construction parameters
            override: Replace an existing pattern with the same title
            skip_fetch_fields: Keep spec.fields instead of discovering fields

        Raises:
            DuplicatePatternError: A pattern with the title exists and
                override is False
        """
        pattern = await self.create(spec, skip_fetch_fields)

        titles = await self.get_titles(force_refresh=True)
        duplicate = next((t for t in titles if t.title == pattern.title), None)
        if duplicate is not None:
            if not override:
                raise DuplicatePatternError(
                    ErrorMessages.DUPLICATE_TITLE.format(title=pattern.title),
                    title=pattern.title,
                    pattern_id=duplicate.id,
                )
            await self.delete(duplicate.id)

        return await self.save(pattern)

    async def save(self, pattern: Pattern) -> Pattern:
        """
        Persist a pattern.

        An unsaved pattern is created and registered in the cache. A saved one
        is updated with the version token it holds; on success the store's new
        token is written into the instance.

        Args:
            pattern: The pattern to save (updated in place)

        Returns:
            The same pattern instance

        Raises:
            ConflictError: The held token no longer matches the store. The
                instance keeps its token and is marked conflicted; fetch it
                again to recover.
        """
        attributes = pattern.to_attributes()

        if pattern.version is None:
            saved = await self.store.create(self.pattern_type, attributes, id=pattern.id)
            pattern.id = saved.id
            pattern.version = saved.version
            pattern.status = PersistenceStatus.SAVED
            self.documents.set(saved.id, pattern)
            logger.info("Created pattern %s (%s)", saved.id, pattern.title)
        else:
            if pattern.id is None:
                raise ValueError("A versioned pattern must have an id")
            try:
                saved = await self.store.update(
                    self.pattern_type, pattern.id, attributes, version=pattern.version
                )
            except ConflictError as e:
                pattern.status = PersistenceStatus.CONFLICTED
                logger.warning(
                    "Version conflict saving %s (held %s, stored %s)",
                    pattern.id,
                    e.expected_version,
                    e.current_version,
                )
                raise
            pattern.version = saved.version
            pattern.status = PersistenceStatus.SAVED
            logger.debug("Saved pattern %s at %s", pattern.id, saved.version)

        self.projections.upsert(Projection(id=saved.id, attributes=attributes))
        return pattern

    async def delete(self, id: str) -> None:
        """
        Delete a pattern from the store and both caches.

        The caches are cleared even if the store call fails.
        """
        try:
            await self.store.delete(self.pattern_type, id)
        finally:
            self.documents.delete(id)
            self.projections.remove(id)

        if self.settings.default_pattern_id == id:
            self.settings.default_pattern_id = None
        logger.info("Deleted pattern %s", id)

    # Fields

    async def get_fields_for_wildcard(
        self,
        pattern: str,
        *,
        type: str | None = None,
        rollup_index: str | None = None,
    ) -> list[FieldSpec]:
        """
        Discover fields for a wildcard expression.

        Raises:
            DiscoveryError: The collaborator failed
        """
        try:
            return await self.fields_fetcher.get_fields_for_wildcard(
                pattern,
                meta_fields=list(self.settings.meta_fields),
                type=type,
                rollup_index=rollup_index,
            )
        except PatternError:
            raise
        except Exception as e:
            raise DiscoveryError(
                ErrorMessages.DISCOVERY_FAILED.format(title=pattern), cause=e
            ) from e

    async def refresh_fields(self, pattern: Pattern) -> Pattern:
        """
        Rediscover a pattern's fields in place (no store write).

        Scripted fields and popularity counts are kept.
        """
        rollup_index = (pattern.type_meta or {}).get("params", {}).get("rollup_index")
        fields = await self.get_fields_for_wildcard(
            pattern.title, type=pattern.type, rollup_index=rollup_index
        )
        pattern.set_fields(fields)
        return pattern

    # Default pattern

    async def get_default(self) -> Pattern | None:
        """Get the default pattern, or None if none is set."""
        if self.settings.default_pattern_id is None:
            return None
        return await self.get(self.settings.default_pattern_id)

    async def set_default(self, id: str, force: bool = False) -> bool:
        """
        Set the default pattern.

        Args:
            id: Pattern id
            force: Replace an existing default

        Returns:
            True if the default changed
        """
        if self.settings.default_pattern_id is not None and not force:
            return False

        # Fails with NotFoundError for unknown ids
        await self.get(id)
        self.settings.default_pattern_id = id
        return True

    def clear_cache(self, id: str | None = None) -> None:
        """Invalidate one cached pattern, or everything when id is None."""
        if id is None:
            self.documents.clear()
            self.projections.clear()
        else:
            self.documents.invalidate(id)

    async def _load(self, id: str) -> Pattern:
        """Fetch and hydrate a pattern for the document cache."""
        saved = await self.store.get(self.pattern_type, id)
        logger.debug("Loaded pattern %s at %s", id, saved.version)
        return Pattern.from_saved_object(saved)
