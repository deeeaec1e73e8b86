"""
In-memory versioned store.

Documents are lost when the process terminates. Useful for tests and
for running the service without a backing directory.
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any

from chuk_mcp_patterns.errors import ConflictError
from chuk_mcp_patterns.models.saved_object import FindOptions, SavedObject
from chuk_mcp_patterns.store.base import (
    encode_version,
    matches_search,
    not_found,
    project,
    version_conflict,
)

logger = logging.getLogger(__name__)


class InMemoryVersionedStore:
    """
    Versioned store backed by a dict.

    Every successful write bumps a store-wide sequence number, which is
    encoded into the document's new version token.
    """

    def __init__(self) -> None:
        self._documents: dict[tuple[str, str], SavedObject] = {}
        self._seq_no = 0

    async def find(self, options: FindOptions) -> list[SavedObject]:
        result = []
        for (type_, _), saved in self._documents.items():
            if type_ != options.type or not matches_search(saved, options):
                continue
            result.append(
                SavedObject(
                    id=saved.id,
                    type=saved.type,
                    version=saved.version,
                    attributes=copy.deepcopy(project(saved.attributes, options.fields)),
                )
            )
            if len(result) >= options.per_page:
                break
        return result

    async def get(self, type: str, id: str) -> SavedObject:
        saved = self._documents.get((type, id))
        if saved is None:
            raise not_found(id)
        return saved.model_copy(deep=True)

    async def create(
        self,
        type: str,
        attributes: dict[str, Any],
        *,
        id: str | None = None,
        overwrite: bool = False,
    ) -> SavedObject:
        id = id or str(uuid.uuid4())
        current = self._documents.get((type, id))
        if current is not None and not overwrite:
            raise ConflictError(
                f"Document '{id}' already exists",
                pattern_id=id,
                current_version=current.version,
            )

        saved = SavedObject(
            id=id,
            type=type,
            version=self._next_version(),
            attributes=copy.deepcopy(attributes),
        )
        self._documents[(type, id)] = saved
        logger.debug("Created %s/%s at %s", type, id, saved.version)
        return saved.model_copy(deep=True)

    async def update(
        self,
        type: str,
        id: str,
        attributes: dict[str, Any],
        *,
        version: str | None = None,
    ) -> SavedObject:
        current = self._documents.get((type, id))
        if current is None:
            raise not_found(id)

        if version is not None and version != current.version:
            raise version_conflict(id, version, current.version)

        saved = SavedObject(
            id=id,
            type=type,
            version=self._next_version(),
            attributes={**current.attributes, **copy.deepcopy(attributes)},
        )
        self._documents[(type, id)] = saved
        logger.debug("Updated %s/%s to %s", type, id, saved.version)
        return saved.model_copy(deep=True)

    async def delete(self, type: str, id: str) -> None:
        if self._documents.pop((type, id), None) is None:
            raise not_found(id)
        logger.debug("Deleted %s/%s", type, id)

    def clear(self) -> None:
        """Clear all documents (testing helper)."""
        self._documents.clear()

    def _next_version(self) -> str:
        self._seq_no += 1
        return encode_version(self._seq_no)
