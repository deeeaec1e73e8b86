"""
Versioned Store - the persistence contract the service consumes.

A store keeps one current version token per document and rejects any
update that presents a different token (optimistic concurrency).
Tokens are opaque and compared only for equality.
"""

from __future__ import annotations

import base64
import fnmatch
import json
from typing import Any, Protocol, runtime_checkable

from chuk_mcp_patterns.constants import ErrorMessages
from chuk_mcp_patterns.errors import ConflictError, NotFoundError
from chuk_mcp_patterns.models.saved_object import FindOptions, SavedObject


@runtime_checkable
class VersionedStore(Protocol):
    """
    Protocol for versioned document stores.

    Implementations raise NotFoundError, ConflictError and
    TransientStoreError from chuk_mcp_patterns.errors.
    """

    async def find(self, options: FindOptions) -> list[SavedObject]:
        """Bulk fetch of projections, reduced to options.fields."""
        ...

    async def get(self, type: str, id: str) -> SavedObject:
        """Fetch one document with its current version."""
        ...

    async def create(
        self,
        type: str,
        attributes: dict[str, Any],
        *,
        id: str | None = None,
        overwrite: bool = False,
    ) -> SavedObject:
        """Create a document and issue its first version token."""
        ...

    async def update(
        self,
        type: str,
        id: str,
        attributes: dict[str, Any],
        *,
        version: str | None = None,
    ) -> SavedObject:
        """Replace attributes if version matches; issue a new token."""
        ...

    async def delete(self, type: str, id: str) -> None:
        """Delete a document."""
        ...


def encode_version(seq_no: int, primary_term: int = 1) -> str:
    """Build an opaque version token from a sequence number and term."""
    raw = json.dumps([seq_no, primary_term], separators=(",", ":"))
    return base64.b64encode(raw.encode()).decode()


def project(attributes: dict[str, Any], fields: list[str]) -> dict[str, Any]:
    """Reduce attributes to the requested names (all of them if none requested)."""
    if not fields:
        return dict(attributes)
    return {name: attributes[name] for name in fields if name in attributes}


def matches_search(saved: SavedObject, options: FindOptions) -> bool:
    """
    Check a document against the find search expression.

    The search is a case-insensitive wildcard matched against each search
    field (title when none are given).
    """
    if not options.search:
        return True

    search = options.search.lower()
    for name in options.search_fields or ["title"]:
        value = saved.attributes.get(name)
        if isinstance(value, str) and fnmatch.fnmatchcase(value.lower(), search):
            return True
    return False


def not_found(id: str) -> NotFoundError:
    return NotFoundError(ErrorMessages.PATTERN_NOT_FOUND.format(pattern_id=id), pattern_id=id)


def version_conflict(id: str, expected: str | None, current: str | None) -> ConflictError:
    return ConflictError(
        ErrorMessages.VERSION_CONFLICT.format(pattern_id=id, expected=expected, current=current),
        pattern_id=id,
        expected_version=expected,
        current_version=current,
    )
