"""
Pytest configuration and shared fixtures.
"""

import asyncio
import copy
import tempfile
from pathlib import Path
from typing import Any

import pytest

from chuk_mcp_patterns.errors import ConflictError, NotFoundError
from chuk_mcp_patterns.models import FieldSpec, FindOptions, SavedObject


class RecordingStore:
    """
    Store double that records every call.

    Holds a single stored document (returned for any id). Version tokens
    grow by one 'a' per successful update, so 'foo' becomes 'fooa', then
    'fooaa'. Find returns a fixed projection list.
    """

    def __init__(self, document: dict[str, Any] | None = None):
        self.document = document or {
            "id": "foo",
            "type": "index-pattern",
            "version": "foo",
            "attributes": {"title": "something"},
        }
        self.find_results = [
            SavedObject(id="id", type="index-pattern", attributes={"title": "title"})
        ]
        self.calls: dict[str, list[Any]] = {
            name: [] for name in ("find", "get", "create", "update", "delete")
        }
        self.get_delay = 0.0
        self.get_error: Exception | None = None

    async def find(self, options: FindOptions) -> list[SavedObject]:
        self.calls["find"].append(options)
        return [s.model_copy(deep=True) for s in self.find_results]

    async def get(self, type: str, id: str) -> SavedObject:
        self.calls["get"].append(id)
        if self.get_delay:
            await asyncio.sleep(self.get_delay)
        if self.get_error is not None:
            raise self.get_error
        if self.document is None:
            raise NotFoundError(f"Pattern '{id}' not found.", pattern_id=id)
        return SavedObject.model_validate(copy.deepcopy(self.document))

    async def create(
        self,
        type: str,
        attributes: dict[str, Any],
        *,
        id: str | None = None,
        overwrite: bool = False,
    ) -> SavedObject:
        self.calls["create"].append((id, attributes))
        self.document = {
            "id": id or "generated",
            "type": type,
            "version": "v",
            "attributes": copy.deepcopy(attributes),
        }
        return SavedObject(id=self.document["id"], type=type, version="v")

    async def update(
        self,
        type: str,
        id: str,
        attributes: dict[str, Any],
        *,
        version: str | None = None,
    ) -> SavedObject:
        self.calls["update"].append((id, attributes, version))
        if self.document["version"] != version:
            raise ConflictError(
                "version mismatch",
                pattern_id=id,
                expected_version=version,
                current_version=self.document["version"],
            )
        self.document["attributes"]["title"] = attributes["title"]
        self.document["version"] += "a"
        return SavedObject(id=self.document["id"], type=type, version=self.document["version"])

    async def delete(self, type: str, id: str) -> None:
        self.calls["delete"].append(id)


class StubFieldsFetcher:
    """Field discovery double returning a fixed field list."""

    def __init__(self, fields: list[FieldSpec] | None = None, error: Exception | None = None):
        self.fields = fields or []
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def get_fields_for_wildcard(
        self,
        pattern: str,
        *,
        meta_fields: list[str] | None = None,
        type: str | None = None,
        rollup_index: str | None = None,
    ) -> list[FieldSpec]:
        self.calls.append(
            {
                "pattern": pattern,
                "meta_fields": meta_fields,
                "type": type,
                "rollup_index": rollup_index,
            }
        )
        if self.error is not None:
            raise self.error
        return [f.model_copy() for f in self.fields]


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def recording_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def fields_fetcher() -> StubFieldsFetcher:
    return StubFieldsFetcher(
        [
            FieldSpec(name="@timestamp", type="date", searchable=True, aggregatable=True),
            FieldSpec(name="message", type="string", searchable=True),
        ]
    )
