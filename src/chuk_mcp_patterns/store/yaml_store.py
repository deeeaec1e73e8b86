"""
YAML directory store - file persistence for saved objects.

Each document lives in its own file:

    <root>/<type>/<quoted id>.yaml

holding the id, type, version token, sequence number and attributes. Ids
are percent-encoded for the filename, so distinct ids never share a file.
Files can be edited by hand or kept under version control; a hand edit
that leaves the version untouched is picked up on the next read.
"""

from __future__ import annotations

import logging
import urllib.parse
import uuid
from pathlib import Path
from typing import Any

import yaml

from chuk_mcp_patterns.constants import ErrorMessages
from chuk_mcp_patterns.errors import ConflictError, TransientStoreError
from chuk_mcp_patterns.models.saved_object import FindOptions, SavedObject
from chuk_mcp_patterns.store.base import (
    encode_version,
    matches_search,
    not_found,
    project,
    version_conflict,
)

logger = logging.getLogger(__name__)


class YamlVersionedStore:
    """
    Versioned store with one YAML file per document.

    Version tokens encode a per-document sequence number and a term chosen
    when the document is created, so a recreated document never reissues
    a token held for its predecessor.
    """

    def __init__(self, root: Path):
        """
        Initialize the store.

        Args:
            root: Directory holding one subdirectory per type tag
        """
        self.root = root

    async def find(self, options: FindOptions) -> list[SavedObject]:
        type_dir = self.root / options.type
        if not type_dir.exists():
            return []

        result = []
        for path in sorted(type_dir.glob("*.yaml")):
            saved = self._to_saved_object(self._read(path))
            if not matches_search(saved, options):
                continue
            result.append(
                saved.model_copy(update={"attributes": project(saved.attributes, options.fields)})
            )
            if len(result) >= options.per_page:
                break
        return result

    async def get(self, type: str, id: str) -> SavedObject:
        return self._to_saved_object(self._read_document(type, id))

    async def create(
        self,
        type: str,
        attributes: dict[str, Any],
        *,
        id: str | None = None,
        overwrite: bool = False,
    ) -> SavedObject:
        id = id or str(uuid.uuid4())
        path = self._get_path(type, id)

        if path.exists() and not overwrite:
            current = self._read(path)
            raise ConflictError(
                f"Document '{id}' already exists",
                pattern_id=id,
                current_version=current.get("version"),
            )

        term = uuid.uuid4().int >> 97
        data = {
            "id": id,
            "type": type,
            "seq_no": 1,
            "term": term,
            "version": encode_version(1, term),
            "attributes": attributes,
        }
        self._write(path, data)
        logger.debug("Created %s/%s at %s", type, id, data["version"])
        return self._to_saved_object(data)

    async def update(
        self,
        type: str,
        id: str,
        attributes: dict[str, Any],
        *,
        version: str | None = None,
    ) -> SavedObject:
        path = self._get_path(type, id)
        data = self._read_document(type, id)
        if version is not None and version != data.get("version"):
            raise version_conflict(id, version, data.get("version"))

        seq_no = int(data.get("seq_no", 0)) + 1
        term = int(data.get("term", 1))
        data.update(
            seq_no=seq_no,
            version=encode_version(seq_no, term),
            attributes={**data.get("attributes", {}), **attributes},
        )
        self._write(path, data)
        logger.debug("Updated %s/%s to %s", type, id, data["version"])
        return self._to_saved_object(data)

    async def delete(self, type: str, id: str) -> None:
        path = self._get_path(type, id)
        self._read_document(type, id)

        try:
            path.unlink()
        except OSError as e:
            raise TransientStoreError(
                ErrorMessages.STORE_UNAVAILABLE.format(operation="delete"),
                pattern_id=id,
                cause=e,
            ) from e
        logger.debug("Deleted %s/%s", type, id)

    def _get_path(self, type: str, id: str) -> Path:
        """Get the file path for a document."""
        return self.root / type / f"{urllib.parse.quote(id, safe='')}.yaml"

    def _read_document(self, type: str, id: str) -> dict[str, Any]:
        """Read a document, failing with NotFoundError unless the file holds this id."""
        path = self._get_path(type, id)
        if not path.exists():
            raise not_found(id)
        data = self._read(path)
        if str(data.get("id")) != id:
            raise not_found(id)
        return data

    def _read(self, path: Path) -> dict[str, Any]:
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise TransientStoreError(
                ErrorMessages.STORE_UNAVAILABLE.format(operation="read"),
                pattern_id=path.stem,
                cause=e,
            ) from e

        if not isinstance(data, dict):
            raise TransientStoreError(
                f"Malformed document file: {path}",
                pattern_id=path.stem,
            )
        return data

    def _write(self, path: Path, data: dict[str, Any]) -> None:
        """Write through a temporary file so readers never see a partial document."""
        tmp_path = path.with_suffix(".yaml.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
            tmp_path.replace(path)
        except (OSError, yaml.YAMLError) as e:
            raise TransientStoreError(
                ErrorMessages.STORE_UNAVAILABLE.format(operation="write"),
                pattern_id=data.get("id"),
                cause=e,
            ) from e

    @staticmethod
    def _to_saved_object(data: dict[str, Any]) -> SavedObject:
        return SavedObject(
            id=str(data["id"]),
            type=data["type"],
            version=data.get("version"),
            attributes=data.get("attributes") or {},
        )
