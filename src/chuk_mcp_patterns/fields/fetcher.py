"""
Field discovery - resolves a pattern title to the fields it covers.

A title is a comma-separated list of index wildcards. Entries starting
with '-' exclude the indices they match:

    logs-*,metrics-*,-logs-internal

Fields with the same name in several indices are merged. If their types
differ the merged field gets type 'conflict' and records which indices
contributed which type.
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import yaml

from chuk_mcp_patterns.constants import CONFLICT_FIELD_TYPE
from chuk_mcp_patterns.errors import DiscoveryError
from chuk_mcp_patterns.models.pattern import FieldSpec

logger = logging.getLogger(__name__)


@runtime_checkable
class FieldsFetcher(Protocol):
    """Protocol for field discovery collaborators."""

    async def get_fields_for_wildcard(
        self,
        pattern: str,
        *,
        meta_fields: list[str] | None = None,
        type: str | None = None,
        rollup_index: str | None = None,
    ) -> list[FieldSpec]:
        """Discover the fields of every index matching the pattern."""
        ...


class MappingFieldsFetcher:
    """
    Field discovery over a static index → fields mapping.

    The mapping is usually loaded from a YAML file:

        logs-2024.01:
          - name: "@timestamp"
            type: date
            aggregatable: true
            searchable: true
          - name: message
            type: string
            searchable: true
    """

    def __init__(self, mappings: dict[str, list[FieldSpec]] | None = None):
        self.mappings = mappings or {}

    @classmethod
    def from_yaml(cls, path: Path) -> MappingFieldsFetcher:
        """
        Load index mappings from a YAML file.

        A missing file gives an empty mapping.
        """
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise DiscoveryError(f"Cannot load field mappings from {path}", cause=e) from e

        mappings = {
            str(index): [FieldSpec.model_validate(f) for f in fields or []]
            for index, fields in data.items()
        }
        return cls(mappings)

    def resolve_indices(self, pattern: str) -> list[str]:
        """List the indices a comma-separated wildcard expression selects."""
        includes = []
        excludes = []
        for part in pattern.split(","):
            part = part.strip()
            if not part:
                continue
            if part.startswith("-"):
                excludes.append(part[1:])
            else:
                includes.append(part)

        result = []
        for index in sorted(self.mappings):
            if not any(fnmatch.fnmatchcase(index, p) for p in includes):
                continue
            if any(fnmatch.fnmatchcase(index, p) for p in excludes):
                continue
            result.append(index)
        return result

    async def get_fields_for_wildcard(
        self,
        pattern: str,
        *,
        meta_fields: list[str] | None = None,
        type: str | None = None,
        rollup_index: str | None = None,
    ) -> list[FieldSpec]:
        """
        Discover fields for a pattern.

        Args:
            pattern: Comma-separated index wildcards
            meta_fields: Metadata field names to append
            type: Pattern subtype; 'rollup' restricts discovery to rollup_index
            rollup_index: Rollup index name (rollup patterns only)

        Returns:
            Merged fields sorted by name, followed by meta fields.
            Empty if no index matches.
        """
        if type == "rollup":
            if not rollup_index:
                raise DiscoveryError("Rollup patterns need a rollup index")
            indices = self.resolve_indices(rollup_index)
        else:
            indices = self.resolve_indices(pattern)

        if not indices:
            logger.debug("No indices match %r", pattern)
            return []

        merged: dict[str, FieldSpec] = {}
        types_by_field: dict[str, dict[str, list[str]]] = {}
        for index in indices:
            for field in self.mappings[index]:
                indices_by_type = types_by_field.setdefault(field.name, {})
                indices_by_type.setdefault(field.type, []).append(index)
                current = merged.get(field.name)
                if current is None:
                    merged[field.name] = field.model_copy()
                    continue
                merged[field.name] = current.model_copy(
                    update={
                        "searchable": current.searchable and field.searchable,
                        "aggregatable": current.aggregatable and field.aggregatable,
                        "es_types": sorted(set(current.es_types or []) | set(field.es_types or []))
                        or None,
                    }
                )

        result = []
        for name in sorted(merged):
            field = merged[name]
            types = types_by_field[name]
            if len(types) > 1:
                field = field.model_copy(
                    update={
                        "type": CONFLICT_FIELD_TYPE,
                        "searchable": False,
                        "aggregatable": False,
                        "conflict_descriptions": types,
                    }
                )
            result.append(field)

        for name in meta_fields or []:
            if name not in merged:
                result.append(FieldSpec(name=name, type=_meta_field_type(name)))

        logger.debug(
            "Discovered %d fields for %r in %d indices", len(result), pattern, len(indices)
        )
        return result


def _meta_field_type(name: str) -> str:
    if name == "_source":
        return "_source"
    if name == "_score":
        return "number"
    return "string"
