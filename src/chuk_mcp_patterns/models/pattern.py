"""
Pattern model - a named, versioned set of field descriptors.

A Pattern's title is a wildcard expression over data indices
(e.g. 'logs-*,-logs-internal'). Its fields are discovered from the
indices the title matches and stored alongside it.

Patterns are mutable: callers edit them in place and hand them back
to the service to save. The version token is written only by the service.
"""

from __future__ import annotations

import copy
from typing import Any

from pydantic import BaseModel, Field, field_validator

from chuk_mcp_patterns.constants import PersistenceStatus
from chuk_mcp_patterns.models.saved_object import SavedObject


class FieldSpec(BaseModel):
    """
    A single field discovered for a pattern.

    Stored with camelCase keys, as the store expects.
    """

    name: str = Field(..., description="Field name (dotted path)")
    type: str = Field("unknown", description="Normalized field type")
    es_types: list[str] | None = Field(None, alias="esTypes", description="Raw mapping types")
    searchable: bool = Field(False, description="Field can be queried")
    aggregatable: bool = Field(False, description="Field can be aggregated")
    read_from_doc_values: bool = Field(
        False, alias="readFromDocValues", description="Values come from doc values"
    )
    count: int = Field(0, ge=0, description="Popularity counter")
    script: str | None = Field(None, description="Script source for scripted fields")
    lang: str | None = Field(None, description="Script language")
    conflict_descriptions: dict[str, list[str]] | None = Field(
        None,
        alias="conflictDescriptions",
        description="Type to index names, for fields with conflicting types",
    )

    model_config = {"populate_by_name": True}

    @property
    def scripted(self) -> bool:
        return self.script is not None

    def to_attributes(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class SourceFilter(BaseModel):
    """A field name pattern hidden from document source views."""

    value: str = Field(..., min_length=1)

    model_config = {"frozen": True}


class PatternSpec(BaseModel):
    """
    Construction parameters for a new pattern.

    Used by make/create when no stored document exists yet.
    """

    id: str | None = Field(None, description="Explicit id (store assigns one if omitted)")
    title: str = Field(..., min_length=1, description="Wildcard index expression")
    time_field_name: str | None = Field(None, description="Primary time field")
    fields: list[FieldSpec] = Field(default_factory=list, description="Known fields")
    source_filters: list[SourceFilter] = Field(default_factory=list)
    field_format_map: dict[str, Any] = Field(default_factory=dict)
    type: str | None = Field(None, description="Pattern subtype (e.g. 'rollup')")
    type_meta: dict[str, Any] | None = Field(None, description="Subtype metadata")


class Pattern(BaseModel):
    """
    A persisted pattern.

    Instances handed out by the service are shared: every caller that gets
    the same id while it is cached holds the same object, and edits made by
    one caller are visible to the others.
    """

    id: str | None = Field(None, description="Document id")
    version: str | None = Field(None, description="Opaque version token")
    title: str = Field(..., min_length=1, description="Wildcard index expression")
    time_field_name: str | None = Field(None, description="Primary time field")
    fields: list[FieldSpec] = Field(default_factory=list)
    source_filters: list[SourceFilter] = Field(default_factory=list)
    field_format_map: dict[str, Any] = Field(default_factory=dict)
    type: str | None = Field(None)
    type_meta: dict[str, Any] | None = Field(None)
    status: PersistenceStatus = Field(PersistenceStatus.UNSAVED)

    # Edits made in place are validated like constructor arguments
    model_config = {"validate_assignment": True}

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Titles are trimmed; blank titles are rejected."""
        v = v.strip()
        if not v:
            raise ValueError("Pattern title must not be blank")
        return v

    @classmethod
    def from_spec(cls, spec: PatternSpec) -> Pattern:
        return cls(
            id=spec.id,
            title=spec.title,
            time_field_name=spec.time_field_name,
            fields=[f.model_copy() for f in spec.fields],
            source_filters=list(spec.source_filters),
            field_format_map=copy.deepcopy(spec.field_format_map),
            type=spec.type,
            type_meta=copy.deepcopy(spec.type_meta),
        )

    @classmethod
    def from_saved_object(cls, saved: SavedObject) -> Pattern:
        """Hydrate a pattern from a stored document."""
        attributes = copy.deepcopy(saved.attributes)
        return cls(
            id=saved.id,
            version=saved.version,
            title=attributes.get("title", ""),
            time_field_name=attributes.get("timeFieldName"),
            fields=[FieldSpec.model_validate(f) for f in attributes.get("fields", [])],
            source_filters=[
                SourceFilter.model_validate(f) for f in attributes.get("sourceFilters", [])
            ],
            field_format_map=attributes.get("fieldFormatMap", {}),
            type=attributes.get("type"),
            type_meta=attributes.get("typeMeta"),
            status=PersistenceStatus.SAVED,
        )

    def to_attributes(self) -> dict[str, Any]:
        """The attribute mapping written to the store."""
        result: dict[str, Any] = {
            "title": self.title,
            "timeFieldName": self.time_field_name,
            "fields": [f.to_attributes() for f in self.fields],
            "sourceFilters": [f.model_dump() for f in self.source_filters],
            "fieldFormatMap": copy.deepcopy(self.field_format_map),
        }
        if self.type is not None:
            result["type"] = self.type
        if self.type_meta is not None:
            result["typeMeta"] = copy.deepcopy(self.type_meta)
        return result

    def get_field(self, name: str) -> FieldSpec | None:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def is_time_based(self) -> bool:
        """True if the pattern has a time field that is a known date field."""
        if not self.time_field_name:
            return False
        field = self.get_field(self.time_field_name)
        return field is not None and field.type == "date"

    def set_fields(self, fields: list[FieldSpec]) -> None:
        """
        Replace discovered fields, keeping scripted fields and popularity counts.
        """
        counts = {f.name: f.count for f in self.fields}
        scripted = [f for f in self.fields if f.scripted]
        discovered = [
            f.model_copy(update={"count": counts.get(f.name, f.count)}) for f in fields
        ]
        names = {f.name for f in discovered}
        self.fields = discovered + [f for f in scripted if f.name not in names]
