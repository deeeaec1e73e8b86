"""
Tests for models, settings and errors.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from chuk_mcp_patterns.config import ServiceSettings
from chuk_mcp_patterns.constants import PersistenceStatus
from chuk_mcp_patterns.errors import (
    ConflictError,
    DuplicatePatternError,
    NotFoundError,
    PatternError,
    TransientStoreError,
)
from chuk_mcp_patterns.models import FieldSpec, Pattern, PatternSpec, Projection, SavedObject


class TestPattern:
    """Tests for the Pattern model."""

    def test_defaults(self) -> None:
        pattern = Pattern(title="logs-*")
        assert pattern.id is None
        assert pattern.version is None
        assert pattern.status == PersistenceStatus.UNSAVED
        assert pattern.fields == []

    def test_title_trimmed_and_required(self) -> None:
        assert Pattern(title="  logs-*  ").title == "logs-*"
        with pytest.raises(ValidationError):
            Pattern(title="   ")
        with pytest.raises(ValidationError):
            Pattern(title="")

    def test_title_validated_on_assignment(self) -> None:
        pattern = Pattern(title="logs-*")

        pattern.title = "  metrics-*  "
        assert pattern.title == "metrics-*"

        with pytest.raises(ValidationError):
            pattern.title = "   "
        assert pattern.title == "metrics-*"

    def test_from_saved_object(self) -> None:
        saved = SavedObject(
            id="logs",
            type="index-pattern",
            version="WzEsMV0=",
            attributes={
                "title": "logs-*",
                "timeFieldName": "@timestamp",
                "fields": [{"name": "@timestamp", "type": "date", "readFromDocValues": True}],
                "sourceFilters": [{"value": "secret*"}],
                "fieldFormatMap": {"bytes": {"id": "bytes"}},
            },
        )

        pattern = Pattern.from_saved_object(saved)

        assert pattern.id == "logs"
        assert pattern.version == "WzEsMV0="
        assert pattern.status == PersistenceStatus.SAVED
        assert pattern.time_field_name == "@timestamp"
        assert pattern.fields[0].read_from_doc_values
        assert pattern.source_filters[0].value == "secret*"
        assert pattern.is_time_based()

        # Hydration copies, so edits never reach the stored record
        pattern.field_format_map["bytes"]["id"] = "number"
        assert saved.attributes["fieldFormatMap"]["bytes"]["id"] == "bytes"

    def test_to_attributes(self) -> None:
        pattern = Pattern(
            title="logs-*",
            time_field_name="@timestamp",
            fields=[FieldSpec(name="@timestamp", type="date", es_types=["date"])],
        )

        attributes = pattern.to_attributes()

        assert attributes["title"] == "logs-*"
        assert attributes["timeFieldName"] == "@timestamp"
        assert attributes["fields"][0]["esTypes"] == ["date"]
        assert "script" not in attributes["fields"][0]
        assert "type" not in attributes
        assert "typeMeta" not in attributes

        pattern.type = "rollup"
        pattern.type_meta = {"params": {"rollup_index": "r"}}
        attributes = pattern.to_attributes()
        assert attributes["type"] == "rollup"
        assert attributes["typeMeta"] == {"params": {"rollup_index": "r"}}

    def test_is_time_based(self) -> None:
        pattern = Pattern(title="logs-*", time_field_name="ts")
        assert not pattern.is_time_based()

        pattern.fields = [FieldSpec(name="ts", type="string")]
        assert not pattern.is_time_based()

        pattern.fields = [FieldSpec(name="ts", type="date")]
        assert pattern.is_time_based()

    def test_set_fields_keeps_counts_and_scripts(self) -> None:
        pattern = Pattern(
            title="logs-*",
            fields=[
                FieldSpec(name="message", type="string", count=4),
                FieldSpec(name="gone", type="string", count=2),
                FieldSpec(name="doubled", type="number", script="doc['n'].value * 2"),
            ],
        )

        pattern.set_fields(
            [FieldSpec(name="message", type="string"), FieldSpec(name="new", type="number")]
        )

        assert pattern.field_names() == ["message", "new", "doubled"]
        assert pattern.get_field("message").count == 4
        assert pattern.get_field("gone") is None
        assert pattern.get_field("doubled").scripted

    def test_from_spec(self) -> None:
        spec = PatternSpec(id="x", title="logs-*", field_format_map={"a": {"id": "url"}})
        pattern = Pattern.from_spec(spec)

        assert pattern.id == "x"
        assert pattern.version is None
        assert pattern.status == PersistenceStatus.UNSAVED

        pattern.field_format_map["a"]["id"] = "bytes"
        assert spec.field_format_map["a"]["id"] == "url"


class TestProjection:
    def test_title(self) -> None:
        saved = SavedObject(id="a", type="index-pattern", attributes={"title": "a-*"})
        projection = Projection.from_saved_object(saved)
        assert projection.id == "a"
        assert projection.title == "a-*"
        assert Projection(id="b").title is None


class TestServiceSettings:
    """Tests for ServiceSettings."""

    def test_defaults(self) -> None:
        settings = ServiceSettings()
        assert settings.pattern_type == "index-pattern"
        assert settings.per_page == 10000
        assert settings.projection_fields == ["title"]
        assert "_source" in settings.meta_fields
        assert settings.default_pattern_id is None

    def test_projection_fields_normalized(self) -> None:
        settings = ServiceSettings(projection_fields=["timeFieldName", "id", "title", "type"])
        assert settings.projection_fields == ["title", "timeFieldName", "type"]

    def test_per_page_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ServiceSettings(per_page=0)

    def test_from_yaml(self, temp_dir: Path) -> None:
        path = temp_dir / "patterns.settings.yaml"
        path.write_text("per_page: 50\ndefault_pattern_id: logs\n")

        settings = ServiceSettings.from_yaml(path)

        assert settings.per_page == 50
        assert settings.default_pattern_id == "logs"
        assert settings.projection_fields == ["title"]

    def test_from_yaml_missing_or_empty(self, temp_dir: Path) -> None:
        assert ServiceSettings.from_yaml(temp_dir / "missing.yaml") == ServiceSettings()

        path = temp_dir / "empty.yaml"
        path.write_text("")
        assert ServiceSettings.from_yaml(path) == ServiceSettings()


class TestErrors:
    """Tests for the error hierarchy."""

    def test_statuses(self) -> None:
        assert NotFoundError("x").status == 404
        assert ConflictError("x").status == 409
        assert DuplicatePatternError("x", title="t").status == 409
        assert TransientStoreError("x").status == 503
        assert TransientStoreError("x").retryable
        assert not ConflictError("x").retryable

    def test_all_are_pattern_errors(self) -> None:
        for cls in (NotFoundError, ConflictError, TransientStoreError):
            assert issubclass(cls, PatternError)
        assert isinstance(DuplicatePatternError("x", title="t"), PatternError)

    def test_conflict_to_dict(self) -> None:
        error = ConflictError(
            "stale", pattern_id="p", expected_version="v1", current_version="v2"
        )

        assert error.to_dict() == {
            "error": "ConflictError",
            "message": "stale",
            "code": 409,
            "retryable": False,
            "pattern_id": "p",
            "expected_version": "v1",
            "current_version": "v2",
        }

    def test_cause_chained(self) -> None:
        cause = OSError("disk full")
        error = TransientStoreError("write failed", cause=cause)

        assert error.__cause__ is cause
        assert "disk full" in error.to_dict()["cause"]
