"""
Service settings.

Settings can come from:
1. Defaults (constants module)
2. A YAML settings file in the project directory
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from chuk_mcp_patterns.constants import (
    DEFAULT_META_FIELDS,
    DEFAULT_PER_PAGE,
    DEFAULT_PROJECTION_FIELDS,
    PATTERN_TYPE,
)


class ServiceSettings(BaseModel):
    """
    Configuration for a PatternService.

    The projected field set always includes 'title'.
    """

    pattern_type: str = Field(PATTERN_TYPE, description="Store type tag for patterns")
    per_page: int = Field(DEFAULT_PER_PAGE, gt=0, description="Bulk fetch page-size ceiling")
    projection_fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PROJECTION_FIELDS),
        description="Attributes fetched for list views",
    )
    meta_fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_META_FIELDS),
        description="Metadata fields appended to discovered fields",
    )
    default_pattern_id: str | None = Field(None, description="Id of the default pattern")

    @field_validator("projection_fields")
    @classmethod
    def validate_projection_fields(cls, v: list[str]) -> list[str]:
        """Put 'title' first and drop duplicates."""
        result = ["title"]
        for name in v:
            if name not in result and name != "id":
                result.append(name)
        return result

    @classmethod
    def from_yaml(cls, path: Path) -> ServiceSettings:
        """
        Load settings from a YAML file.

        Missing files and empty files give default settings.
        """
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.model_validate(data)
