"""
Store records - what the versioned store hands back.

These mirror the store's observable contract, not its wire format.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from chuk_mcp_patterns.constants import DEFAULT_PER_PAGE


class SavedObject(BaseModel):
    """A stored document with its current version token."""

    id: str = Field(..., description="Document id")
    type: str = Field(..., description="Type tag")
    version: str | None = Field(None, description="Opaque version token")
    attributes: dict[str, Any] = Field(default_factory=dict)


class Projection(BaseModel):
    """
    A lightweight (id, attribute subset) record used for list views.

    Independent of any full Pattern instance.
    """

    id: str
    attributes: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def title(self) -> str | None:
        return self.attributes.get("title")

    @classmethod
    def from_saved_object(cls, saved: SavedObject) -> Projection:
        return cls(id=saved.id, attributes=dict(saved.attributes))


class PatternTitle(BaseModel):
    """An (id, title) pair."""

    id: str
    title: str

    model_config = {"frozen": True}


class FindOptions(BaseModel):
    """Bulk projection query."""

    type: str = Field(..., description="Type tag to search")
    fields: list[str] = Field(default_factory=list, description="Attributes to return")
    per_page: int = Field(DEFAULT_PER_PAGE, gt=0, description="Result ceiling")
    search: str | None = Field(None, description="Wildcard search expression")
    search_fields: list[str] | None = Field(None, description="Attributes to search")

    model_config = {"frozen": True}
