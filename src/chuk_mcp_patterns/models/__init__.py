"""
Pydantic models for the pattern system.

This module provides:
- Pattern: A persisted, versioned pattern
- PatternSpec: Construction parameters for new patterns
- FieldSpec: A discovered field
- SourceFilter: A hidden source field expression
- SavedObject / Projection / PatternTitle / FindOptions: Store records
"""

from chuk_mcp_patterns.models.pattern import FieldSpec, Pattern, PatternSpec, SourceFilter
from chuk_mcp_patterns.models.saved_object import (
    FindOptions,
    PatternTitle,
    Projection,
    SavedObject,
)

__all__ = [
    "FieldSpec",
    "FindOptions",
    "Pattern",
    "PatternSpec",
    "PatternTitle",
    "Projection",
    "SavedObject",
    "SourceFilter",
]
