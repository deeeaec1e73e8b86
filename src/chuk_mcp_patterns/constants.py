"""
Constants and enums for the pattern system.

No magic strings - use enums and named constants for constrained values.
"""

from enum import Enum

# Saved object type tag for patterns
PATTERN_TYPE = "index-pattern"

# Page-size ceiling for bulk projection fetches
DEFAULT_PER_PAGE = 10000

# Attributes projected into the list cache when nothing else is configured
DEFAULT_PROJECTION_FIELDS: tuple[str, ...] = ("title",)

# Document metadata fields appended to every field discovery result
DEFAULT_META_FIELDS: tuple[str, ...] = ("_source", "_id", "_type", "_index", "_score")

# Field type assigned when the same field has different types across indices
CONFLICT_FIELD_TYPE = "conflict"


class PersistenceStatus(str, Enum):
    """
    Persistence state of an in-memory pattern.

    Conflicted is terminal for an instance: recover by fetching it again.
    """

    UNSAVED = "unsaved"
    SAVED = "saved"
    CONFLICTED = "conflicted"


class ErrorMessages:
    """Standardized error messages."""

    PATTERN_NOT_FOUND = "Pattern '{pattern_id}' not found."
    VERSION_CONFLICT = (
        "Pattern '{pattern_id}' was changed by someone else "
        "(held version {expected!r}, stored version {current!r})."
    )
    DUPLICATE_TITLE = "Duplicate pattern: a pattern titled '{title}' already exists."
    DISCOVERY_FAILED = "Field discovery failed for '{title}'."
    STORE_UNAVAILABLE = "Store operation '{operation}' failed."
    MISSING_TITLE = "Pattern title is required."


class SuccessMessages:
    """Standardized success messages."""

    PATTERN_CREATED = "Created pattern '{title}' ({pattern_id})."
    PATTERN_SAVED = "Saved pattern '{pattern_id}' at version {version}."
    PATTERN_DELETED = "Pattern '{pattern_id}' deleted."
    DEFAULT_SET = "Default pattern set to '{pattern_id}'."
