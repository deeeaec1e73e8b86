"""
Typed errors for pattern persistence.

Every error carries an HTTP-style status so callers can branch on it:

- NotFoundError (404): the store has no document for the id
- ConflictError (409): the held version token no longer matches the store
- DuplicatePatternError (409): another pattern already uses the title
- DiscoveryError (502): field discovery failed while building a pattern
- TransientStoreError (503): any other store failure, safe to retry

Nothing in this package retries or resolves these; they surface to the
caller of the service operation.
"""

from __future__ import annotations

from typing import Any


class PatternError(Exception):
    """Base class for all pattern errors."""

    status: int = 500
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        pattern_id: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.pattern_id = pattern_id
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Serialize for tool responses and structured logs."""
        result: dict[str, Any] = {
            "error": type(self).__name__,
            "message": self.message,
            "code": self.status,
            "retryable": self.retryable,
        }
        if self.pattern_id is not None:
            result["pattern_id"] = self.pattern_id
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result


class NotFoundError(PatternError):
    """The requested document does not exist in the store."""

    status = 404


class ConflictError(PatternError):
    """
    A write presented a stale version token.

    ``expected_version`` is the token the caller held; ``current_version`` is
    the store's token at the time of the rejected write, when known.
    """

    status = 409

    def __init__(
        self,
        message: str,
        *,
        pattern_id: str | None = None,
        expected_version: str | None = None,
        current_version: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, pattern_id=pattern_id, cause=cause)
        self.expected_version = expected_version
        self.current_version = current_version

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["expected_version"] = self.expected_version
        result["current_version"] = self.current_version
        return result


class DuplicatePatternError(PatternError):
    """A pattern with the same title already exists."""

    status = 409

    def __init__(self, message: str, *, title: str, pattern_id: str | None = None):
        super().__init__(message, pattern_id=pattern_id)
        self.title = title


class DiscoveryError(PatternError):
    """The field discovery collaborator failed."""

    status = 502


class TransientStoreError(PatternError):
    """Any other store failure."""

    status = 503
    retryable = True
