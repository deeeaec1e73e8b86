"""
Pattern tools - MCP tools for pattern lifecycle.

Tools for listing, getting, making, updating and deleting patterns.
Every tool returns a JSON string with a 'status' of 'success', 'error'
or 'conflict'.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from chuk_mcp_patterns.constants import SuccessMessages
from chuk_mcp_patterns.errors import ConflictError, PatternError
from chuk_mcp_patterns.models.pattern import Pattern, PatternSpec
from chuk_mcp_patterns.service import PatternService

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def pattern_summary(pattern: Pattern) -> dict[str, Any]:
    """Compact JSON view of a pattern."""
    return {
        "id": pattern.id,
        "version": pattern.version,
        "title": pattern.title,
        "time_field_name": pattern.time_field_name,
        "field_count": len(pattern.fields),
        "status": pattern.status.value,
    }


def error_response(e: Exception, action: str) -> str:
    """Map an exception to a tool response."""
    if isinstance(e, ConflictError):
        logger.warning("Conflict while trying to %s: %s", action, e.message)
        return json.dumps({"status": "conflict", **e.to_dict()})
    if isinstance(e, PatternError):
        logger.info("Failed to %s: %s", action, e.message)
        return json.dumps({"status": "error", **e.to_dict()})
    if isinstance(e, ValidationError):
        logger.info("Invalid input to %s: %s", action, e)
        return json.dumps({"status": "error", "message": str(e)})
    logger.exception("Failed to %s", action)
    return json.dumps({"status": "error", "message": str(e)})


def register_pattern_tools(
    mcp: ChukMCPServer,
    service: PatternService,
) -> dict[str, Any]:
    """
    Register pattern lifecycle tools with the MCP server.

    Args:
        mcp: The MCP server instance
        service: The pattern service

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def pattern_list(search: str | None = None, refresh: bool = False) -> str:
        """
        List patterns by id and title.

        Args:
            search: Optional wildcard filter on titles (e.g., 'logs-*')
            refresh: Fetch the list again instead of using the cached one

        Returns:
            JSON string with list of pattern titles

        Example:
            pattern_list(search="logs-*")
        """
        try:
            if search:
                patterns = await service.find(search, size=service.settings.per_page)
                items = [{"id": p.id, "title": p.title} for p in patterns]
            else:
                titles = await service.get_titles(force_refresh=refresh)
                items = [t.model_dump() for t in titles]

            return json.dumps({"status": "success", "patterns": items, "count": len(items)})
        except Exception as e:
            return error_response(e, "list patterns")

    tools["pattern_list"] = pattern_list

    @mcp.tool  # type: ignore[arg-type]
    async def pattern_get(id: str) -> str:
        """
        Get pattern details.

        Args:
            id: Pattern id

        Returns:
            JSON string with the full pattern, fields included

        Example:
            pattern_get(id="logs")
        """
        try:
            pattern = await service.get(id)
            return json.dumps({"status": "success", "pattern": pattern.model_dump(mode="json")})
        except Exception as e:
            return error_response(e, "get pattern")

    tools["pattern_get"] = pattern_get

    @mcp.tool  # type: ignore[arg-type]
    async def pattern_make(
        title: str | None = None,
        id: str | None = None,
        time_field_name: str | None = None,
    ) -> str:
        """
        Make a pattern: load or build it, discover its fields and save it.

        With an existing id the stored pattern is reloaded and its fields
        refreshed. Otherwise a new pattern is built from the title.

        Args:
            title: Index wildcard expression (e.g., 'logs-*,-logs-internal')
            id: Optional pattern id
            time_field_name: Optional primary time field (e.g., '@timestamp')

        Returns:
            JSON string with the saved pattern summary

        Example:
            pattern_make(title="logs-*", time_field_name="@timestamp")
        """
        try:
            spec = (
                PatternSpec(id=id, title=title, time_field_name=time_field_name)
                if title
                else None
            )
            pattern = await service.make(id=id, spec=spec)

            return json.dumps(
                {
                    "status": "success",
                    "message": SuccessMessages.PATTERN_CREATED.format(
                        title=pattern.title, pattern_id=pattern.id
                    ),
                    "pattern": pattern_summary(pattern),
                }
            )
        except Exception as e:
            return error_response(e, "make pattern")

    tools["pattern_make"] = pattern_make

    @mcp.tool  # type: ignore[arg-type]
    async def pattern_update(
        id: str,
        title: str | None = None,
        time_field_name: str | None = None,
        version: str | None = None,
    ) -> str:
        """
        Update a pattern's title or time field and save it.

        Pass the version you last read to make sure nobody changed the
        pattern in the meantime; a mismatch returns status 'conflict'.

        Args:
            id: Pattern id
            title: New title
            time_field_name: New primary time field
            version: Expected version token

        Returns:
            JSON string with the saved pattern summary

        Example:
            pattern_update(id="logs", title="logs-*,-logs-debug", version="WzEsMV0=")
        """
        try:
            pattern = await service.get(id)
            if version is not None and version != pattern.version:
                raise ConflictError(
                    f"Pattern '{id}' is at version {pattern.version!r}, not {version!r}",
                    pattern_id=id,
                    expected_version=version,
                    current_version=pattern.version,
                )

            if title is not None:
                pattern.title = title
            if time_field_name is not None:
                pattern.time_field_name = time_field_name

            try:
                await service.save(pattern)
            except ConflictError:
                # The cached copy is stale; drop it so the next read is fresh
                service.clear_cache(id)
                raise

            return json.dumps(
                {
                    "status": "success",
                    "message": SuccessMessages.PATTERN_SAVED.format(
                        pattern_id=id, version=pattern.version
                    ),
                    "pattern": pattern_summary(pattern),
                }
            )
        except Exception as e:
            return error_response(e, "update pattern")

    tools["pattern_update"] = pattern_update

    @mcp.tool  # type: ignore[arg-type]
    async def pattern_delete(id: str) -> str:
        """
        Delete a pattern.

        Args:
            id: Pattern id

        Returns:
            JSON string with delete result

        Example:
            pattern_delete(id="logs")
        """
        try:
            await service.delete(id)
            return json.dumps(
                {
                    "status": "success",
                    "message": SuccessMessages.PATTERN_DELETED.format(pattern_id=id),
                }
            )
        except Exception as e:
            return error_response(e, "delete pattern")

    tools["pattern_delete"] = pattern_delete

    @mcp.tool  # type: ignore[arg-type]
    async def pattern_refresh_fields(id: str) -> str:
        """
        Rediscover a pattern's fields and save it.

        Args:
            id: Pattern id

        Returns:
            JSON string with the saved pattern summary

        Example:
            pattern_refresh_fields(id="logs")
        """
        try:
            pattern = await service.get(id)
            await service.refresh_fields(pattern)
            await service.save(pattern)
            return json.dumps({"status": "success", "pattern": pattern_summary(pattern)})
        except Exception as e:
            return error_response(e, "refresh fields")

    tools["pattern_refresh_fields"] = pattern_refresh_fields

    @mcp.tool  # type: ignore[arg-type]
    async def pattern_set_default(id: str, force: bool = True) -> str:
        """
        Set the default pattern.

        Args:
            id: Pattern id
            force: Replace an existing default (default: True)

        Returns:
            JSON string with the result

        Example:
            pattern_set_default(id="logs")
        """
        try:
            changed = await service.set_default(id, force=force)
            if not changed:
                return json.dumps(
                    {
                        "status": "error",
                        "message": "A default pattern is already set",
                        "default_pattern_id": service.settings.default_pattern_id,
                    }
                )
            return json.dumps(
                {
                    "status": "success",
                    "message": SuccessMessages.DEFAULT_SET.format(pattern_id=id),
                }
            )
        except Exception as e:
            return error_response(e, "set default pattern")

    tools["pattern_set_default"] = pattern_set_default

    @mcp.tool  # type: ignore[arg-type]
    async def pattern_get_default() -> str:
        """
        Get the default pattern.

        Returns:
            JSON string with the default pattern summary, or null if none is set

        Example:
            pattern_get_default()
        """
        try:
            pattern = await service.get_default()
            return json.dumps(
                {
                    "status": "success",
                    "pattern": pattern_summary(pattern) if pattern else None,
                }
            )
        except Exception as e:
            return error_response(e, "get default pattern")

    tools["pattern_get_default"] = pattern_get_default

    return tools
