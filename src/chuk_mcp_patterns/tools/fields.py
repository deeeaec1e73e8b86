"""
Field tools - MCP tools for field discovery and list views.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from chuk_mcp_patterns.service import PatternService
from chuk_mcp_patterns.tools.patterns import error_response

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer


def register_field_tools(
    mcp: ChukMCPServer,
    service: PatternService,
) -> dict[str, Any]:
    """
    Register field tools with the MCP server.

    Args:
        mcp: The MCP server instance
        service: The pattern service

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def pattern_fields_for_wildcard(
        pattern: str,
        type: str | None = None,
        rollup_index: str | None = None,
    ) -> str:
        """
        Discover the fields an index wildcard expression covers.

        Args:
            pattern: Index wildcard expression (e.g., 'logs-*')
            type: Optional pattern subtype ('rollup')
            rollup_index: Rollup index (rollup patterns only)

        Returns:
            JSON string with the discovered fields

        Example:
            pattern_fields_for_wildcard(pattern="logs-*")
        """
        try:
            fields = await service.get_fields_for_wildcard(
                pattern, type=type, rollup_index=rollup_index
            )
            return json.dumps(
                {
                    "status": "success",
                    "fields": [f.to_attributes() for f in fields],
                    "count": len(fields),
                }
            )
        except Exception as e:
            return error_response(e, "discover fields")

    tools["pattern_fields_for_wildcard"] = pattern_fields_for_wildcard

    @mcp.tool  # type: ignore[arg-type]
    async def pattern_list_fields(field_names: list[str], refresh: bool = False) -> str:
        """
        List selected attributes of every pattern.

        Only projected attributes are available; others come back as null.

        Args:
            field_names: Attribute names ('id' gives the pattern id)
            refresh: Fetch the list again instead of using the cached one

        Returns:
            JSON string with one object per pattern

        Example:
            pattern_list_fields(field_names=["id", "title"])
        """
        try:
            rows = await service.get_fields(field_names, force_refresh=refresh)
            return json.dumps({"status": "success", "patterns": rows, "count": len(rows)})
        except Exception as e:
            return error_response(e, "list pattern fields")

    tools["pattern_list_fields"] = pattern_list_fields

    return tools
