"""
MCP tool implementations.

Tools are organized by domain:
- patterns - Pattern lifecycle
- fields - Field discovery and list views
"""

from chuk_mcp_patterns.tools.fields import register_field_tools
from chuk_mcp_patterns.tools.patterns import register_pattern_tools

__all__ = [
    "register_field_tools",
    "register_pattern_tools",
]
