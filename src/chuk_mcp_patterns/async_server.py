#!/usr/bin/env python3
"""
Async Pattern MCP Server using chuk-mcp-server

This server provides MCP tools for managing versioned index patterns.
Patterns are stored as YAML documents with optimistic concurrency: every
save carries the version it was read at, and stale saves are reported as
conflicts instead of overwriting someone else's change.

The server provides tools for:
- Listing patterns and selected pattern attributes
- Making patterns from index wildcard expressions (with field discovery)
- Updating, refreshing and deleting patterns
- Choosing the default pattern
"""

import logging
import os
from pathlib import Path

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_patterns.config import ServiceSettings
from chuk_mcp_patterns.fields import MappingFieldsFetcher
from chuk_mcp_patterns.service import PatternService
from chuk_mcp_patterns.store import YamlVersionedStore
from chuk_mcp_patterns.tools import register_field_tools, register_pattern_tools

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-patterns")

# Paths - working directory defaults, overridable from the environment
BASE_PATH = Path.cwd()
STORE_DIR = Path(os.environ.get("CHUK_PATTERNS_STORE_DIR", BASE_PATH / "saved_objects"))
FIELDS_FILE = Path(os.environ.get("CHUK_PATTERNS_FIELDS_FILE", BASE_PATH / "fields.yaml"))
SETTINGS_FILE = Path(
    os.environ.get("CHUK_PATTERNS_SETTINGS_FILE", BASE_PATH / "patterns.settings.yaml")
)

# Create the service
settings = ServiceSettings.from_yaml(SETTINGS_FILE)
pattern_service = PatternService(
    store=YamlVersionedStore(STORE_DIR),
    fields_fetcher=MappingFieldsFetcher.from_yaml(FIELDS_FILE),
    settings=settings,
)

# Register all tools
pattern_tools = register_pattern_tools(mcp, pattern_service)
field_tools = register_field_tools(mcp, pattern_service)

# Export tool functions for direct access
pattern_list = pattern_tools["pattern_list"]
pattern_get = pattern_tools["pattern_get"]
pattern_make = pattern_tools["pattern_make"]
pattern_update = pattern_tools["pattern_update"]
pattern_delete = pattern_tools["pattern_delete"]
pattern_refresh_fields = pattern_tools["pattern_refresh_fields"]
pattern_set_default = pattern_tools["pattern_set_default"]
pattern_get_default = pattern_tools["pattern_get_default"]

pattern_fields_for_wildcard = field_tools["pattern_fields_for_wildcard"]
pattern_list_fields = field_tools["pattern_list_fields"]

logger.info("CHUK Patterns MCP Server initialized")
logger.info(f"  Store dir: {STORE_DIR}")
logger.info(f"  Fields file: {FIELDS_FILE}")
logger.info(f"  Page size: {settings.per_page}")
