"""
Field discovery.

This module provides:
- FieldsFetcher: The discovery contract the service consumes
- MappingFieldsFetcher: Discovery over a static index mapping
"""

from chuk_mcp_patterns.fields.fetcher import FieldsFetcher, MappingFieldsFetcher

__all__ = ["FieldsFetcher", "MappingFieldsFetcher"]
