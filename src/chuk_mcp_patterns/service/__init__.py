"""
Pattern service - the orchestrating core.

This module provides:
- PatternService: get/make/save/delete over the caches and the store
"""

from chuk_mcp_patterns.service.patterns import PatternService

__all__ = ["PatternService"]
