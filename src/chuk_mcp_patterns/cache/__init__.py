"""
Caches used by the pattern service.

This module provides:
- DocumentCache: One live Pattern instance per id, with fetch coalescing
- ProjectionCache: Shared list views (ids, titles, selected fields)
"""

from chuk_mcp_patterns.cache.documents import DocumentCache
from chuk_mcp_patterns.cache.projections import ProjectionCache

__all__ = ["DocumentCache", "ProjectionCache"]
