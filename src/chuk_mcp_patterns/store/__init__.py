"""
Versioned stores.

This module provides:
- VersionedStore: The persistence contract the service consumes
- InMemoryVersionedStore: Process-local store
- YamlVersionedStore: One YAML file per document
"""

from chuk_mcp_patterns.store.base import VersionedStore, encode_version
from chuk_mcp_patterns.store.memory import InMemoryVersionedStore
from chuk_mcp_patterns.store.yaml_store import YamlVersionedStore

__all__ = [
    "InMemoryVersionedStore",
    "VersionedStore",
    "YamlVersionedStore",
    "encode_version",
]
