#!/usr/bin/env python3
"""
Example: Make, edit and save index patterns against a YAML store.

Usage:
    python examples/pattern_lifecycle.py
    # Creates: examples/output/saved_objects/index-pattern/*.yaml

Shows that:
1. Patterns are built from index wildcards with discovered fields
2. List views come from one shared bulk fetch
3. Concurrent gets share one instance
4. A stale save is rejected as a conflict instead of overwriting
"""

import asyncio
import shutil
from pathlib import Path

from chuk_mcp_patterns.errors import ConflictError
from chuk_mcp_patterns.fields import MappingFieldsFetcher
from chuk_mcp_patterns.models import FieldSpec, PatternSpec
from chuk_mcp_patterns.service import PatternService
from chuk_mcp_patterns.store import YamlVersionedStore


async def main() -> None:
    """Walk a pattern through its lifecycle."""
    output_dir = Path(__file__).parent / "output"
    store_dir = output_dir / "saved_objects"
    shutil.rmtree(store_dir, ignore_errors=True)

    fetcher = MappingFieldsFetcher(
        {
            "logs-2024.01": [
                FieldSpec(name="@timestamp", type="date", searchable=True, aggregatable=True),
                FieldSpec(name="status", type="number", aggregatable=True),
            ],
            "logs-2024.02": [
                FieldSpec(name="@timestamp", type="date", searchable=True, aggregatable=True),
                FieldSpec(name="status", type="string", searchable=True),
            ],
            "metrics-cpu": [FieldSpec(name="cpu", type="number", aggregatable=True)],
        }
    )
    store = YamlVersionedStore(store_dir)
    service = PatternService(store, fetcher)

    print("CHUK Patterns Lifecycle")
    print("=" * 40)

    # Make two patterns
    logs = await service.make(
        id="logs", spec=PatternSpec(title="logs-*", time_field_name="@timestamp")
    )
    metrics = await service.make(id="metrics", spec=PatternSpec(title="metrics-*"))
    for pattern in (logs, metrics):
        print(f"Made {pattern.id}: {pattern.title} ({len(pattern.fields)} fields)")
        print(f"  version: {pattern.version}")
        print(f"  time based: {pattern.is_time_based()}")

    status = logs.get_field("status")
    print(f"  'status' in logs-*: {status.type} {status.conflict_descriptions}")
    print()

    # List views
    titles = await service.get_titles()
    print("Titles:", ", ".join(f"{t.id}={t.title}" for t in titles))
    print()

    # Shared instances
    a, b = await asyncio.gather(service.get("logs"), service.get("logs"))
    print(f"Concurrent gets share an instance: {a is b}")

    # Someone else edits the stored document
    saved = await store.get(service.pattern_type, "logs")
    await store.update(
        service.pattern_type, "logs", {"title": "logs-2024.*"}, version=saved.version
    )

    a.title = "logs-*,-logs-internal"
    try:
        await service.save(a)
    except ConflictError as e:
        print(f"Save rejected: {e.message}")
        print(f"  instance status: {a.status.value}")

    # Recover by fetching again
    service.clear_cache("logs")
    fresh = await service.get("logs")
    print(f"Fresh copy: {fresh.title} at {fresh.version}")
    fresh.title = "logs-*,-logs-internal"
    await service.save(fresh)
    print(f"Saved: {fresh.title} at {fresh.version}")
    print()
    print(f"Documents written to: {store_dir}")


if __name__ == "__main__":
    asyncio.run(main())
