"""
The store module describes the object store that selections query, and
provides an in-memory implementation of it.

- `Reader` lists objects of a kind into a caller supplied list container,
  filtered by a label selector and an optional namespace.
- `DynamicClient` hands out `ResourceInterface`s that list loosely typed
  objects of a kind, optionally scoped to a namespace.
- `Writer` creates objects, used for emitting compliance events.

The core never caches or watches, each selection issues one query.
"""

from .store import (
    DynamicClient,
    ListOptions,
    NamespaceableResourceInterface,
    Reader,
    ResourceInterface,
    Writer,
)
from .in_memory import InMemoryCluster, InMemoryResource

__all__ = [
    "DynamicClient",
    "ListOptions",
    "NamespaceableResourceInterface",
    "Reader",
    "ResourceInterface",
    "Writer",
    "InMemoryCluster",
    "InMemoryResource",
]
