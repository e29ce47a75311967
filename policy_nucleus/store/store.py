"""Interfaces of the object store queried when selecting resources."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from policy_nucleus.resources import ObjectList, UnstructuredList
from policy_nucleus.selector import Selector


@dataclass(frozen=True)
class ListOptions:
    """Options narrowing a list query."""

    label_selector: Selector = field(default_factory=Selector)
    """Objects returned must match this selector."""

    namespace: str | None = None
    """If set, only objects in this namespace are returned."""


class Reader(ABC):
    """Lists objects into typed list containers."""

    @abstractmethod
    async def list(
        self, object_list: ObjectList, options: ListOptions | None = None
    ) -> None:
        """List objects of the container's item kind, replacing its items."""


class Writer(ABC):
    """Creates objects in the cluster."""

    @abstractmethod
    async def create(self, doc: dict[str, Any]) -> None:
        """Create the object described by the raw document."""


class ResourceInterface(ABC):
    """Lists loosely typed objects of a single kind."""

    @abstractmethod
    async def list(self, label_selector: str = "") -> UnstructuredList:
        """List objects matching the label selector string."""


class NamespaceableResourceInterface(ResourceInterface):
    """A ResourceInterface that can be restricted to a namespace."""

    @abstractmethod
    def namespace(self, namespace: str) -> ResourceInterface:
        """Return an interface listing only objects in the namespace."""


class DynamicClient(ABC):
    """Hands out ResourceInterfaces by kind."""

    @abstractmethod
    def resource(self, kind: str) -> NamespaceableResourceInterface:
        """Return the interface for objects of the kind across all namespaces."""
