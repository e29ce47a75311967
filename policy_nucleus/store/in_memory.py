"""Module for an in memory cluster object store."""

import copy
import logging
from typing import Any

from policy_nucleus.exceptions import InputException
from policy_nucleus.resources import (
    NamedResource,
    ObjectList,
    Unstructured,
    UnstructuredList,
)
from policy_nucleus.selector import Selector, parse_selector

from .store import (
    DynamicClient,
    ListOptions,
    NamespaceableResourceInterface,
    Reader,
    ResourceInterface,
    Writer,
)

_LOGGER = logging.getLogger(__name__)


class InMemoryCluster(Reader, Writer, DynamicClient):
    """In-memory implementation of the object store interfaces.

    Stores raw kubernetes documents keyed by NamedResource. Lists are returned
    ordered by namespace then name, the same as a kubernetes API server.
    """

    def __init__(self) -> None:
        """Initialize the InMemoryCluster."""
        self._docs: dict[NamedResource, dict[str, Any]] = {}

    def add_doc(self, doc: dict[str, Any]) -> NamedResource:
        """Add or replace a raw kubernetes document."""
        if not (kind := doc.get("kind")):
            raise InputException(f"Invalid object missing kind: {doc}")
        metadata = doc.get("metadata") or {}
        if not (name := metadata.get("name")):
            raise InputException(f"Invalid object missing metadata.name: {doc}")
        resource_id = NamedResource(kind, metadata.get("namespace"), name)
        _LOGGER.debug("Adding object %s to cluster", resource_id)
        self._docs[resource_id] = doc
        return resource_id

    def get_doc(self, resource_id: NamedResource) -> dict[str, Any] | None:
        """Return the raw document for the resource, if present."""
        return self._docs.get(resource_id)

    def select(
        self, kind: str, selector: Selector, namespace: str | None = None
    ) -> list[dict[str, Any]]:
        """Return copies of the documents of the kind that match the query."""
        results = []
        for resource_id in sorted(
            self._docs, key=lambda rid: (rid.namespace or "", rid.name)
        ):
            if resource_id.kind != kind:
                continue
            if namespace and resource_id.namespace != namespace:
                continue
            doc = self._docs[resource_id]
            if not selector.matches((doc.get("metadata") or {}).get("labels")):
                continue
            results.append(copy.deepcopy(doc))
        _LOGGER.debug(
            "Listed %d %s objects (selector='%s', namespace=%s)",
            len(results),
            kind,
            selector,
            namespace,
        )
        return results

    async def list(
        self, object_list: ObjectList, options: ListOptions | None = None
    ) -> None:
        """List objects of the container's item kind, replacing its items."""
        options = options or ListOptions()
        docs = self.select(
            object_list.item_kind, options.label_selector, options.namespace
        )
        object_list.items = [object_list.parse_item(doc) for doc in docs]

    async def create(self, doc: dict[str, Any]) -> None:
        """Create the object, failing if it already exists."""
        metadata = doc.get("metadata") or {}
        resource_id = NamedResource(
            doc.get("kind", ""), metadata.get("namespace"), metadata.get("name", "")
        )
        if resource_id in self._docs:
            raise InputException(f"Object {resource_id} already exists")
        self.add_doc(doc)

    def resource(self, kind: str) -> "InMemoryResource":
        """Return the interface for objects of the kind across all namespaces."""
        return InMemoryResource(self, kind)


class InMemoryResource(NamespaceableResourceInterface):
    """Dynamic interface over one kind in an InMemoryCluster."""

    def __init__(
        self, cluster: InMemoryCluster, kind: str, namespace: str | None = None
    ) -> None:
        """Initialize InMemoryResource."""
        self._cluster = cluster
        self._kind = kind
        self._namespace = namespace

    def namespace(self, namespace: str) -> ResourceInterface:
        """Return an interface scoped to the namespace, replacing any existing scope."""
        return InMemoryResource(self._cluster, self._kind, namespace)

    async def list(self, label_selector: str = "") -> UnstructuredList:
        """List objects matching the label selector string."""
        docs = self._cluster.select(
            self._kind, parse_selector(label_selector), self._namespace
        )
        return UnstructuredList(items=[Unstructured(content=doc) for doc in docs])
