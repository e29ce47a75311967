"""Representation of the cluster objects selected by policies.

Selection only needs a name, an optional namespace, and labels, described by
the `ClusterObject` protocol. Typed objects are parsed from raw kubernetes
documents, and `Unstructured` wraps a raw document for kinds without a typed
representation.

List containers hold the `items` written by an object store query. Each
declares the kind of its items so a store knows what to list.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, ClassVar, Optional, Protocol, runtime_checkable

from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig
import yaml

from .exceptions import InputException

__all__ = [
    "ClusterObject",
    "BaseManifest",
    "NamedResource",
    "Namespace",
    "ConfigMap",
    "Unstructured",
    "ObjectList",
    "NamespaceList",
    "ConfigMapList",
    "UnstructuredList",
]

_LOGGER = logging.getLogger(__name__)

NAMESPACE_KIND = "Namespace"
CONFIG_MAP_KIND = "ConfigMap"
CORE_API_VERSION = "v1"


@runtime_checkable
class ClusterObject(Protocol):
    """The capability needed from an object to select it."""

    @property
    def name(self) -> str:
        """The name of the object."""

    @property
    def namespace(self) -> str | None:
        """The namespace of the object, unset for cluster scoped objects."""

    @property
    def labels(self) -> dict[str, str] | None:
        """The labels on the object."""


def _check_version(doc: dict[str, Any], version: str) -> None:
    """Assert that the resource has the specified version."""
    if not (api_version := doc.get("apiVersion")):
        raise InputException(f"Invalid object missing apiVersion: {doc}")
    if api_version != version:
        raise InputException(f"Invalid object expected '{version}': {doc}")


def _metadata(cls: type, doc: dict[str, Any]) -> dict[str, Any]:
    if not (metadata := doc.get("metadata")):
        raise InputException(f"Invalid {cls.__name__} missing metadata: {doc}")
    if not metadata.get("name"):
        raise InputException(f"Invalid {cls.__name__} missing metadata.name: {doc}")
    return metadata


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for all serializable objects."""

    @classmethod
    def parse_yaml(cls, content: str) -> Any:
        """Parse a serialized object."""
        return cls.from_dict(yaml.safe_load(content))

    def yaml(self) -> str:
        """Return a YAML string representation of the object."""
        return yaml.dump(self.to_dict(), sort_keys=False, explicit_start=True)

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a kubernetes resource."""

    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass
class Namespace(BaseManifest):
    """A Namespace provides a scope for names of namespaced objects."""

    kind: ClassVar[str] = NAMESPACE_KIND
    """The kind of the object."""

    name: str
    """The name of the Namespace."""

    labels: Optional[dict[str, str]] = None
    """The labels on the Namespace."""

    @property
    def namespace(self) -> str | None:
        """Namespaces are not namespaced."""
        return None

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Namespace":
        """Parse a Namespace from a kubernetes resource."""
        _check_version(doc, CORE_API_VERSION)
        metadata = _metadata(cls, doc)
        return cls(name=metadata["name"], labels=metadata.get("labels"))


@dataclass
class ConfigMap(BaseManifest):
    """A ConfigMap is an API object used to store data in key-value pairs."""

    kind: ClassVar[str] = CONFIG_MAP_KIND
    """The kind of the object."""

    name: str
    """The name of the ConfigMap."""

    namespace: Optional[str] = None
    """The namespace of the ConfigMap."""

    labels: Optional[dict[str, str]] = None
    """The labels on the ConfigMap."""

    data: Optional[dict[str, str]] = field(
        metadata={"serialize": "omit"}, default=None
    )
    """The data in the ConfigMap."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "ConfigMap":
        """Parse a ConfigMap from a kubernetes resource."""
        _check_version(doc, CORE_API_VERSION)
        metadata = _metadata(cls, doc)
        return cls(
            name=metadata["name"],
            namespace=metadata.get("namespace"),
            labels=metadata.get("labels"),
            data=doc.get("data"),
        )


@dataclass
class Unstructured:
    """A loosely typed object wrapping a raw kubernetes document."""

    content: dict[str, Any]
    """The raw document."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Unstructured":
        """Wrap a raw kubernetes document."""
        _metadata(cls, doc)
        return cls(content=doc)

    @property
    def _meta(self) -> dict[str, Any]:
        return self.content.get("metadata") or {}

    @property
    def kind(self) -> str:
        return self.content.get("kind", "")

    @property
    def api_version(self) -> str:
        return self.content.get("apiVersion", "")

    @property
    def name(self) -> str:
        return self._meta.get("name", "")

    @property
    def namespace(self) -> str | None:
        return self._meta.get("namespace")

    @property
    def labels(self) -> dict[str, str] | None:
        return self._meta.get("labels")

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name


@dataclass
class ObjectList:
    """Base class for containers of objects written by a store query."""

    item_kind: ClassVar[str]
    """The kind of the items in the list."""

    items: list[Any] = field(default_factory=list)
    """The objects in the list."""

    @classmethod
    def parse_item(cls, doc: dict[str, Any]) -> Any:
        """Parse a raw document into an item of this list."""
        raise NotImplementedError()


@dataclass
class NamespaceList(ObjectList):
    """A list of Namespaces."""

    item_kind: ClassVar[str] = NAMESPACE_KIND

    items: list[Namespace] = field(default_factory=list)

    @classmethod
    def parse_item(cls, doc: dict[str, Any]) -> Namespace:
        return Namespace.parse_doc(doc)


@dataclass
class ConfigMapList(ObjectList):
    """A list of ConfigMaps."""

    item_kind: ClassVar[str] = CONFIG_MAP_KIND

    items: list[ConfigMap] = field(default_factory=list)

    @classmethod
    def parse_item(cls, doc: dict[str, Any]) -> ConfigMap:
        return ConfigMap.parse_doc(doc)


@dataclass
class UnstructuredList:
    """A list of loosely typed objects returned by a dynamic interface."""

    items: list[Unstructured] = field(default_factory=list)


def unstructured_list(kind: str) -> type[ObjectList]:
    """Return a list container type for items of any kind, wrapped as Unstructured."""

    @dataclass
    class _UnstructuredObjectList(ObjectList):
        item_kind: ClassVar[str] = kind

        items: list[Unstructured] = field(default_factory=list)

        @classmethod
        def parse_item(cls, doc: dict[str, Any]) -> Unstructured:
            return Unstructured.parse_doc(doc)

    _UnstructuredObjectList.__name__ = f"{kind}List"
    _UnstructuredObjectList.__qualname__ = f"{kind}List"
    return _UnstructuredObjectList

