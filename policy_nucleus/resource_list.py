"""Adapters exposing the items of a list container as cluster objects.

A `ResourceList` pairs a list container, which an object store writes query
results into, with a way to read those results back as `ClusterObject`s.

Typed adapters are the preferred path: they are written for a specific list
type, never fail, and avoid any inspection at runtime. Register them with
`register_resource_list` so that `resource_list_for` can find them.

`ReflectiveResourceList` is the slow path for list types nobody has written an
adapter for. It inspects the container at runtime for an `items` sequence and
fails with a `ResourceListShapeError` if the container does not have the
expected shape. Callers may supply an `extract` function to tell it where the
items are for a container that does not follow the `items` convention.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence, Set
import logging
from typing import Any, Generic, TypeVar

from .exceptions import ResourceListShapeError
from .resources import (
    ClusterObject,
    ConfigMapList,
    NamespaceList,
    ObjectList,
    Unstructured,
)

__all__ = [
    "ResourceList",
    "NamespaceResourceList",
    "ConfigMapResourceList",
    "ReflectiveResourceList",
    "register_resource_list",
    "registered_list_type",
    "resource_list_for",
]

_LOGGER = logging.getLogger(__name__)

ITEMS_FIELD = "items"

L = TypeVar("L", bound=ObjectList)

_NOT_RECORD_TYPES = (str, bytes, int, float, bool, Mapping, Sequence, Set)

_ADAPTERS: dict[type, Callable[[Any], "ResourceList"]] = {}


class ResourceList(ABC):
    """A list container along with a uniform view of its items."""

    @abstractmethod
    def items(self) -> list[ClusterObject]:
        """Return the items in the list, in the same order as the container."""

    @abstractmethod
    def object_list(self) -> Any:
        """Return the container an object store writes query results into."""


class TypedResourceList(ResourceList, Generic[L]):
    """A ResourceList for a list container whose items are already cluster objects."""

    list_type: type[L]

    def __init__(self, object_list: L | None = None) -> None:
        """Initialize TypedResourceList."""
        self._list = object_list if object_list is not None else self.list_type()

    def items(self) -> list[ClusterObject]:
        return list(self._list.items)

    def object_list(self) -> L:
        return self._list


def register_resource_list(
    list_type: type,
) -> Callable[[type[ResourceList]], type[ResourceList]]:
    """Register a typed ResourceList adapter for a list container type."""

    def decorator(adapter: type[ResourceList]) -> type[ResourceList]:
        _ADAPTERS[list_type] = adapter
        return adapter

    return decorator


@register_resource_list(NamespaceList)
class NamespaceResourceList(TypedResourceList[NamespaceList]):
    """ResourceList for Namespaces."""

    list_type = NamespaceList


@register_resource_list(ConfigMapList)
class ConfigMapResourceList(TypedResourceList[ConfigMapList]):
    """ResourceList for ConfigMaps."""

    list_type = ConfigMapList


def _type_name(value: Any) -> str:
    value_type = type(value)
    return f"{value_type.__module__}.{value_type.__qualname__}"


class ReflectiveResourceList(ResourceList):
    """ResourceList for any list container, found by inspecting it at runtime.

    The container must be a record (not a scalar, string, mapping or
    collection) with an `items` attribute holding a sequence. Each element
    must be a `ClusterObject`, or a raw kubernetes document which is wrapped
    as an `Unstructured`. Prefer a typed adapter when one can be written, as
    it will be faster and can not fail.
    """

    def __init__(
        self,
        client_list: Any,
        extract: Callable[[Any], Any] | None = None,
    ) -> None:
        """Initialize ReflectiveResourceList."""
        self._list = client_list
        self._extract = extract

    def _raw_items(self) -> Any:
        if self._extract is not None:
            return self._extract(self._list)
        if self._list is None or isinstance(self._list, _NOT_RECORD_TYPES):
            raise ResourceListShapeError(
                _type_name(self._list), "the underlying value was not a record type"
            )
        try:
            return getattr(self._list, ITEMS_FIELD)
        except AttributeError:
            raise ResourceListShapeError(
                _type_name(self._list),
                f"the underlying record does not have a field called '{ITEMS_FIELD}'",
            ) from None

    def items(self) -> list[ClusterObject]:
        """Return the items, raising ResourceListShapeError if any can't be used."""
        raw_items = self._raw_items()
        if isinstance(raw_items, (str, bytes)) or not isinstance(raw_items, Sequence):
            raise ResourceListShapeError(
                _type_name(self._list),
                f"the '{ITEMS_FIELD}' field in the underlying record isn't a sequence",
            )
        items: list[ClusterObject] = []
        for item in raw_items:
            if isinstance(item, ClusterObject):
                items.append(item)
                continue
            if isinstance(item, Mapping) and isinstance(item.get("metadata"), Mapping):
                items.append(Unstructured(content=dict(item)))
                continue
            raise ResourceListShapeError(
                _type_name(self._list),
                f"an item in the underlying record's '{ITEMS_FIELD}' sequence could "
                "not be used as a cluster object",
            )
        return items

    def object_list(self) -> Any:
        return self._list


def resource_list_for(object_list: Any) -> ResourceList:
    """Return the registered typed adapter for the container, or a reflective one."""
    if (adapter := _ADAPTERS.get(type(object_list))) is not None:
        return adapter(object_list)
    _LOGGER.warning(
        "No ResourceList registered for %s, using reflection", _type_name(object_list)
    )
    return ReflectiveResourceList(object_list)


def registered_list_type(kind: str) -> type[ObjectList] | None:
    """Return the list container type with a typed adapter for the kind, if any."""
    for list_type in _ADAPTERS:
        if getattr(list_type, "item_kind", None) == kind:
            return list_type
    return None
