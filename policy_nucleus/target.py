"""Selection of the cluster objects a policy applies to.

A `Target` combines a label selector, an optional namespace, and lists of
include and exclude name globs. The object store is queried with the label
selector and namespace, and the results are then narrowed by name.

Example usage:

```python
from policy_nucleus.resource_list import ConfigMapResourceList
from policy_nucleus.target import Target

target = Target(include=["app-*"], exclude=["app-test"], namespace="default")
config_maps = await target.get_matches(reader, ConfigMapResourceList())
```

Note that unlike a `NamespaceSelector`, an empty Target matches *all* objects.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Optional

from mashumaro import field_options

from . import matcher
from .exceptions import (
    InputException,
    NucleusException,
    PatternSyntaxError,
    StoreQueryError,
)
from .resource_list import ResourceList
from .resources import BaseManifest, ClusterObject, Unstructured
from .selector import LabelSelector, label_selector_as_selector
from .store import (
    ListOptions,
    NamespaceableResourceInterface,
    Reader,
    ResourceInterface,
)

__all__ = [
    "Target",
]

_LOGGER = logging.getLogger(__name__)

MATCH_LABELS = "matchLabels"
MATCH_EXPRESSIONS = "matchExpressions"
LABEL_SELECTOR = "labelSelector"


def validate_patterns(patterns: list[str] | None, side: str) -> None:
    """Assert that no pattern is an empty string."""
    for pattern in patterns or ():
        if not isinstance(pattern, str) or not pattern:
            raise InputException(
                f"Invalid '{side}' pattern {pattern!r}: must be a non-empty string"
            )


def inline_selector(d: dict[Any, Any]) -> dict[Any, Any]:
    """Move inlined label selector fields into a nested labelSelector.

    The presence of either field means a selector is present, even if empty.
    """
    if MATCH_LABELS not in d and MATCH_EXPRESSIONS not in d:
        return d
    d = dict(d)
    selector: dict[str, Any] = {}
    for key in (MATCH_LABELS, MATCH_EXPRESSIONS):
        if (value := d.pop(key, None)) is not None:
            selector[key] = value
    d[LABEL_SELECTOR] = selector
    return d


def flatten_selector(d: dict[Any, Any], *, keep_empty: bool) -> dict[Any, Any]:
    """Inline the nested labelSelector and drop empty name pattern lists.

    With keep_empty, both selector fields are written when a selector is
    present so that an empty selector survives a round trip.
    """
    selector = d.pop(LABEL_SELECTOR, None)
    result: dict[Any, Any] = {}
    if selector is not None:
        for key in (MATCH_LABELS, MATCH_EXPRESSIONS):
            value = selector.get(key)
            if keep_empty or value:
                result[key] = value
    for key, value in d.items():
        if key in ("include", "exclude") and not value:
            continue
        result[key] = value
    return result


async def _list(reader: Reader, res_list: ResourceList, options: ListOptions) -> None:
    try:
        await reader.list(res_list.object_list(), options)
    except NucleusException:
        raise
    except Exception as err:
        raise StoreQueryError(f"Unable to list objects: {err}") from err


@dataclass
class Target(BaseManifest):
    """Criteria selecting objects by labels, namespace, and name patterns."""

    label_selector: Optional[LabelSelector] = field(
        metadata=field_options(alias=LABEL_SELECTOR), default=None
    )
    """Objects must match this label selector, unset selects all objects."""

    namespace: Optional[str] = None
    """If set, only objects in this namespace are selected."""

    include: Optional[list[str]] = None
    """Filepath globs of object names to include, empty includes all names."""

    exclude: Optional[list[str]] = None
    """Filepath globs of object names to exclude."""

    def __post_init__(self) -> None:
        validate_patterns(self.include, matcher.INCLUDE)
        validate_patterns(self.exclude, matcher.EXCLUDE)

    @classmethod
    def __pre_deserialize__(cls, d: dict[Any, Any]) -> dict[Any, Any]:
        return inline_selector(d)

    def __post_serialize__(self, d: dict[Any, Any]) -> dict[Any, Any]:
        return flatten_selector(d, keep_empty=False)

    def match(self, name: str) -> bool:
        """Return whether the name matches the include and exclude lists."""
        return matcher.match(name, self.include, self.exclude)

    def matches(self, names: list[str]) -> set[str]:
        """Return the unique names that match the include and exclude lists."""
        return matcher.match_names(names, self.include, self.exclude)

    def list_options(self) -> ListOptions:
        """Return the store query for the label selector and namespace."""
        return ListOptions(
            label_selector=label_selector_as_selector(self.label_selector),
            namespace=self.namespace or None,
        )

    async def get_matches(
        self, reader: Reader, res_list: ResourceList
    ) -> list[ClusterObject]:
        """Return the objects matched by the Target.

        The kind of objects is determined by the ResourceList, whose container
        is filled by the reader. Objects are returned in the order of the
        reader's response.
        """
        options = self.list_options()
        await _list(reader, res_list, options)
        items = res_list.items()
        matched = matcher.match_objects(items, self.include, self.exclude)
        _LOGGER.debug(
            "Target matched %d of %d objects (selector='%s', namespace=%s)",
            len(matched),
            len(items),
            options.label_selector,
            options.namespace,
        )
        return matched

    async def get_matches_dynamic(
        self, iface: ResourceInterface
    ) -> list[Unstructured]:
        """Return the objects from the dynamic interface matched by the Target.

        The kind of objects is determined by the interface. If the Target has a
        namespace and the interface can be scoped, the namespace overrides any
        scope the interface already had.

        A PatternSyntaxError raised part way through the objects carries the
        objects matched so far in its `partial_result`.
        """
        options = self.list_options()
        if options.namespace and isinstance(iface, NamespaceableResourceInterface):
            iface = iface.namespace(options.namespace)
        try:
            objs = await iface.list(label_selector=str(options.label_selector))
        except NucleusException:
            raise
        except Exception as err:
            raise StoreQueryError(f"Unable to list objects: {err}") from err

        matched: list[Unstructured] = []
        for obj in objs.items:
            try:
                if self.match(obj.name):
                    matched.append(obj)
            except PatternSyntaxError as err:
                err.partial_result = list(matched)
                raise
        _LOGGER.debug(
            "Target matched %d of %d dynamic objects", len(matched), len(objs.items)
        )
        return matched
