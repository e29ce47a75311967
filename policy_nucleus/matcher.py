"""Library for matching object names against include and exclude patterns.

Patterns use path-style shell globs: `*` matches any run of characters other
than `/`, `?` matches a single such character, `[...]` matches a character
class (`[^...]` negates it), and `\\` escapes the next character. Unlike
`fnmatch`, a malformed pattern such as `kube-[system` is an error rather than
a literal, and the error aborts the whole selection.

Example usage:

```python
from policy_nucleus import matcher

matcher.match("kube-one", include=["*"], exclude=["kube-*"])  # False
matcher.match("foo", include=["*"], exclude=["kube-*"])  # True
```
"""

from collections.abc import Iterable, Sequence
from functools import lru_cache
import logging
import re
from typing import Protocol, TypeVar

from .exceptions import PatternSyntaxError

__all__ = [
    "match",
    "match_names",
    "match_objects",
    "INCLUDE",
    "EXCLUDE",
]

_LOGGER = logging.getLogger(__name__)

INCLUDE = "include"
EXCLUDE = "exclude"
SEPARATOR = "/"


class _Named(Protocol):
    @property
    def name(self) -> str: ...


T = TypeVar("T", bound=_Named)


class _BadPattern(Exception):
    """Internal marker for an invalid glob, converted to PatternSyntaxError."""


def _class_escape(pattern: str, pos: int) -> tuple[str, int]:
    """Read one character of a character class, returning it and the next position."""
    if pos >= len(pattern) or pattern[pos] in ("-", "]"):
        raise _BadPattern()
    if pattern[pos] == "\\":
        pos += 1
        if pos >= len(pattern):
            raise _BadPattern()
    return pattern[pos], pos + 1


def _translate_class(pattern: str, pos: int) -> tuple[str, int]:
    """Translate a character class starting after `[` into a regular expression."""
    negated = False
    if pos < len(pattern) and pattern[pos] == "^":
        negated = True
        pos += 1
    ranges: list[str] = []
    count = 0
    while True:
        if pos < len(pattern) and pattern[pos] == "]" and count > 0:
            pos += 1
            break
        lo, pos = _class_escape(pattern, pos)
        hi = lo
        if pos < len(pattern) and pattern[pos] == "-":
            hi, pos = _class_escape(pattern, pos + 1)
        count += 1
        # An inverted range is valid but never matches anything.
        if lo <= hi:
            ranges.append(
                re.escape(lo) if lo == hi else f"{re.escape(lo)}-{re.escape(hi)}"
            )
    if not ranges:
        return ("(?s:.)" if negated else "(?!)"), pos
    body = "".join(ranges)
    return (f"[^{body}]" if negated else f"[{body}]"), pos


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    """Compile a glob into a regular expression, raising _BadPattern if invalid."""
    parts: list[str] = []
    sep = re.escape(SEPARATOR)
    pos = 0
    while pos < len(pattern):
        char = pattern[pos]
        pos += 1
        if char == "*":
            parts.append(f"[^{sep}]*")
        elif char == "?":
            parts.append(f"[^{sep}]")
        elif char == "[":
            translated, pos = _translate_class(pattern, pos)
            parts.append(translated)
        elif char == "\\":
            if pos >= len(pattern):
                raise _BadPattern()
            parts.append(re.escape(pattern[pos]))
            pos += 1
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def _glob_match(pattern: str, name: str, side: str) -> bool:
    try:
        regex = _compile(pattern)
    except _BadPattern:
        raise PatternSyntaxError(pattern, side) from None
    return regex.fullmatch(name) is not None


def match(
    name: str,
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
) -> bool:
    """Return whether the name matches the include and exclude lists.

    An empty or unset include list includes everything. Include patterns are
    checked in order until one matches, then any matching exclude pattern
    rejects the name.
    """
    included = not include
    for pattern in include or ():
        if included := _glob_match(pattern, name, INCLUDE):
            break
    if not included:
        return False
    for pattern in exclude or ():
        if _glob_match(pattern, name, EXCLUDE):
            return False
    return True


def match_names(
    names: Iterable[str],
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
) -> set[str]:
    """Return the unique set of names matching the include and exclude lists."""
    matched = {name for name in names if match(name, include, exclude)}
    _LOGGER.debug("Matched %d names", len(matched))
    return matched


def match_objects(
    objects: Iterable[T],
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
) -> list[T]:
    """Return the objects whose `name` matches, in input order.

    Objects are not de-duplicated, so an object repeated in the input is
    repeated in the result.
    """
    return [obj for obj in objects if match(obj.name, include, exclude)]
