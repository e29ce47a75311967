"""Exceptions related to policy-nucleus."""

from typing import Any

__all__ = [
    "NucleusException",
    "InputException",
    "PatternSyntaxError",
    "LabelSelectorError",
    "ResourceListShapeError",
    "StoreQueryError",
]


class NucleusException(Exception):
    """Generic base exception used for this library."""


class InputException(NucleusException):
    """Raised when selection criteria or policy fields are not formatted as expected."""


class PatternSyntaxError(InputException):
    """Raised when an include or exclude pattern is not a valid glob."""

    def __init__(self, pattern: str, side: str) -> None:
        super().__init__(
            f"error parsing '{side}' pattern '{pattern}': syntax error in pattern"
        )
        self.pattern = pattern
        self.side = side
        self.partial_result: list[Any] = []
        """Objects matched before the error, only set by the dynamic strategy."""


class LabelSelectorError(InputException):
    """Raised when a label selector requirement is malformed."""


class ResourceListShapeError(NucleusException):
    """Raised when items can not be extracted from an unfamiliar list type."""

    def __init__(self, type_name: str, reason: str) -> None:
        super().__init__(
            f"unable to use {type_name} as a nucleus ResourceList: {reason}"
        )
        self.type_name = type_name
        self.reason = reason


class StoreQueryError(NucleusException):
    """Raised when the object store fails to answer a query."""
