"""Library for formatting selected objects as console output."""

from abc import ABC, abstractmethod
from collections.abc import Generator
import json
import sys
from typing import Any, TextIO

import yaml

__all__ = [
    "format_columns",
    "TableFormatter",
    "StructFormatter",
    "YamlFormatter",
    "JsonFormatter",
    "formatter_for",
]

PADDING = 4
EMPTY_CELL = "<none>"


def _cell(value: Any) -> str:
    if value is None or value == "":
        return EMPTY_CELL
    if isinstance(value, dict):
        return ",".join(f"{k}={v}" for k, v in sorted(value.items())) or EMPTY_CELL
    return str(value)


def format_columns(
    headers: list[str], rows: list[list[str]]
) -> Generator[str, None, None]:
    """Yield the header and rows padded to the widest value of each column."""
    data = [headers] + rows
    if not headers:
        return
    widths = [0] * len(headers)
    for row in data:
        for i, value in enumerate(row):
            widths[i] = max(widths[i], len(value))
    format_string = "".join(f"{{:{w + PADDING}}}" for w in widths)
    for row in data:
        yield format_string.format(*row).rstrip()


class StructFormatter(ABC):
    """A formatter of selected objects."""

    @abstractmethod
    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        """Format the data objects."""

    def print(
        self, data: list[dict[str, Any]], file: TextIO | None = None
    ) -> None:
        """Output the data objects, to stdout unless a file is given."""
        file = file or sys.stdout
        for line in self.format(data):
            print(line, file=file)


class TableFormatter(StructFormatter):
    """A formatter that prints a column per key."""

    def __init__(self, keys: list[str]) -> None:
        """Initialize TableFormatter with the keys to print."""
        self._keys = keys

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        if not data:
            return
        rows = [[_cell(row.get(key)) for key in self._keys] for row in data]
        yield from format_columns([key.upper() for key in self._keys], rows)


class YamlFormatter(StructFormatter):
    """A formatter that prints a yaml document per object."""

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        if not data:
            return
        content = yaml.dump_all(data, sort_keys=False, explicit_start=True)
        yield from content.rstrip("\n").split("\n")


class JsonFormatter(StructFormatter):
    """A formatter that prints a json array of the objects."""

    def format(self, data: list[dict[str, Any]]) -> Generator[str, None, None]:
        yield from json.dumps(data, indent=4, sort_keys=False).split("\n")


def formatter_for(output: str, keys: list[str]) -> StructFormatter:
    """Return the formatter for the output flag."""
    if output == "yaml":
        return YamlFormatter()
    if output == "json":
        return JsonFormatter()
    return TableFormatter(keys)
