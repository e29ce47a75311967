"""Library for loading cluster objects from local YAML files.

Files may hold multiple documents, and documents of kind `List` are expanded
into their items. A directory is searched for `*.yaml` and `*.yml` files.
"""

import logging
from pathlib import Path
from typing import Any

import aiofiles
import yaml

from .exceptions import InputException
from .store import InMemoryCluster

__all__ = [
    "load_cluster",
    "read_docs",
]

_LOGGER = logging.getLogger(__name__)

LIST_KIND = "List"
YAML_SUFFIXES = (".yaml", ".yml")


def _expand(doc: Any) -> list[dict[str, Any]]:
    if not doc:
        return []
    if not isinstance(doc, dict):
        raise InputException(f"Invalid document, expected an object: {doc}")
    kind = doc.get("kind") or ""
    if kind == LIST_KIND or (kind.endswith(LIST_KIND) and "items" in doc):
        return [item for item in doc.get("items") or () if item]
    return [doc]


def _yaml_files(path: Path) -> list[Path]:
    if not path.exists():
        raise InputException(f"Unable to find input path {path}")
    if path.is_dir():
        return sorted(p for p in path.rglob("*") if p.suffix in YAML_SUFFIXES)
    return [path]


async def read_docs(path: Path) -> list[dict[str, Any]]:
    """Return the kubernetes documents in a YAML file or directory."""
    docs: list[dict[str, Any]] = []
    for yaml_file in _yaml_files(path):
        async with aiofiles.open(str(yaml_file)) as f:
            content = await f.read()
        try:
            for doc in yaml.safe_load_all(content):
                docs.extend(_expand(doc))
        except yaml.YAMLError as err:
            raise InputException(f"Unable to parse {yaml_file}: {err}") from err
    _LOGGER.debug("Read %d documents from %s", len(docs), path)
    return docs


async def load_cluster(paths: list[Path]) -> InMemoryCluster:
    """Return an InMemoryCluster holding the documents found in the paths."""
    cluster = InMemoryCluster()
    for path in paths:
        for doc in await read_docs(path):
            cluster.add_doc(doc)
    return cluster
