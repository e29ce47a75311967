"""Flags shared by the commands that select cluster objects."""

from argparse import ArgumentParser
import logging
import pathlib
from typing import Any

from policy_nucleus.resources import BaseManifest, ClusterObject, Unstructured
from policy_nucleus.selector import LabelSelector

_LOGGER = logging.getLogger(__name__)

OUTPUT_FORMATS = ["table", "yaml", "json"]


def add_selector_flags(args: ArgumentParser) -> None:
    """Add the cluster, label selector, and name pattern flags."""
    args.add_argument(
        "--cluster",
        help="Path to a YAML file or directory of YAML files with cluster objects",
        type=pathlib.Path,
        action="append",
        required=True,
    )
    args.add_argument(
        "--selector",
        "-l",
        dest="label_selector",
        help="Label selector to filter on, e.g. 'app=web,tier in (a,b)'",
        type=str,
        default=None,
    )
    args.add_argument(
        "--include",
        help="Filepath glob of object names to include, may be repeated",
        type=str,
        action="append",
        default=None,
    )
    args.add_argument(
        "--exclude",
        help="Filepath glob of object names to exclude, may be repeated",
        type=str,
        action="append",
        default=None,
    )


def add_output_flags(args: ArgumentParser) -> None:
    """Add the output format flag."""
    args.add_argument(
        "--output",
        "-o",
        choices=OUTPUT_FORMATS,
        default="table",
        help="Output format of the command",
    )


def build_label_selector(selector: str | None) -> LabelSelector | None:
    """Return the declarative label selector for the flag, if set."""
    if selector is None:
        return None
    return LabelSelector.parse(selector)


def object_summary(obj: ClusterObject) -> dict[str, Any]:
    """Return the columns printed for an object in table output."""
    return {
        "namespace": obj.namespace,
        "name": obj.name,
        "labels": obj.labels or {},
    }


def object_dict(obj: ClusterObject) -> dict[str, Any]:
    """Return the full object for structured output."""
    if isinstance(obj, Unstructured):
        return obj.content
    if isinstance(obj, BaseManifest):
        return obj.to_dict()
    return object_summary(obj)


def not_found(kind: str, **criteria: Any) -> str:
    """Return a not found message for the selection criteria."""
    desc = ", ".join(f"{k}={v}" for k, v in criteria.items() if v)
    return f"no {kind} objects found" + (f" matching {desc}" if desc else "")
