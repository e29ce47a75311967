"""Policy-nucleus targets action."""

from argparse import (
    ArgumentParser,
    BooleanOptionalAction,
    _SubParsersAction as SubParsersAction,
)
import logging
import pathlib
from typing import Any, cast

from policy_nucleus.loader import load_cluster
from policy_nucleus.resource_list import registered_list_type, resource_list_for
from policy_nucleus.resources import ClusterObject
from policy_nucleus.target import Target

from . import selector
from .format import formatter_for

_LOGGER = logging.getLogger(__name__)


class TargetsAction:
    """Print the objects of a kind matched by a Target."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "targets",
                aliases=["tg", "target"],
                help="Get the objects matched by a Target",
                description=(
                    "Print the objects of a kind that a policy with the target "
                    "would apply to. An empty target matches every object."
                ),
            ),
        )
        selector.add_selector_flags(args)
        args.add_argument(
            "--kind",
            help="Kind of the objects to select, e.g. ConfigMap",
            type=str,
            required=True,
        )
        args.add_argument(
            "--namespace",
            "-n",
            help="Only select objects in this namespace",
            type=str,
            default=None,
        )
        args.add_argument(
            "--dynamic",
            default=False,
            action=BooleanOptionalAction,
            help="List through the dynamic interface even for kinds with a typed list",
        )
        selector.add_output_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(
        self,
        cluster: list[pathlib.Path],
        kind: str,
        namespace: str | None,
        label_selector: str | None,
        include: list[str] | None,
        exclude: list[str] | None,
        dynamic: bool,
        output: str,
        **kwargs: Any,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        target = Target(
            label_selector=selector.build_label_selector(label_selector),
            namespace=namespace,
            include=include,
            exclude=exclude,
        )
        store = await load_cluster(cluster)

        objs: list[ClusterObject]
        list_type = registered_list_type(kind)
        if list_type is None or dynamic:
            _LOGGER.debug("Selecting %s objects through the dynamic interface", kind)
            objs = list(await target.get_matches_dynamic(store.resource(kind)))
        else:
            res_list = resource_list_for(list_type())
            objs = await target.get_matches(store, res_list)

        if not objs:
            print(
                selector.not_found(
                    kind,
                    namespace=namespace,
                    selector=label_selector,
                    include=include,
                    exclude=exclude,
                )
            )
            return

        if output == "table":
            cols = ["name", "labels"]
            if namespace is None:
                cols.insert(0, "namespace")
            rows = [selector.object_summary(obj) for obj in objs]
        else:
            cols = []
            rows = [selector.object_dict(obj) for obj in objs]
        formatter_for(output, cols).print(rows)
