"""Policy-nucleus namespaces action."""

from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
import logging
import pathlib
from typing import Any, cast

from policy_nucleus.loader import load_cluster
from policy_nucleus.policycore import NamespaceSelector

from . import selector
from .format import formatter_for

_LOGGER = logging.getLogger(__name__)


class NamespacesAction:
    """Print the namespaces matched by a NamespaceSelector."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "namespaces",
                aliases=["ns"],
                help="Get the namespaces matched by a NamespaceSelector",
                description=(
                    "Print the namespaces a policy with the namespace selector "
                    "would apply to. A selector with no label selector and no "
                    "include patterns matches no namespaces."
                ),
            ),
        )
        selector.add_selector_flags(args)
        selector.add_output_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(
        self,
        cluster: list[pathlib.Path],
        label_selector: str | None,
        include: list[str] | None,
        exclude: list[str] | None,
        output: str,
        **kwargs: Any,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        ns_selector = NamespaceSelector(
            label_selector=selector.build_label_selector(label_selector),
            include=include,
            exclude=exclude,
        )
        store = await load_cluster(cluster)
        names = await ns_selector.get_namespaces(store)
        if not names:
            print(
                selector.not_found(
                    "Namespace",
                    selector=label_selector,
                    include=include,
                    exclude=exclude,
                )
            )
            return
        formatter_for(output, ["name"]).print([{"name": name} for name in names])
