"""Command line tool for selecting the cluster objects policies apply to."""

import argparse
import asyncio
import logging
import sys
import traceback

from policy_nucleus.exceptions import NucleusException

from . import namespaces, targets

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Command line utility for selecting the objects of a local cluster "
            "snapshot that a policy applies to."
        ),
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    namespaces.NamespacesAction.register(subparsers)
    targets.TargetsAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Policy-nucleus command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except NucleusException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("policy-nucleus error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
