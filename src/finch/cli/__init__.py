"""Finch CLI — route table inspection.

Entry point registered as ``finch`` in ``pyproject.toml``::

    [project.scripts]
    finch = "finch.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``finch`` command."""
    parser = argparse.ArgumentParser(
        prog="finch",
        description="Finch — declarative REST routing and authorization.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- finch routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List compiled routes in match order")
    routes_parser.add_argument("engine", help="Import string (e.g. myapi:engine)")

    # -- finch check ------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check", help="Report dropped or replaced declarations (exit 1 if any)"
    )
    check_parser.add_argument("engine", help="Import string (e.g. myapi:engine)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from finch.cli._routes import run_routes

        run_routes(args)
    elif args.command == "check":
        from finch.cli._routes import run_check

        run_check(args)
