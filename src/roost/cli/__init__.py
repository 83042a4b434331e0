"""Roost CLI — route module generation and route tree inspection.

Entry point registered as ``roost`` in ``pyproject.toml``::

    [project.scripts]
    roost = "roost.cli:main"
"""

import argparse
import logging
import sys

from roost.config import LOG_LEVELS


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("source_dir", help="Package directory to scan (e.g. src/myapp)")
    parser.add_argument(
        "--package",
        required=True,
        help="Dotted import name of SOURCE_DIR (e.g. myapp)",
    )
    parser.add_argument(
        "--marker",
        default="route",
        help="Decorator name marking page classes (default: route)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="GLOB",
        help="Skip files matching GLOB, relative to SOURCE_DIR (repeatable)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when a nested route has no parent route",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default="info",
        help="Logging verbosity (default: info)",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``roost`` command."""
    parser = argparse.ArgumentParser(
        prog="roost",
        description="Roost — generate nested route configs from page declarations.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- roost generate ---------------------------------------------------
    generate_parser = subparsers.add_parser("generate", help="Write the route module")
    _add_source_arguments(generate_parser)
    generate_parser.add_argument(
        "--output",
        default=None,
        help="Path of the generated module (default: SOURCE_DIR/routing/routes.py)",
    )
    generate_parser.add_argument(
        "--variable",
        default="ROUTES",
        help="Name of the generated list (default: ROUTES)",
    )

    # -- roost routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="Print the reconstructed route tree")
    _add_source_arguments(routes_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "generate":
        from roost.cli._generate import run_generate

        run_generate(args)
    elif args.command == "routes":
        from roost.cli._routes import run_routes

        run_routes(args)
