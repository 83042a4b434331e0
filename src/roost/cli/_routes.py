"""``roost routes`` — print the reconstructed route tree.

Scans the source tree and prints each route with its nesting, the path
suffix it renders, and its handler.  Nothing is written.
"""

import argparse
import sys
from collections.abc import Iterable

from roost.cli._config import config_from_args
from roost.errors import RoostError
from roost.generate import load_route_tree
from roost.routing.descriptor import InstantiationMode, RouteDescriptor


def format_route_tree(roots: Iterable[RouteDescriptor]) -> list[str]:
    """Return table lines: indented path suffix, then the handler."""
    rows: list[tuple[str, str]] = []
    stack = [(root, 0) for root in reversed(list(roots))]
    while stack:
        route, depth = stack.pop()
        handler = route.handler
        if route.mode is InstantiationMode.SHARED:
            handler = f"{handler} [shared]"
        if route.name:
            handler = f"{handler} ({route.name})"
        rows.append(("  " * depth + route.suffix, handler))
        stack.extend((child, depth + 1) for child in reversed(route.children))

    width = max([len("PATH"), *(len(path) for path, _ in rows)])
    fmt = f"{{:<{width}}}  {{}}"
    sep_len = width + 2 + max(len("HANDLER"), *(len(handler) for _, handler in rows))
    lines = [fmt.format("PATH", "HANDLER"), "-" * min(sep_len, 80)]
    lines.extend(fmt.format(path, handler) for path, handler in rows)
    return lines


def run_routes(args: argparse.Namespace) -> None:
    """Print the route tree for ``args.source_dir``."""
    config = config_from_args(args)
    try:
        tree = load_route_tree(config)
    except (RoostError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if tree is None:
        print("No routes declared.")
        return

    for line in format_route_tree(tree.roots):
        print(line)
    for route in tree.dropped:
        print(f"  skipped {route.path}: no parent route", file=sys.stderr)
