"""``roost generate`` — write the route module.

Scans the source tree, rebuilds the route hierarchy, and writes the
generated module.  Exits with code 1 on any declaration or hierarchy
error; nothing is written in that case.
"""

import argparse
import sys

from roost.cli._config import config_from_args
from roost.errors import RoostError
from roost.generate import generate


def run_generate(args: argparse.Namespace) -> None:
    """Generate the route module for ``args.source_dir``."""
    config = config_from_args(args)
    try:
        result = generate(config)
    except (RoostError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if result is None:
        print("No routes declared.")
        return

    status = "Wrote" if result.written else "Unchanged"
    print(f"{status} {result.output} ({result.routes} routes)")
    for path in result.dropped:
        print(f"  skipped {path}: no parent route", file=sys.stderr)
