"""Build a GeneratorConfig from parsed CLI arguments.

Shared by ``roost generate`` and ``roost routes``.
"""

import argparse
import sys

from roost.config import GeneratorConfig
from roost.errors import ConfigurationError


def config_from_args(args: argparse.Namespace) -> GeneratorConfig:
    """Translate CLI arguments into a config, exiting on invalid values."""
    try:
        return GeneratorConfig(
            source_dir=args.source_dir,
            package=args.package,
            exclude=tuple(args.exclude),
            marker=args.marker,
            output=getattr(args, "output", None),
            variable=getattr(args, "variable", "ROUTES"),
            strict=args.strict,
            log_level=args.log_level,
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc
