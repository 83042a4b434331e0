"""Route module generation.

Runs one generation pass: discover declarations, build descriptors,
reconstruct the route tree, emit the config, and write the module.
Nothing is written unless every step succeeds, and the output file is
only touched when its content changes.
"""

import functools
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from kida import Environment

from roost.config import GeneratorConfig
from roost.discovery import RouteDeclaration, discover_declarations
from roost.errors import InvalidHandlerSource, InvalidPath, UnreachableRoute
from roost.routing.descriptor import InstantiationMode, RouteDescriptor
from roost.routing.emit import render_route_config
from roost.routing.tree import build_route_tree, unreachable_routes

logger = logging.getLogger("roost.generate")

RUNTIME_IMPORT = "from roost.markers import RouteConfig, shared"
RUNTIME_NAMES = ("RouteConfig", "shared")

MODULE_TEMPLATE = '''\
"""Route configuration generated by roost. Do not edit.

Regenerate with ``roost generate``.
"""

{{ imports }}

{{ variable }}: list[RouteConfig] = {{ routes }}
'''


@dataclass(frozen=True, slots=True)
class RouteTree:
    """Reconstructed routes for one source tree.

    Attributes:
        roots: Tree heads, in emission order.
        dropped: Nested routes with no ancestor chain, in declaration order.
    """

    roots: tuple[RouteDescriptor, ...]
    dropped: tuple[RouteDescriptor, ...] = ()

    @property
    def routes(self) -> tuple[RouteDescriptor, ...]:
        """Every linked route, pre-order."""
        return tuple(node for root in self.roots for node in root.walk())

    @property
    def route_count(self) -> int:
        return len(self.routes)


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Outcome of a ``generate()`` run."""

    output: Path
    routes: int
    dropped: tuple[str, ...] = ()
    written: bool = True


@functools.cache
def _environment() -> Environment:
    return Environment(autoescape=False)


def collect_descriptors(declarations: Iterable[RouteDeclaration]) -> list[RouteDescriptor]:
    """Build one descriptor per declaration.

    Every declaration is attempted so that all bad paths are logged in a
    single run; the first failure is then raised.
    """
    descriptors: list[RouteDescriptor] = []
    failures: list[InvalidPath] = []
    for declaration in declarations:
        try:
            descriptor = RouteDescriptor.create(
                declaration.path,
                handler=declaration.handler,
                name=declaration.name,
                mode=InstantiationMode.SHARED if declaration.shared else InstantiationMode.FRESH,
                module=declaration.module,
            )
        except InvalidPath as exc:
            logger.error("%s: %s (%s)", declaration.handler, exc, declaration.location)
            failures.append(exc)
            continue
        descriptors.append(descriptor)

    if failures:
        raise failures[0]
    return descriptors


def build_imports(descriptors: Iterable[RouteDescriptor]) -> list[str]:
    """Return import lines for every handler, grouped by module.

    Modules appear in first-seen order and names keep their first-seen
    order within a module.  Handlers without a module are assumed to be
    importable some other way and are skipped.

    Raises:
        InvalidHandlerSource: Two modules export a handler of the same
            name, or a handler shadows a name the generated module needs.
    """
    by_module: dict[str, list[str]] = {}
    owners: dict[str, str] = {}
    for route in descriptors:
        if route.module is None:
            continue
        if route.handler in RUNTIME_NAMES:
            raise InvalidHandlerSource(
                route.handler,
                "Name is reserved in the generated module; rename the page",
                route.module,
            )
        owner = owners.setdefault(route.handler, route.module)
        if owner != route.module:
            raise InvalidHandlerSource(
                route.handler,
                f"Name clashes with {route.handler} from {owner}; rename one of the pages",
                route.module,
            )
        names = by_module.setdefault(route.module, [])
        if route.handler not in names:
            names.append(route.handler)

    lines = [RUNTIME_IMPORT]
    lines.extend(f"from {module} import {', '.join(names)}" for module, names in by_module.items())
    return lines


def render_module(
    roots: Sequence[RouteDescriptor],
    imports: Sequence[str],
    *,
    variable: str = "ROUTES",
) -> str:
    """Render the full source of the generated route module."""
    template = _environment().from_string(MODULE_TEMPLATE)
    text = template.render(
        {
            "imports": "\n".join(imports),
            "variable": variable,
            "routes": render_route_config(roots),
        }
    )
    return text.rstrip("\n") + "\n"


def load_route_tree(config: GeneratorConfig) -> RouteTree | None:
    """Discover declarations under ``config.source_dir`` and link them.

    Returns ``None`` when the source tree declares no routes.

    Raises:
        UnreachableRoute: ``config.strict`` is set and some nested routes
            have no parent.
    """
    declarations = discover_declarations(
        config.source_dir,
        config.package,
        marker=config.marker,
        exclude=config.exclude,
        ignore=(config.output_path,),
    )
    if not declarations:
        return None

    descriptors = collect_descriptors(declarations)
    roots = build_route_tree(descriptors)
    dropped = unreachable_routes(descriptors, roots)

    for route in dropped:
        logger.warning("No parent route for %s (%s); leaving it out", route.path, route.handler)
    if dropped and config.strict:
        raise UnreachableRoute(tuple(route.path for route in dropped))

    return RouteTree(roots=tuple(roots), dropped=tuple(dropped))


def generate(config: GeneratorConfig) -> GenerationResult | None:
    """Generate the route module described by *config*.

    Returns ``None`` (and writes nothing) when no routes are declared.
    """
    tree = load_route_tree(config)
    if tree is None:
        logger.info("No routes declared under %s", config.source_dir)
        return None

    source = render_module(tree.roots, build_imports(tree.routes), variable=config.variable)

    output = config.output_path
    count = tree.route_count
    dropped = tuple(route.path for route in tree.dropped)
    if output.is_file() and output.read_text(encoding="utf-8") == source:
        logger.info("%s is up to date (%d routes)", output, count)
        return GenerationResult(output=output, routes=count, dropped=dropped, written=False)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(source, encoding="utf-8")
    logger.info("Wrote %d routes to %s", count, output)
    return GenerationResult(output=output, routes=count, dropped=dropped)
