"""Route config emission.

Serializes route trees into the source text of a nested Python list of
``RouteConfig`` entries.  Traversal is pre-order in ``children`` order,
so identical input always produces byte-identical output::

    [
        RouteConfig(path='/', construct=shared(Shell), routes=[
            RouteConfig(path='/home', construct=Home),
        ]),
    ]
"""

import io
from collections.abc import Iterable
from typing import TextIO

from roost.routing.descriptor import InstantiationMode, RouteDescriptor

INDENT = "    "


def construct_expression(route: RouteDescriptor) -> str:
    """Return the expression that builds *route*'s page."""
    if route.mode is InstantiationMode.SHARED:
        return f"shared({route.handler})"
    return route.handler


def emit_route_config(
    buffer: TextIO,
    roots: Iterable[RouteDescriptor],
    *,
    level: int = 1,
) -> None:
    """Write one ``RouteConfig(...)`` entry per route, children nested."""
    pad = INDENT * level
    for route in roots:
        buffer.write(f"{pad}RouteConfig(path={route.suffix!r}")
        if route.name is not None:
            buffer.write(f", name={route.name!r}")
        buffer.write(f", construct={construct_expression(route)}")

        if route.children:
            buffer.write(", routes=[\n")
            emit_route_config(buffer, route.children, level=level + 1)
            buffer.write(f"{pad}]")

        buffer.write("),\n")


def render_route_config(roots: Iterable[RouteDescriptor], *, level: int = 0) -> str:
    """Render *roots* as a complete list expression."""
    buffer = io.StringIO()
    buffer.write("[\n")
    emit_route_config(buffer, roots, level=level + 1)
    buffer.write(f"{INDENT * level}]")
    return buffer.getvalue()
