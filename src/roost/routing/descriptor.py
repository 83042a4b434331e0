"""RouteDescriptor and path parsing.

A descriptor is the one mutable object in a generation run: it is created
from a declaration, re-parented by the tree builder, and read by the
emitter.  Nothing survives past a single run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import unquote, urlsplit

from roost.errors import InvalidPath


class InstantiationMode(Enum):
    """How the generated config constructs a route's page."""

    FRESH = "fresh"
    SHARED = "shared"


def parse_path(path: str) -> tuple[str, ...]:
    """Split a route path into its non-empty, percent-decoded segments.

    Examples::

        "/"              -> ()
        "/users"         -> ("users",)
        "/users/{id}/"   -> ("users", "{id}")
        "/a%20b?tab=1"   -> ("a b",)

    Raises ``InvalidPath`` when the string is empty or has no path part.
    """
    if not path:
        raise InvalidPath(path, "the path cannot be empty")
    try:
        parts = urlsplit(path)
    except ValueError as exc:
        raise InvalidPath(path, str(exc)) from exc
    if not parts.path:
        raise InvalidPath(path, "the path cannot be empty")
    return tuple(unquote(part) for part in parts.path.split("/") if part)


@dataclass(slots=True, eq=False)
class RouteDescriptor:
    """One declared route and its position in the route tree.

    Attributes:
        raw_path: The path string as declared.
        segments: Parsed path segments (``()`` for ``/``).
        handler: Name of the page class that renders this route.
        name: Optional symbolic route name.
        mode: Whether the page is constructed once or per use.
        module: Dotted module the handler is imported from, if known.
        children: Child routes, in attachment order.
        parent: The route this one is currently attached to.
        skip: Leading segments already rendered by ancestors.
    """

    raw_path: str
    segments: tuple[str, ...]
    handler: str
    name: str | None = None
    mode: InstantiationMode = InstantiationMode.FRESH
    module: str | None = None
    children: list[RouteDescriptor] = field(default_factory=list)
    parent: RouteDescriptor | None = field(default=None, repr=False)
    skip: int = 0

    @classmethod
    def create(
        cls,
        path: str,
        *,
        handler: str,
        name: str | None = None,
        mode: InstantiationMode = InstantiationMode.FRESH,
        module: str | None = None,
    ) -> RouteDescriptor:
        """Build a descriptor from a raw declaration, validating the path."""
        return cls(
            raw_path=path,
            segments=parse_path(path),
            handler=handler,
            name=name,
            mode=mode,
            module=module,
        )

    @property
    def path(self) -> str:
        """Normalised full path, e.g. ``/home/settings``."""
        return "/" + "/".join(self.segments)

    @property
    def suffix(self) -> str:
        """The part of the path this route renders itself."""
        return "/" + "/".join(self.segments[self.skip :])

    @property
    def is_root(self) -> bool:
        return not self.segments

    def attach_child(self, child: RouteDescriptor) -> None:
        """Attach *child* under this route, detaching it from any old parent."""
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)

    def walk(self) -> list[RouteDescriptor]:
        """Return this route and all its descendants in pre-order."""
        result: list[RouteDescriptor] = []
        stack = [self]
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(reversed(node.children))
        return result
