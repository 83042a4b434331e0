"""Roost exception hierarchy.

Shared across discovery, the tree builder, the emitter, and the CLI so
every module raises and catches the same types.  Every error carries the
offending path, name, or handler so it can be reported once and verbatim.
"""


class RoostError(Exception):
    """Base for all roost-specific errors."""


class ConfigurationError(RoostError):
    """Raised when generator configuration is invalid."""


class InvalidPath(RoostError):  # noqa: N818
    """A declared path is empty or cannot be parsed."""

    def __init__(self, path: str, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid route path {path!r}{detail}")


class DuplicatePath(RoostError):  # noqa: N818
    """Two routes resolve to the same segment sequence.

    ``first`` and ``second`` are the handlers of the colliding routes.
    """

    def __init__(self, path: str, first: str, second: str) -> None:
        self.path = path
        self.first = first
        self.second = second
        super().__init__(
            f"The path {path!r} must be unique for every page "
            f"(declared by {first} and {second})"
        )


class DuplicateName(RoostError):  # noqa: N818
    """Two routes share the same non-null name."""

    def __init__(self, name: str, path: str) -> None:
        self.name = name
        self.path = path
        super().__init__(f"The name {name!r} must be unique for every page (again at {path!r})")


class NoTopLevelRoute(RoostError):  # noqa: N818
    """Neither ``/`` nor any single-segment route exists to anchor the tree."""

    def __init__(self) -> None:
        super().__init__(
            "The application must have at least one top-level route "
            "(either '/' or a single-segment path like '/home')"
        )


class UnreachableRoute(RoostError):  # noqa: N818
    """Nested routes have no ancestor chain back to a root.

    Only raised when the generator runs in strict mode; otherwise the
    routes are dropped with a warning.
    """

    def __init__(self, paths: tuple[str, ...]) -> None:
        self.paths = paths
        listing = ", ".join(repr(p) for p in paths)
        super().__init__(f"No parent route found for {listing}")


class InvalidHandlerSource(RoostError):  # noqa: N818
    """A route declaration does not describe a constructible page class.

    Raised by discovery and by the ``@route`` marker, never by the tree
    builder, so callers can tell scan problems from hierarchy problems.
    """

    def __init__(self, handler: str, reason: str, location: str = "") -> None:
        self.handler = handler
        self.reason = reason
        self.location = location
        where = f" ({location})" if location else ""
        super().__init__(f"{handler}: {reason}{where}")
