"""Runtime helpers used by page modules and by generated route configs.

``@route`` only marks a class; no registration happens at import time.
``roost generate`` reads the decorator statically from source, so the
marker exists for readers and for introspection in tests::

    from roost import route

    @route("/home/settings", name="settings")
    class Settings:
        ...

The generated module builds ``RouteConfig`` entries and wraps shared
pages with ``shared()``.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from roost.errors import InvalidHandlerSource

MARKER_ATTR = "__roost_route__"

T = TypeVar("T", bound=type)


@dataclass(frozen=True, slots=True)
class RouteMarker:
    """Route metadata attached to a page class by ``@route``."""

    path: str
    name: str | None = None
    shared: bool = False


def route(path: str, *, name: str | None = None, shared: bool = False) -> Callable[[T], T]:
    """Mark a page class as serving *path*.

    Args:
        path: URL path of the page, e.g. ``"/home/settings"``.
        name: Optional route name, unique across the project.
        shared: Construct the page once and reuse the instance.
    """

    def decorator(cls: T) -> T:
        if not inspect.isclass(cls):
            handler = getattr(cls, "__qualname__", repr(cls))
            raise InvalidHandlerSource(handler, "Must be a class")
        setattr(cls, MARKER_ATTR, RouteMarker(path=path, name=name, shared=shared))
        return cls

    return decorator


def get_marker(cls: type) -> RouteMarker | None:
    """Return the marker set directly on *cls*, ignoring inherited ones."""
    return cls.__dict__.get(MARKER_ATTR)


@dataclass(frozen=True, slots=True)
class RouteConfig:
    """One entry of a generated route configuration.

    Attributes:
        path: Path relative to the parent entry (``"/settings"``).
        construct: Zero-argument callable returning the page.
        name: Optional route name.
        routes: Child entries.
    """

    path: str
    construct: Callable[[], Any]
    name: str | None = None
    routes: Sequence[RouteConfig] = ()


def shared(cls: Callable[[], Any]) -> Callable[[], Any]:
    """Return a factory that builds *cls* once and then reuses the instance."""
    instance: list[Any] = []

    def construct() -> Any:
        if not instance:
            instance.append(cls())
        return instance[0]

    construct.__name__ = f"shared_{getattr(cls, '__name__', 'page')}"
    construct.__wrapped__ = cls  # type: ignore[attr-defined]
    return construct
