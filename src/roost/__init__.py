"""Roost — nested route configs generated from page declarations.

Mark page classes with ``@route`` and let ``roost generate`` rebuild the
navigation hierarchy from their paths::

    from roost import route

    @route("/", shared=True)
    class Shell: ...

    @route("/home")
    class Home: ...

    @route("/home/settings", name="settings")
    class Settings: ...

The generated module nests ``Settings`` under ``Home`` under ``Shell``::

    ROUTES: list[RouteConfig] = [
        RouteConfig(path='/', construct=shared(Shell), routes=[
            RouteConfig(path='/home', construct=Home, routes=[
                RouteConfig(path='/settings', name='settings', construct=Settings),
            ]),
        ]),
    ]
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "DuplicateName",
    "DuplicatePath",
    "GeneratorConfig",
    "InstantiationMode",
    "InvalidHandlerSource",
    "InvalidPath",
    "NoTopLevelRoute",
    "RoostError",
    "RouteConfig",
    "RouteDescriptor",
    "UnreachableRoute",
    "build_route_tree",
    "emit_route_config",
    "render_route_config",
    "route",
    "shared",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roost`` cheap for generated modules, which only need
    the runtime markers.
    """
    if name in ("route", "shared", "RouteConfig"):
        from roost import markers as _markers

        return getattr(_markers, name)

    if name in ("RouteDescriptor", "InstantiationMode"):
        from roost.routing import descriptor as _descriptor

        return getattr(_descriptor, name)

    if name == "build_route_tree":
        from roost.routing.tree import build_route_tree

        return build_route_tree

    if name in ("emit_route_config", "render_route_config"):
        from roost.routing import emit as _emit

        return getattr(_emit, name)

    if name == "GeneratorConfig":
        from roost.config import GeneratorConfig

        return GeneratorConfig

    if name in (
        "ConfigurationError",
        "DuplicateName",
        "DuplicatePath",
        "InvalidHandlerSource",
        "InvalidPath",
        "NoTopLevelRoute",
        "RoostError",
        "UnreachableRoute",
    ):
        from roost import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
