"""Static route discovery for a Python source tree.

Walks the package directory and finds page classes decorated with the
route marker, without importing anything:

- ``@route("/home")``, ``@roost.route("/home")`` and aliases bound by
  ``from roost import route as page`` or ``import roost as r`` are
  recognised, as is the marker reached through a module of the scanned
  package; a same-named decorator imported from a third-party module (or
  ``@app.route``) is not
- a file that declares routes must map to an importable module name
- ``path`` must be a string literal, ``name`` a string literal or
  ``None``, and ``shared`` a bool literal
- ``__init__.py`` maps to the package itself; other files append their
  stem to the module path

Files are visited in sorted order so the declaration order, and with it
the generated output, is stable across runs and platforms.
"""

from __future__ import annotations

import ast
import fnmatch
import logging
from collections.abc import Collection, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from roost.errors import InvalidHandlerSource

logger = logging.getLogger("roost.discovery")

_ALLOWED_KEYWORDS = frozenset({"path", "name", "shared"})
_ROOST = "roost"
_ROOST_MODULES = frozenset({_ROOST, "roost.markers"})


@dataclass(frozen=True, slots=True)
class RouteDeclaration:
    """A route declaration read from source.

    Attributes:
        path: Declared path string, not yet validated.
        handler: Name of the decorated class.
        module: Dotted module containing the class.
        name: Optional route name.
        shared: Whether the page instance is reused.
        location: ``file:line`` of the class, for error messages.
    """

    path: str
    handler: str
    module: str
    name: str | None = None
    shared: bool = False
    location: str = ""


def discover_declarations(
    source_dir: str | Path,
    package: str,
    *,
    marker: str = "route",
    exclude: Collection[str] = (),
    ignore: Collection[Path] = (),
) -> list[RouteDeclaration]:
    """Walk *source_dir* and collect every route declaration.

    Args:
        source_dir: Directory of the package to scan.
        package: Dotted import name of *source_dir*.
        marker: Decorator name marking page classes.
        exclude: Glob patterns, relative to *source_dir*, of files to skip.
        ignore: Absolute paths to skip (the generated module itself).

    Raises:
        FileNotFoundError: *source_dir* is not a directory.
        InvalidHandlerSource: A marked declaration cannot become a route.
    """
    root = Path(source_dir).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Source directory not found: {root}")

    skipped = {Path(p).resolve() for p in ignore}
    declarations: list[RouteDeclaration] = []
    for file in _iter_python_files(root):
        relative = file.relative_to(root)
        if file in skipped or any(fnmatch.fnmatch(relative.as_posix(), p) for p in exclude):
            logger.debug("Skipping %s", relative)
            continue
        module = _module_name(package, relative)
        found = _scan_file(file, module, marker)
        if found:
            _check_importable(module, found[0].handler, file)
            logger.debug("Found %d route(s) in %s", len(found), relative)
        declarations.extend(found)
    return declarations


def _iter_python_files(directory: Path) -> Iterator[Path]:
    """Yield ``.py`` files depth-first: files of a directory, then subdirectories."""
    entries = sorted(directory.iterdir())
    for item in entries:
        if item.is_file() and item.suffix == ".py" and not item.name.startswith("."):
            yield item
    for item in entries:
        if not item.is_dir():
            continue
        if item.name.startswith(".") or item.name == "__pycache__":
            continue
        yield from _iter_python_files(item)


def _module_name(package: str, relative: Path) -> str:
    parts = list(relative.with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join([package, *parts])


def _check_importable(module: str, handler: str, file: Path) -> None:
    """Reject route modules the generated config could not import."""
    if not all(part.isidentifier() for part in module.split(".")):
        raise InvalidHandlerSource(
            handler, f"Module {module!r} is not an importable name", str(file)
        )


def _scan_file(file: Path, module: str, marker: str) -> list[RouteDeclaration]:
    """Parse one file and read the route declarations in it."""
    source = file.read_text(encoding="utf-8")

    # Cheap reject before parsing
    if marker not in source and _ROOST not in source:
        return []

    try:
        tree = ast.parse(source, filename=str(file))
    except SyntaxError as exc:
        raise InvalidHandlerSource(
            module, f"cannot parse module: {exc.msg}", f"{file}:{exc.lineno}"
        ) from exc

    scope = _marker_scope(tree, marker, module.partition(".")[0])
    top_level = {id(node) for node in tree.body}
    marked = [
        (node, decorator)
        for node in ast.walk(tree)
        if isinstance(node, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef))
        for decorator in node.decorator_list
        if _is_marker(decorator, scope)
    ]
    marked.sort(key=lambda item: (item[0].lineno, item[0].col_offset))

    declarations: list[RouteDeclaration] = []
    for node, decorator in marked:
        location = f"{file}:{node.lineno}"
        if not isinstance(node, ast.ClassDef):
            raise InvalidHandlerSource(node.name, "Must be a class", location)
        if id(node) not in top_level:
            raise InvalidHandlerSource(node.name, "Must be defined at module level", location)
        declarations.append(_read_declaration(node, decorator, module, location))
    return declarations


@dataclass(slots=True)
class _MarkerScope:
    """Names under which the route marker is reachable in one module.

    ``names`` are bare decorator names, ``roost`` dotted names bound to
    roost's own modules, ``local`` dotted names bound to modules of the
    scanned package (where a project may re-export its own marker).
    """

    marker: str
    names: set[str]
    roost: set[str]
    local: set[str] = field(default_factory=set)


def _marker_scope(tree: ast.Module, marker: str, package: str) -> _MarkerScope:
    """Resolve which decorators mean the marker from the module's imports.

    A bare *marker* counts unless the module imports that name from a
    third-party module; ``route`` imported from roost counts under any alias.
    """
    scope = _MarkerScope(marker=marker, names={marker}, roost=set(_ROOST_MODULES))
    imports = [node for node in ast.walk(tree) if isinstance(node, (ast.Import, ast.ImportFrom))]
    imports.sort(key=lambda node: (node.lineno, node.col_offset))

    for node in imports:
        match node:
            case ast.Import(names=aliases):
                for alias in aliases:
                    bound = alias.asname or alias.name
                    if alias.name in _ROOST_MODULES:
                        scope.roost.add(bound)
                    elif alias.name.partition(".")[0] == package:
                        scope.local.add(bound)
            case ast.ImportFrom(module=source, names=aliases, level=level):
                own = level > 0 or (source or "").partition(".")[0] == package
                for alias in aliases:
                    bound = alias.asname or alias.name
                    if source in _ROOST_MODULES and alias.name == "route":
                        scope.names.add(bound)
                    elif source == _ROOST and alias.name == "markers":
                        scope.roost.add(bound)
                    elif own:
                        scope.local.add(bound)
                    else:
                        scope.names.discard(bound)
    return scope


def _is_marker(decorator: ast.expr, scope: _MarkerScope) -> bool:
    target = decorator.func if isinstance(decorator, ast.Call) else decorator
    match target:
        case ast.Name(id=name):
            return name in scope.names
        case ast.Attribute(value=value, attr=attr):
            owner = _dotted_name(value)
            if owner in scope.roost:
                return attr == "route"
            return owner in scope.local and attr == scope.marker
        case _:
            return False


def _dotted_name(node: ast.expr) -> str | None:
    match node:
        case ast.Name(id=name):
            return name
        case ast.Attribute(value=value, attr=attr):
            owner = _dotted_name(value)
            return f"{owner}.{attr}" if owner else None
        case _:
            return None

def _read_declaration(
    node: ast.ClassDef,
    decorator: ast.expr,
    module: str,
    location: str,
) -> RouteDeclaration:
    """Resolve the marker's arguments into a declaration."""
    if not isinstance(decorator, ast.Call):
        raise InvalidHandlerSource(node.name, "Route marker must be called with a path", location)

    if len(decorator.args) > 1:
        raise InvalidHandlerSource(node.name, "Only the path may be passed positionally", location)

    arguments: dict[str, ast.expr] = {}
    if decorator.args:
        arguments["path"] = decorator.args[0]
    for keyword in decorator.keywords:
        if keyword.arg not in _ALLOWED_KEYWORDS:
            raise InvalidHandlerSource(
                node.name, f"Unknown route argument {keyword.arg!r}", location
            )
        if keyword.arg in arguments:
            raise InvalidHandlerSource(
                node.name, f"Route argument {keyword.arg!r} given twice", location
            )
        arguments[keyword.arg] = keyword.value

    if "path" not in arguments:
        raise InvalidHandlerSource(node.name, "Route marker is missing its path", location)

    path = _literal(node, arguments["path"], "path", location)
    name = _literal(node, arguments["name"], "name", location) if "name" in arguments else None
    shared = (
        _literal(node, arguments["shared"], "shared", location)
        if "shared" in arguments
        else False
    )

    if not isinstance(path, str):
        raise InvalidHandlerSource(node.name, "The path must be a string", location)
    if name is not None and not isinstance(name, str):
        raise InvalidHandlerSource(node.name, "The name must be a string or None", location)
    if not isinstance(shared, bool):
        raise InvalidHandlerSource(node.name, "shared must be True or False", location)

    return RouteDeclaration(
        path=path,
        handler=node.name,
        module=module,
        name=name,
        shared=shared,
        location=location,
    )


def _literal(node: ast.ClassDef, value: ast.expr, label: str, location: str) -> object:
    try:
        return ast.literal_eval(value)
    except (ValueError, TypeError) as exc:
        raise InvalidHandlerSource(
            node.name, f"The {label} must be a literal value", location
        ) from exc
