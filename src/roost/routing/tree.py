"""Route tree reconstruction.

Turns a flat list of descriptors into nested route trees using nothing
but path-segment prefixes.  The tree is built in three passes:

1. A single scan validates uniqueness and sorts descriptors into the
   root (``/``), top-level routes (one segment), and nested routes.
2. Top-level routes are attached to the root, in declaration order.
3. Nested routes are placed breadth-first by depth.  Each work item
   carries the candidates still reachable at that depth, so every level
   only re-partitions the routes that can still match instead of
   comparing all nested routes against every node.

Nested routes whose prefix never matches an ancestor are left out of
the tree; see ``unreachable_routes``.
"""

import logging
from collections import deque
from collections.abc import Iterable, Sequence

from roost.errors import DuplicateName, DuplicatePath, NoTopLevelRoute
from roost.routing.descriptor import RouteDescriptor

logger = logging.getLogger("roost.tree")


def build_route_tree(descriptors: Sequence[RouteDescriptor]) -> list[RouteDescriptor]:
    """Validate *descriptors* and link them into route trees.

    Returns ``[root]`` when a ``/`` route exists, otherwise the top-level
    routes, each heading a fully attached subtree.

    Raises:
        DuplicatePath: Two descriptors share a segment sequence.
        DuplicateName: Two descriptors share a non-null name.
        NoTopLevelRoute: There is neither ``/`` nor a one-segment route.
    """
    root: RouteDescriptor | None = None
    seen_paths: dict[tuple[str, ...], RouteDescriptor] = {}
    seen_names: set[str] = set()
    top_level: list[RouteDescriptor] = []
    nested: list[RouteDescriptor] = []

    for route in descriptors:
        previous = seen_paths.get(route.segments)
        if previous is not None:
            raise DuplicatePath(route.path, previous.handler, route.handler)
        seen_paths[route.segments] = route

        if route.name is not None:
            if route.name in seen_names:
                raise DuplicateName(route.name, route.path)
            seen_names.add(route.name)

        depth = len(route.segments)
        if depth == 0:
            root = route
        elif depth == 1:
            top_level.append(route)
        else:
            nested.append(route)

    if root is None and not top_level:
        raise NoTopLevelRoute()

    if root is not None:
        for route in top_level:
            root.attach_child(route)

    if nested:
        _attach_nested(top_level, nested)

    logger.debug(
        "Built route tree: root=%s, %d top-level, %d nested",
        root is not None,
        len(top_level),
        len(nested),
    )
    return [root] if root is not None else top_level


def _attach_nested(
    parents: Iterable[RouteDescriptor],
    candidates: Sequence[RouteDescriptor],
) -> None:
    """Place nested routes under their deepest matching ancestor."""
    queue: deque[tuple[RouteDescriptor, list[RouteDescriptor], int]] = deque(
        (parent, list(candidates), 1) for parent in parents
    )

    while queue:
        parent, children, depth = queue.popleft()
        index = depth - 1

        by_segment: dict[str, list[RouteDescriptor]] = {}
        next_level: list[RouteDescriptor] = []
        for child in children:
            if len(child.segments) > index:
                by_segment.setdefault(child.segments[index], []).append(child)
                next_level.append(child)

        # Parent still has unconsumed segments at this depth
        if len(parent.segments) - 1 > index:
            queue.append((parent, next_level, depth + 1))
            continue

        for child in by_segment.get(parent.segments[index], ()):
            if child is parent:
                continue
            child.skip = depth
            parent.attach_child(child)
            logger.debug("Attached %s under %s (skip=%d)", child.path, parent.path, depth)
            queue.append((child, next_level, depth + 1))


def unreachable_routes(
    descriptors: Iterable[RouteDescriptor],
    roots: Iterable[RouteDescriptor],
) -> list[RouteDescriptor]:
    """Return descriptors that ended up outside every tree in *roots*.

    Preserves the input order of *descriptors*.
    """
    reachable = {id(node) for root in roots for node in root.walk()}
    return [route for route in descriptors if id(route) not in reachable]
