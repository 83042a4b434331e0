"""Routing — route descriptors, tree reconstruction, and config emission.

Descriptors are linked into trees from their path segments alone, then
serialized into a nested ``RouteConfig`` list.
"""
