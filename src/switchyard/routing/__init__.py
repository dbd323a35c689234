"""
Routing: pattern compilation, the route table and the dispatcher.

    compile_pattern("/users/:id")   → RoutePattern (NAMED_REGEX)
    RouteTable                      → ordered pattern → handlers mapping
    Router                          → dispatch with Pass fallthrough
"""

from .pattern import MatcherKind, RouteMatch, RoutePattern, classify, compile_pattern
from .router import SAFE_PATH, Router, is_safe_path
from .table import RESERVED_KEYS, RouteEntry, RouteTable

__all__ = [
    "MatcherKind",
    "RouteMatch",
    "RoutePattern",
    "classify",
    "compile_pattern",
    "RouteEntry",
    "RouteTable",
    "RESERVED_KEYS",
    "Router",
    "SAFE_PATH",
    "is_safe_path",
]
