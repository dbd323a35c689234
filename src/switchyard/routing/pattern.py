"""
=============================================================================
ROUTE PATTERN COMPILER
=============================================================================

Turns a route registration string into a matcher.

=============================================================================
ROUTE PATTERNS
=============================================================================

1. EXACT: no ":" token, doesn't start with "^"

   Pattern: /about
   Matches: /about
   Doesn't match: /about/, /About

2. NAMED (:param): every ":name" becomes a named capture

   Pattern: /users/:id/posts/:post
   Regex:   ^/users/(?P<id>[A-Za-z0-9.\\-+_]+?)/posts/(?P<post>[A-Za-z0-9.\\-+_]+?)$
   Matches: /users/42/posts/hello-world → args ("42", "hello-world")

3. RAW REGEX: starts with "^", used verbatim

   Pattern: ^/archive/(\\d{4})/(\\d{2})
   Matches: /archive/2024/06 → args ("2024", "06")
   The caller supplies the anchors; only "^" is implied by the marker.

=============================================================================
MATCH RESULTS
=============================================================================

    None                    the pattern does not match
    RouteMatch(args=())     matched, nothing captured (exact patterns)
    RouteMatch(args=(...))  matched with captures, in appearance order

The distinction matters: an exact route and a capture-less regex both
match "with zero parameters", which is not the same as not matching.

=============================================================================
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Pattern, Tuple


# ":name" - the sigil followed by a Python identifier
PARAM_TOKEN = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")

# What a single parameter may contain
PARAM_CHARS = r"[A-Za-z0-9.\-+_]+?"

RAW_REGEX_MARKER = "^"


class MatcherKind(Enum):
    """How a compiled pattern decides whether a path matches."""
    EXACT = "exact"
    NAMED_REGEX = "named_regex"
    RAW_REGEX = "raw_regex"


@dataclass(frozen=True)
class RouteMatch:
    """
    Result of a successful pattern match.

    Example:
        Pattern: /hello/:name
        Path:    /hello/Bob
        Result:  RouteMatch(args=("Bob",), params={"name": "Bob"})
    """
    args: Tuple[str, ...] = ()
    params: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RoutePattern:
    """
    Immutable compiled route pattern.

    Compilation is deterministic: the same raw text always yields the same
    kind and capture names.
    """
    raw: str
    kind: MatcherKind
    param_names: Tuple[str, ...] = ()
    regex: Optional[Pattern] = field(default=None, repr=False, compare=False)

    def match(self, path: str) -> Optional[RouteMatch]:
        """Match a candidate path. Returns None when it doesn't match."""
        if self.kind is MatcherKind.EXACT:
            return RouteMatch() if path == self.raw else None

        if self.kind is MatcherKind.NAMED_REGEX:
            found = self.regex.fullmatch(path)
        else:
            found = self.regex.match(path)

        if found is None:
            return None

        return RouteMatch(
            args=tuple(group or "" for group in found.groups()),
            params={name: value for name, value in found.groupdict().items() if value is not None},
        )


def classify(raw: str) -> MatcherKind:
    """Decide the matcher kind for a raw pattern string."""
    if raw.startswith(RAW_REGEX_MARKER):
        return MatcherKind.RAW_REGEX
    if PARAM_TOKEN.search(raw):
        return MatcherKind.NAMED_REGEX
    return MatcherKind.EXACT


def compile_pattern(raw: str) -> RoutePattern:
    """
    Compile a route pattern.

    =====================================================================
    NAMED PATTERN COMPILATION
    =====================================================================

    Input:  "/users/:id.json"

    Step 1: Split around parameter tokens
            "/users/"   → literal, escaped
            ":id"       → (?P<id>[A-Za-z0-9.\\-+_]+?)
            ".json"     → literal, escaped (the dot is not a wildcard)

    Step 2: Join; fullmatch() supplies both anchors
            /users/(?P<id>[A-Za-z0-9.\\-+_]+?)\\.json

    =====================================================================

    Raises:
        re.error: For a raw regex that doesn't compile, or a named pattern
                  that repeats a parameter name.
    """
    kind = classify(raw)

    if kind is MatcherKind.EXACT:
        return RoutePattern(raw=raw, kind=kind)

    if kind is MatcherKind.RAW_REGEX:
        return RoutePattern(raw=raw, kind=kind, regex=re.compile(raw))

    names = []
    parts = []
    position = 0
    for token in PARAM_TOKEN.finditer(raw):
        parts.append(re.escape(raw[position:token.start()]))
        name = token.group(1)
        names.append(name)
        parts.append(f"(?P<{name}>{PARAM_CHARS})")
        position = token.end()
    parts.append(re.escape(raw[position:]))

    return RoutePattern(
        raw=raw,
        kind=kind,
        param_names=tuple(names),
        regex=re.compile("".join(parts)),
    )
