"""Ordered page route table shared by the server dispatcher and the renderer.

Path patterns use the client router's syntax: ``:name`` captures one
segment, ``:name?`` an optional one, and ``*`` the remainder of the path
under positional keys ``"0"``, ``"1"``, ... . Entries are tried in
declaration order and the first match wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional
from urllib.parse import urlsplit

from graphql import GraphQLError, GraphQLSchema, parse, validate

from noteserver.core.errors import RouteTableError
from noteserver.graphql.gateway import GraphQLSpec


_PARAM_SEGMENT = re.compile(r"^:([A-Za-z_][A-Za-z0-9_]*)(\?)?$")


def compile_pattern(path: str, exact: bool = True) -> tuple[re.Pattern[str], dict[str, str]]:
    """Compile a route pattern to a regex and a group-name to param-key map."""
    if not path.startswith("/"):
        raise RouteTableError(f"Route path must start with '/': {path!r}")

    groups: dict[str, str] = {}
    parts: list[str] = []
    wildcards = 0
    for segment in (s for s in path.split("/") if s):
        if segment == "*":
            group = f"_wildcard{wildcards}"
            groups[group] = str(wildcards)
            wildcards += 1
            parts.append(f"(?:/(?P<{group}>.*))?")
            continue
        param = _PARAM_SEGMENT.match(segment)
        if param:
            name, optional = param.group(1), param.group(2)
            if name in groups:
                raise RouteTableError(f"Duplicate parameter '{name}' in route {path!r}")
            groups[name] = name
            capture = f"/(?P<{name}>[^/]+)"
            parts.append(f"(?:{capture})?" if optional else capture)
            continue
        if ":" in segment or "*" in segment:
            raise RouteTableError(f"Unsupported segment {segment!r} in route {path!r}")
        parts.append("/" + re.escape(segment))

    tail = "/?$" if exact else "(?=/|$)"
    try:
        return re.compile("^" + "".join(parts) + tail), groups
    except re.error as exc:
        raise RouteTableError(f"Invalid route pattern {path!r}: {exc}") from exc


@dataclass(frozen=True)
class RouteEntry:
    path: str
    view: str
    requires_auth: bool = False
    graphql: Optional[GraphQLSpec] = None
    exact: bool = True
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)
    _groups: dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.view:
            raise RouteTableError(f"Route {self.path!r} has no view")
        regex, groups = compile_pattern(self.path, self.exact)
        object.__setattr__(self, "_regex", regex)
        object.__setattr__(self, "_groups", groups)

        if self.graphql is None:
            return
        for mapper in (self.graphql.map_params, self.graphql.map_resp):
            if mapper is not None and not callable(mapper):
                raise RouteTableError(f"Route {self.path!r} declares a mapper that is not callable")
        try:
            parse(self.graphql.query)
        except GraphQLError as exc:
            raise RouteTableError(f"Route {self.path!r} has an invalid query: {exc.message}") from exc

    def match(self, path: str) -> Optional[dict[str, str]]:
        found = self._regex.match(path)
        if found is None:
            return None
        return {
            self._groups[group]: value
            for group, value in found.groupdict().items()
            if value is not None
        }


@dataclass(frozen=True)
class MatchResult:
    entry: Optional[RouteEntry]
    params: dict[str, str] = field(default_factory=dict)
    login_required: bool = False

    @property
    def matched(self) -> bool:
        return self.entry is not None


def is_static_path(path: str, prefix: str) -> bool:
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


class RouteTable:
    """Immutable, ordered collection of :class:`RouteEntry`."""

    def __init__(self, entries: Iterable[RouteEntry]):
        self.entries: tuple[RouteEntry, ...] = tuple(entries)
        seen: set[tuple[str, bool]] = set()
        for entry in self.entries:
            key = (entry.path, entry.requires_auth)
            if key in seen:
                raise RouteTableError(f"Route {entry.path!r} is declared twice")
            seen.add(key)

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def match(self, url: str, is_authenticated: bool) -> MatchResult:
        """
        Return the first entry matching ``url``.

        Anonymous callers skip auth-only entries so a later public entry can
        serve them; if only an auth-only entry matched, the result carries
        ``login_required``.
        """
        path = urlsplit(url).path or "/"
        login_required = False
        for entry in self.entries:
            params = entry.match(path)
            if params is None:
                continue
            if entry.requires_auth and not is_authenticated:
                login_required = True
                continue
            return MatchResult(entry=entry, params=params)
        return MatchResult(entry=None, login_required=login_required)

    def validate_queries(self, schema: GraphQLSchema) -> None:
        for entry in self.entries:
            if entry.graphql is None:
                continue
            errors = validate(schema, parse(entry.graphql.query))
            if errors:
                details = "; ".join(err.message for err in errors)
                raise RouteTableError(f"Route {entry.path!r} query does not match the schema: {details}")
