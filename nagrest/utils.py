"""
Utilities
---------

Dotted-path lookups into response envelopes, and the
small amount of route and query string handling the
repositories need.
"""

from typing import Any, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import quote


def get_path(data: Any, location: Optional[str], default: Any = None) -> Any:
    """
    Fetches the value at the dotted ``location`` inside ``data``.

    >>> get_path({"response": {"data": {"users": []}}}, "response.data.users")
    []

    Numeric segments index into lists. An empty location returns
    the data itself, and a missing segment returns the default.
    """
    if not location:
        return data

    current = data
    for segment in location.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                return default
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return default
            current = current[index]
        else:
            return default
    return current


def join_route(*parts: Any) -> str:
    """Joins route segments with a single slash, keeping the leading one."""
    segments = [str(part).strip("/") for part in parts if part is not None and str(part).strip("/")]
    return "/" + "/".join(segments)


def flatten_route(route: str) -> str:
    """
    Reduces a nested route to its last segment.

    >>> flatten_route("/projects/1/users")
    '/users'
    """
    return join_route(route.rstrip("/").rsplit("/", 1)[-1])


def build_item_route(schema: Mapping[str, Any], identifier: Any) -> str:
    """
    Builds the route of a single record, flattening it when the schema asks for it.

    The identifier is a single path segment, so any slash in it is escaped.

    >>> build_item_route({"route": "/users"}, "a/b")
    '/users/a%2Fb'
    """
    route = schema["route"]
    if schema.get("flatten_item_route"):
        route = flatten_route(route)
    return join_route(route, quote(str(identifier), safe=""))


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def query_items(*mappings: Optional[Mapping[str, Any]]) -> List[Tuple[str, str]]:
    """
    Flattens the given mappings into ordered query string pairs.

    ``None`` values are dropped and lists are sent as repeated keys.
    """
    items = []
    for mapping in mappings:
        if not mapping:
            continue
        for key, value in mapping.items():
            if value is None:
                continue
            values: Iterable = value if isinstance(value, (list, tuple)) else [value]
            items.extend((key, _query_value(v)) for v in values)
    return items
