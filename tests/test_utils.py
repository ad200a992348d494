import pytest

from nagrest.utils import get_path, join_route, flatten_route, query_items, build_item_route

BODY = {"response": {"status": "success", "data": {"users": [{"id": 1}, {"id": 2}]}}}


@pytest.mark.parametrize(("location", "expected"), [
    ("response.status", "success"),
    ("response.data.users", [{"id": 1}, {"id": 2}]),
    ("response.data.users.1.id", 2),
    ("response.data.users.5", None),
    ("response.data.user", None),
    ("response.status.code", None),
    (None, BODY),
    ("", BODY),
])
def test_get_path(location, expected):
    assert get_path(BODY, location) == expected


def test_get_path_default():
    assert get_path(BODY, "response.missing", default=[]) == []


@pytest.mark.parametrize(("parts", "expected"), [
    (("/users", 1), "/users/1"),
    (("/users/", "/1/"), "/users/1"),
    (("users",), "/users"),
    (("/projects/1", "/users"), "/projects/1/users"),
    (("/users", None), "/users"),
])
def test_join_route(parts, expected):
    assert join_route(*parts) == expected


@pytest.mark.parametrize(("route", "expected"), [
    ("/projects/1/users", "/users"),
    ("/projects/1/users/", "/users"),
    ("/users", "/users"),
])
def test_flatten_route(route, expected):
    assert flatten_route(route) == expected


def test_build_item_route():
    schema = {"route": "/projects/1/users", "flatten_item_route": False}
    assert build_item_route(schema, 3) == "/projects/1/users/3"
    assert build_item_route({**schema, "flatten_item_route": True}, 3) == "/users/3"


@pytest.mark.parametrize(("identifier", "expected"), [
    ("a/b", "/users/a%2Fb"),
    ("john doe", "/users/john%20doe"),
    ("x?y", "/users/x%3Fy"),
])
def test_build_item_route_escapes_identifier(identifier, expected):
    """Assert that an identifier always stays a single path segment."""
    assert build_item_route({"route": "/users"}, identifier) == expected


def test_query_items():
    """Assert that the values keep their order and are converted to strings."""
    items = query_items({"first_name": "John", "active": True, "deleted": None}, None, {"tag": ["a", "b"], "page": 2})
    assert items == [("first_name", "John"), ("active", "true"), ("tag", "a"), ("tag", "b"), ("page", "2")]
