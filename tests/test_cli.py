import json

import pytest

from fakeapi import envelope
from nagrest.cli import build_parser, parse_pairs, find
from tests.conftest import USER_SCHEMA, user_record


@pytest.fixture
def schemas_file(tmp_path):
    path = tmp_path / "schemas.json"
    path.write_text(json.dumps({"user": USER_SCHEMA}))
    return path


def test_parse_pairs():
    assert parse_pairs(["a=1", "b = two"], "=") == {"a": "1", "b": "two"}
    assert parse_pairs(["X-Token: abc:def"], ":") == {"X-Token": "abc:def"}
    with pytest.raises(ValueError):
        parse_pairs(["novalue"], "=")


def test_parser(schemas_file):
    args = build_parser().parse_args(["--schemas", str(schemas_file), "--single", "user", "1"])
    try:
        assert args.resource == "user"
        assert args.identifier == "1"
        assert args.is_array is False
        assert args.method == "GET"
    finally:
        args.schemas.close()


async def test_find_one(schemas_file, server, backend):
    record = user_record(1)
    backend.expect("GET", "/users/1?fields=all", headers={"X-Token": "abc"}).respond(200, envelope(user=record))
    args = build_parser().parse_args([
        "--schemas", str(schemas_file), "--base-url", str(server.make_url("/")).rstrip("/"),
        "--query", "fields=all", "--header", "X-Token: abc", "user", "1",
    ])

    with args.schemas:
        assert await find(args) == record


async def test_find_many(schemas_file, server, backend):
    records = [user_record(1), user_record(2)]
    backend.expect("GET", "/users?first_name=John").respond(200, envelope(users=records))
    args = build_parser().parse_args([
        "--schemas", str(schemas_file), "--base-url", str(server.make_url("/")).rstrip("/"),
        "--query", "first_name=John", "user",
    ])

    with args.schemas:
        assert await find(args) == records
