import pytest

from nagrest.config import RestConfig, identity_formatter
from nagrest.schema_manager import SchemaManager, SchemaNotFoundError, InvalidSchemaError, merge_definitions
from nagrest.serializer import SyncPolicy
from tests.conftest import TEAM_SCHEMA, USER_SCHEMA


@pytest.fixture
def manager():
    """A schema manager that needs no server."""
    manager = SchemaManager(RestConfig("/api"))
    manager.add("user", USER_SCHEMA)
    manager.add("team", TEAM_SCHEMA)
    return manager


def test_defaults(manager):
    """Assert that a resolved schema has every key, with defaults from the config."""
    schema = manager.get("team")
    assert schema["id_property"] == "id"
    assert schema["relations"] == {}
    assert schema["auto_parse"] is True
    assert schema["is_array"] is None
    assert schema["inherit"] is None
    assert schema["flatten_item_route"] is False
    assert schema["request_formatter"] is identity_formatter


def test_config_defaults_are_resolved_late(manager):
    """Assert that changing the config after registering changes the resolved schema."""
    manager.config.flatten_item_route = True
    manager.config.id_property = "uuid"
    schema = manager.get("team")
    assert schema["flatten_item_route"] is True
    assert schema["id_property"] == "uuid"


def test_sync_is_loaded(manager):
    schema = manager.get("user", {"properties": {"username": {"sync": "update"}}})
    assert schema["properties"]["username"]["sync"] is SyncPolicy.UPDATE
    assert schema["properties"]["id"]["sync"] is False


def test_get_missing(manager):
    with pytest.raises(SchemaNotFoundError):
        manager.get("bike")


def test_remove(manager):
    manager.remove("team")
    assert "team" not in manager
    with pytest.raises(SchemaNotFoundError):
        manager.remove("team")


def test_replace(manager):
    manager.add("team", {**TEAM_SCHEMA, "route": "/squads"})
    assert manager.get("team")["route"] == "/squads"


def test_get_returns_copies(manager):
    schema = manager.get("user")
    schema["properties"]["first_name"]["remote_property"] = "firstName"
    assert "remote_property" not in manager.get("user")["properties"]["first_name"]


@pytest.mark.parametrize("definition", [
    {"route": "/users", "bogus": True},
    {"route": "/users", "properties": {"id": {"sync": "sometimes"}}},
    {"route": "/users", "properties": {"manager": {}}},
    {"route": "/users", "properties": {"_data": {}}},
    {"route": "/users", "properties": {"id": {}}, "relations": {"id": {"resource": "user"}}},
    {"route": "/users", "relations": {"team": {}}},
    {"route": "/users", "request_formatter": "not callable"},
    {"route": 12},
])
def test_invalid_definitions(manager, definition):
    with pytest.raises(InvalidSchemaError) as error:
        manager.add("broken", definition)
    assert error.value.errors


def test_invalid_override(manager):
    with pytest.raises(InvalidSchemaError):
        manager.get("user", {"is_array": "maybe"})


def test_missing_route(manager):
    manager.add("routeless", {"properties": {"id": {}}})
    with pytest.raises(InvalidSchemaError) as error:
        manager.get("routeless")
    assert "route" in error.value.errors


def test_relation_to_unknown_property(manager):
    manager.add("broken", {"route": "/b", "relations": {"owner": {"resource": "user", "property": "owner_id"}}})
    with pytest.raises(InvalidSchemaError) as error:
        manager.get("broken")
    assert "relations" in error.value.errors


class TestInherit:

    def test_inherit(self, manager):
        manager.add("admin", {
            "inherit": "user",
            "route": "/admins",
            "properties": {"permissions": {}},
        })
        schema = manager.get("admin")

        assert schema["route"] == "/admins"
        assert schema["inherit"] == "user"
        assert schema["data_item_location"] == "response.data.user"
        assert list(schema["properties"]) == ["id", "first_name", "last_name", "username", "manager_id", "permissions"]

    def test_inherit_chain(self, manager):
        manager.add("admin", {"inherit": "user", "properties": {"permissions": {}}})
        manager.add("root", {"inherit": "admin", "route": "/root"})
        schema = manager.get("root")

        assert schema["route"] == "/root"
        assert "permissions" in schema["properties"]

    def test_inherit_missing(self, manager):
        manager.add("orphan", {"inherit": "nobody"})
        with pytest.raises(SchemaNotFoundError):
            manager.get("orphan")

    def test_inherit_cycle(self, manager):
        manager.add("a", {"inherit": "b", "route": "/a"})
        manager.add("b", {"inherit": "a", "route": "/b"})
        with pytest.raises(InvalidSchemaError):
            manager.get("a")


def test_merge_definitions():
    base = {"route": "/a", "properties": {"id": {"sync": False}, "name": {}}, "relations": {}}
    merged = merge_definitions(base, {"route": "/b", "properties": {"id": {}}, "relations": {"x": {"resource": "a"}}})

    assert merged == {"route": "/b", "properties": {"id": {}, "name": {}}, "relations": {"x": {"resource": "a"}}}
    assert base["properties"]["id"] == {"sync": False}
