import pytest
from faker import Faker

from fakeapi import MockBackend
from nagrest.config import RestConfig
from nagrest.http import HttpClient
from nagrest.repository import RepositoryFactory
from nagrest.schema_manager import SchemaManager

fake = Faker()

USER_SCHEMA = {
    "route": "/users",
    "properties": {
        "id": {"sync": False},
        "first_name": {},
        "last_name": {},
        "username": {},
        "manager_id": {},
    },
    "relations": {
        "job": {"resource": "project"},
        "reports_to": {"resource": "user", "property": "manager_id"},
    },
    "data_list_location": "response.data.users",
    "data_item_location": "response.data.user",
}

PROJECT_SCHEMA = {
    "route": "/projects",
    "properties": {
        "project_id": {"sync": False},
        "name": {},
    },
    "relations": {
        "team": {"resource": "team", "flatten": False},
    },
    "id_property": "project_id",
    "data_list_location": "response.data.projects",
    "data_item_location": "response.data.project",
}

TEAM_SCHEMA = {
    "route": "/teams",
    "properties": {
        "id": {"sync": False},
        "name": {},
    },
    "data_list_location": "response.data.teams",
    "data_item_location": "response.data.team",
}


def user_record(identifier=1, **values):
    """A user as the server sends it."""
    record = {
        "id": identifier,
        "first_name": fake.first_name(),
        "last_name": fake.last_name(),
        "username": fake.user_name(),
        "manager_id": None,
    }
    record.update(values)
    return record


@pytest.fixture
def backend():
    """The fake API, which must have seen exactly the requests it expected."""
    backend = MockBackend()
    yield backend
    backend.verify_no_outstanding_expectation()
    backend.verify_no_outstanding_request()


@pytest.fixture
async def server(aiohttp_server, backend):
    return await aiohttp_server(backend.app)


@pytest.fixture
def config(server) -> RestConfig:
    return RestConfig(str(server.make_url("/")).rstrip("/"))


@pytest.fixture
async def http_client(config):
    client = HttpClient(config)
    yield client
    await client.close()


@pytest.fixture
def schema_manager(config) -> SchemaManager:
    manager = SchemaManager(config)
    manager.add("user", USER_SCHEMA)
    manager.add("project", PROJECT_SCHEMA)
    manager.add("team", TEAM_SCHEMA)
    return manager


@pytest.fixture
def repository_factory(schema_manager, http_client, config) -> RepositoryFactory:
    return RepositoryFactory(schema_manager, http_client, config)
