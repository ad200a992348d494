"""
Model
-----

A model is the in-memory copy of one remote record. The properties of
its schema are read and written as plain attributes, while everything
else (state, routes, syncing and relations) lives on ``model.manager``.

.. code:: python

    user = users.create({"first_name": "John"})
    user.last_name = "Doe"
    await user.manager.sync()
    assert user.manager.state == ModelState.LOADED
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING

from nagrest import logger
from nagrest.http import RestResult
from nagrest.serializer import SyncPolicy
from nagrest.utils import get_path, join_route, flatten_route, build_item_route, query_items

if TYPE_CHECKING:
    from nagrest.repository import Repository


class ModelState(str, Enum):
    """The lifecycle of a model."""

    NEW = "new"
    """The record does not exist remotely yet."""

    LOADED = "loaded"
    """The record exists remotely."""

    DELETED = "deleted"
    """The record has been removed remotely."""


class ModelStateError(Exception):
    """Raised when an operation is not possible in the model's current state."""


class ModelManager:
    """
    Holds the data and the lifecycle of a model, and talks to the server on its behalf.
    """

    model: "Model"
    _data: Dict[str, Any]
    _relations: Dict[str, Any]

    def __init__(self, repository: "Repository", schema: Dict[str, Any], state: ModelState = ModelState.NEW):
        self.repository = repository
        self.schema = schema
        self.state = state
        self._data = {name: None for name in schema["properties"]}
        self._dirty = set()
        self._relations = {}

    @property
    def resource_name(self) -> str:
        return self.repository.resource_name

    @property
    def properties(self) -> Dict[str, Dict[str, Any]]:
        return self.schema["properties"]

    @property
    def id(self) -> Any:
        return self._data.get(self.schema["id_property"])

    @property
    def route(self) -> str:
        """The item route once the record exists, otherwise the collection route."""
        if self.state == ModelState.NEW or self.id is None:
            return self.schema["route"]
        return build_item_route(self.schema, self.id)

    @property
    def full_route(self) -> str:
        return self.repository.config.full_url(self.route)

    @property
    def is_dirty(self) -> bool:
        return bool(self._dirty)

    @property
    def dirty_properties(self) -> List[str]:
        return [name for name in self.properties if name in self._dirty]

    def get(self, name: str) -> Any:
        """Gets a property, or the cached value of a relation."""
        if name in self._data:
            return self._data[name]
        if name in self.schema["relations"]:
            return self._relations.get(name)
        raise AttributeError(f"{self.resource_name} has no property {name!r}")

    def set(self, name: str, value: Any):
        """Sets a property, marking it dirty if the value changed."""
        if name not in self._data:
            raise AttributeError(f"{self.resource_name} has no property {name!r}")
        if self._data[name] != value:
            self._data[name] = value
            self._dirty.add(name)
            self._forget_relations_of(name)

    def load(self, data: Mapping[str, Any], remote=False):
        """
        Replaces the data of the model.

        Fields that are not properties of the schema are dropped and
        missing properties are set to ``None``. Relations included in
        the data are parsed into models of the related resource. A cached
        relation found by a property is dropped when that property changes.

        :param data: The values to load.
        :param remote: Whether the data is keyed by the remote property names.
        """
        previous = dict(self._data)
        for name, options in self.properties.items():
            key = options.get("remote_property", name) if remote else name
            self._data[name] = data.get(key)

        for name, value in previous.items():
            if self._data[name] != value:
                self._forget_relations_of(name)

        for name in self.schema["relations"]:
            if data.get(name) is not None:
                self._relations[name] = self._parse_relation(name, data[name])

        self._dirty.clear()

    def to_json(self) -> Dict[str, Any]:
        """The data of the model, keyed by the local property names."""
        return dict(self._data)

    def to_remote(self, action="create", only_dirty=False) -> Dict[str, Any]:
        """
        The data of the model as it is sent to the server.

        :param action: Either ``create`` or ``update``, used to apply the sync policies.
        :param only_dirty: Whether to only include the properties changed since the last load.
        """
        remote = {}
        for name, options in self.properties.items():
            sync = options.get("sync", True)
            if sync is False:
                continue
            if sync == SyncPolicy.CREATE and action != "create":
                continue
            if sync == SyncPolicy.UPDATE and action != "update":
                continue
            if only_dirty and name not in self._dirty:
                continue
            remote[options.get("remote_property", name)] = self._data[name]
        return remote

    async def sync(self, *, headers: Dict[str, str] = None, query: Dict[str, Any] = None) -> RestResult:
        """
        Creates the record remotely if it is new, otherwise updates it.

        The record sent back by the server, if any, is loaded into the model.

        :raises ModelStateError: If the model was deleted.
        :raises ResponseError: If the server responds with an error status.
        """
        if self.state == ModelState.DELETED:
            raise ModelStateError(f"Cannot sync a deleted {self.resource_name}.")

        config = self.repository.config
        if self.state == ModelState.NEW:
            method, body = "POST", self.to_remote("create")
        else:
            method = config.update_method
            body = self.to_remote("update", only_dirty=method == "PATCH")

        logger.debug("Syncing %s with %s", self.resource_name, method)
        response = await self.repository.factory.http.request(
            method, self.full_route, params=query_items(query),
            data=self.schema["request_formatter"](body), headers=headers
        )

        payload = get_path(response.body, self.schema["data_item_location"])
        if self.schema["auto_parse"] and isinstance(payload, Mapping):
            self.load(payload, remote=True)
        else:
            self._dirty.clear()
        self.state = ModelState.LOADED

        return RestResult(self.model, response.body, response.status, response.headers)

    async def remove(self, *, headers: Dict[str, str] = None, query: Dict[str, Any] = None) -> RestResult:
        """
        Deletes the record remotely.

        :raises ModelStateError: If the record does not exist remotely.
        :raises ResponseError: If the server responds with an error status.
        """
        if self.state != ModelState.LOADED:
            raise ModelStateError(f"Cannot remove a {self.resource_name} that is {self.state.value}.")

        response = await self.repository.factory.http.request(
            "DELETE", self.full_route, params=query_items(query), headers=headers
        )
        self.state = ModelState.DELETED
        return RestResult(None, response.body, response.status, response.headers)

    async def get_relation(self, name: str, refresh=False) -> Any:
        """
        Fetches a related model (or list of models), caching the result.

        Relations that name a ``property`` are found by the value of that
        property. Other relations are nested under this model's route.

        :param name: The name of the relation in the schema.
        :param refresh: Whether to ignore the cached value.
        :raises KeyError: If there is no such relation.
        :raises ModelStateError: If a nested relation is requested on an unsaved model.
        """
        relation = self.schema["relations"][name]
        if not refresh and name in self._relations:
            return self._relations[name]

        factory = self.repository.factory
        if "property" in relation:
            value = self._data.get(relation["property"])
            result: Optional[Any] = None
            if value is not None:
                result = (await factory.create(relation["resource"]).find(value)).parsed_data
        else:
            if self.state != ModelState.LOADED or self.id is None:
                raise ModelStateError(f"The {name} of a {self.state.value} {self.resource_name} cannot be fetched.")
            related_route = factory.schema_manager.get(relation["resource"])["route"]
            repository = factory.create(relation["resource"], {
                "route": join_route(self.route, flatten_route(related_route)),
                "flatten_item_route": relation.get("flatten", True),
            })
            result = (await repository.find()).parsed_data

        self._relations[name] = result
        return result

    def _forget_relations_of(self, property_name: str):
        """Drops the cached relations found by the given property."""
        for name, relation in self.schema["relations"].items():
            if relation.get("property") == property_name:
                self._relations.pop(name, None)

    def _parse_relation(self, name: str, data: Any) -> Any:
        repository = self.repository.factory.create(self.schema["relations"][name]["resource"])
        if isinstance(data, list):
            return [repository.load(item) for item in data]
        return repository.load(data)


class Model:
    """
    One record of a resource. Schema properties are plain attributes.
    """

    manager: ModelManager

    def __init__(self, manager: ModelManager):
        object.__setattr__(self, "manager", manager)
        manager.model = self

    def __getattr__(self, name):
        if name.startswith("_") or name == "manager":
            raise AttributeError(name)
        return self.manager.get(name)

    def __setattr__(self, name, value):
        self.manager.set(name, value)

    def __repr__(self):
        return f"<{self.manager.resource_name} {self.manager.state.value} id={self.manager.id!r}>"
