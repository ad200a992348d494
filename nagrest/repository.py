"""
Repository
----------

A repository is the gateway to one resource type. It builds the
routes from the resource's schema, issues the find requests, and
parses the responses into :class:`~nagrest.model.Model` instances.

.. code:: python

    factory = RepositoryFactory(schema_manager)
    users = factory.create("user")
    result = await users.find({"first_name": "John"})
    for user in result.parsed_data:
        print(user.manager.to_json())
"""

from typing import Any, Dict, Mapping, Optional

from nagrest import logger
from nagrest.config import RestConfig
from nagrest.http import HttpClient, RestResult
from nagrest.model import Model, ModelManager, ModelState
from nagrest.schema_manager import SchemaManager
from nagrest.utils import get_path, query_items, build_item_route


class Repository:
    """
    Finds and creates the models of a single resource type.
    """

    _forced_is_array: Optional[bool]

    def __init__(self, factory: "RepositoryFactory", resource_name: str, schema: Dict[str, Any]):
        self.factory = factory
        self.resource_name = resource_name
        self.schema = schema
        self._forced_is_array = None

    def __repr__(self):
        return f"<Repository {self.resource_name} {self.route}>"

    @property
    def config(self) -> RestConfig:
        return self.factory.config

    @property
    def route(self) -> str:
        """The route of the collection, without the base url."""
        return self.schema["route"]

    @property
    def full_route(self) -> str:
        """The route of the collection, prefixed with the base url."""
        return self.config.full_url(self.route)

    def item_route(self, identifier: Any) -> str:
        """The route of a single record, without the base url."""
        return build_item_route(self.schema, identifier)

    def create(self, data: Dict[str, Any] = None, loaded=False, overrides: Dict[str, Any] = None) -> Model:
        """
        Creates a model of this resource.

        :param data: The initial values, keyed by the local property names.
        :param loaded: Whether the model represents a record that already exists remotely.
        :param overrides: Schema values that apply to this model only.
        """
        schema = self.factory.schema_manager.merge(self.schema, overrides) if overrides else self.schema
        manager = ModelManager(self, schema, ModelState.LOADED if loaded else ModelState.NEW)
        manager.load(data or {})
        return Model(manager)

    def load(self, remote_data: Mapping[str, Any]) -> Model:
        """Creates a loaded model from a record as the server sent it."""
        manager = ModelManager(self, self.schema, ModelState.LOADED)
        manager.load(remote_data, remote=True)
        return Model(manager)

    def force_is_array(self, is_array: bool) -> "Repository":
        """
        Forces the next find to parse the response as a list (or a single record),
        whatever the request or the schema would otherwise imply.
        """
        self._forced_is_array = is_array
        return self

    async def find(
        self, params: Any = None, *, method="GET", data: Any = None,
        headers: Dict[str, str] = None, query: Dict[str, Any] = None
    ) -> RestResult:
        """
        Finds a single record by its identifier, or a list of records by the given filters.

        :param params: An identifier for a single record, or a mapping of filters sent as the query string.
        :param method: The HTTP method, ``JSONP`` included.
        :param data: A body to send with the request.
        :param headers: Additional request headers.
        :param query: Additional query string values, sent after the filters.
        :raises ResponseError: If the server responds with an error status.
        """
        is_item = params is not None and not isinstance(params, Mapping)
        if is_item:
            url = self.config.full_url(self.item_route(params))
            query_string = query_items(query)
        else:
            url = self.full_route
            query_string = query_items(params, query)

        is_array = self._is_array()
        logger.debug("Finding %s (%s) at %s", self.resource_name, "item" if is_item else "list", url)
        response = await self.factory.http.request(method, url, params=query_string, data=data, headers=headers)

        return RestResult(
            self.parse(response.body, is_array, is_item), response.body, response.status, response.headers
        )

    def parse(self, raw_response: Any, is_array: Optional[bool] = None, is_item=False) -> Any:
        """
        Extracts the payload from the response envelope and turns it into models.

        :param is_array: Whether to parse a list or a single record, ``None`` to decide from the payload.
        :param is_item: Whether the request was for a single record, used when the payload is missing.
        """
        if is_array is None:
            is_array = self._payload_is_array(raw_response, is_item)

        location = self.schema["data_list_location"] if is_array else self.schema["data_item_location"]
        payload = get_path(raw_response, location)

        if not self.schema["auto_parse"]:
            return payload

        if is_array:
            if payload is None:
                return []
            if isinstance(payload, Mapping):
                payload = [payload]
            return [self.load(item) for item in payload if isinstance(item, Mapping)]

        return self.load(payload) if isinstance(payload, Mapping) else None

    def _payload_is_array(self, raw_response: Any, is_item: bool) -> bool:
        """A list at the list location means a list, a record at the item location means a single one."""
        if isinstance(get_path(raw_response, self.schema["data_list_location"]), list):
            return True
        if isinstance(get_path(raw_response, self.schema["data_item_location"]), Mapping):
            return False
        return not is_item

    def _is_array(self) -> Optional[bool]:
        """The forced flag wins over the schema, otherwise the payload decides."""
        forced, self._forced_is_array = self._forced_is_array, None
        if forced is not None:
            return forced
        return self.schema["is_array"]


class RepositoryFactory:
    """
    Creates repositories that share a schema manager, a config and an HTTP client.
    """

    def __init__(self, schema_manager: SchemaManager, http: HttpClient = None, config: RestConfig = None):
        self.schema_manager = schema_manager
        self.config = config if config is not None else schema_manager.config
        self.http = http if http is not None else HttpClient(self.config)

    def create(self, resource_name: str, overrides: Dict[str, Any] = None) -> Repository:
        """
        Creates a repository for the resource.

        :param overrides: Schema values that apply to this repository only.
        :raises SchemaNotFoundError: If the resource is not registered.
        """
        return Repository(self, resource_name, self.schema_manager.get(resource_name, overrides))
