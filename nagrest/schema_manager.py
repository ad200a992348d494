"""
Schema Manager
--------------

Holds the resource definitions registered at startup and resolves
them, with defaults, inheritance and per-use overrides, into the
plain dictionaries the repositories and models work from.
"""

from copy import deepcopy
from typing import Any, Dict, Optional

from marshmallow import ValidationError

from nagrest import logger
from nagrest.config import RestConfig
from nagrest.serializer import ResourceDefinition

MERGED_KEYS = ("properties", "relations")
"""Keys that are merged entry by entry instead of being replaced."""


class SchemaNotFoundError(KeyError):
    """Raised when a resource has not been registered."""


class InvalidSchemaError(ValueError):
    """Raised when a resource definition does not validate."""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors if errors is not None else {}


def merge_definitions(base: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merges the overrides over the base definition.

    Top level keys are replaced, except for ``properties`` and ``relations``
    whose entries are merged by name, each entry being replaced as a whole.
    """
    merged = copy_definition(base)
    for key, value in copy_definition(overrides or {}).items():
        if key in MERGED_KEYS and isinstance(value, dict):
            merged[key] = {**merged.get(key, {}), **value}
        else:
            merged[key] = value
    return merged


def copy_definition(definition: Dict[str, Any]) -> Dict[str, Any]:
    """Copies the nested dictionaries, leaving callables such as the request formatter shared."""
    return {key: deepcopy(value) if isinstance(value, dict) else value for key, value in definition.items()}


class SchemaManager:
    """
    The registry of resource definitions.

    >>> manager = SchemaManager(RestConfig())
    >>> manager.add("user", {"route": "/users", "properties": {"id": {}}})
    >>> manager.get("user")["id_property"]
    'id'
    """

    _definitions: Dict[str, Dict[str, Any]]

    def __init__(self, config: RestConfig = None):
        self.config = config if config is not None else RestConfig()
        self._definitions = {}

    def __contains__(self, name):
        return name in self._definitions

    def add(self, name: str, definition: Dict[str, Any]):
        """
        Validates and registers a resource definition, replacing any previous one.

        :raises InvalidSchemaError: If the definition does not validate.
        """
        self._definitions[name] = self.validate(definition, name=name)
        logger.debug("Registered schema %s", name)

    def remove(self, name: str):
        """Forgets a resource definition."""
        try:
            del self._definitions[name]
        except KeyError:
            raise SchemaNotFoundError(name)

    def get(self, name: str, overrides: Dict[str, Any] = None) -> Dict[str, Any]:
        """
        Resolves a registered resource definition into a complete schema.

        :param name: The name the resource was registered under.
        :param overrides: Values that replace the registered ones for this use only.
        :raises SchemaNotFoundError: If the resource (or a parent it inherits) is not registered.
        :raises InvalidSchemaError: If the overrides, or the merged result, do not validate.
        """
        definition = self._resolve(name, set())
        if overrides:
            definition = merge_definitions(definition, self.validate(overrides, name=name, partial=True))
        return self._complete(definition, name)

    def merge(self, schema: Dict[str, Any], overrides: Dict[str, Any] = None) -> Dict[str, Any]:
        """Applies overrides to an already resolved schema."""
        if not overrides:
            return merge_definitions(schema, None)
        merged = merge_definitions(schema, self.validate(overrides, partial=True))
        self._check(merged, "<merged>")
        return merged

    def validate(self, definition: Dict[str, Any], *, name: str = None, partial=False) -> Dict[str, Any]:
        """Loads the definition through :class:`~nagrest.serializer.ResourceDefinition`."""
        try:
            return ResourceDefinition().load(definition, partial=partial)
        except ValidationError as error:
            raise InvalidSchemaError(f"Schema {name or '<anonymous>'} is not valid.", error.messages) from error

    def _resolve(self, name: str, seen: set) -> Dict[str, Any]:
        """Fetches a definition with the definitions it inherits merged underneath."""
        if name in seen:
            raise InvalidSchemaError(f"Schema {name} inherits from itself.")
        seen.add(name)

        try:
            definition = self._definitions[name]
        except KeyError:
            raise SchemaNotFoundError(name)

        parent = definition.get("inherit")
        if parent is None:
            return copy_definition(definition)
        return merge_definitions(self._resolve(parent, seen), definition)

    def _complete(self, definition: Dict[str, Any], name: str) -> Dict[str, Any]:
        """Fills in the defaults, some of which come from the current config."""
        schema = {
            "route": None,
            "id_property": self.config.id_property,
            "properties": {},
            "relations": {},
            "data_list_location": None,
            "data_item_location": None,
            "auto_parse": True,
            "request_formatter": self.config.request_formatter,
            "is_array": None,
            "flatten_item_route": self.config.flatten_item_route,
            "inherit": None,
        }
        schema.update(definition)
        self._check(schema, name)
        return schema

    @staticmethod
    def _check(schema: Dict[str, Any], name: str):
        """Cross checks the parts of a schema that can only be validated once merged."""
        errors = {}
        if not schema.get("route"):
            errors["route"] = ["A route is required."]
        for relation_name, relation in schema["relations"].items():
            if "property" in relation and relation["property"] not in schema["properties"]:
                errors.setdefault("relations", []).append(
                    f"Relation {relation_name} refers to unknown property {relation['property']}."
                )
        if errors:
            raise InvalidSchemaError(f"Schema {name} is not valid.", errors)
