"""
Definitions
-----------

The schemas that validate resource definitions as they are
registered with the :class:`~nagrest.schema_manager.SchemaManager`.

A resource definition looks like this:

.. code:: python

    {
        "route": "/users",
        "properties": {
            "id": {"sync": False},
            "first_name": {"remote_property": "firstName"},
        },
        "relations": {
            "manager": {"resource": "user", "property": "manager_id"},
        },
        "data_list_location": "response.data.users",
        "data_item_location": "response.data.user",
    }
"""

from marshmallow import Schema, fields, validates_schema, ValidationError, RAISE

from .fields import SyncField, CallableField

RESERVED_NAMES = frozenset({"manager"})
"""Property names that would shadow the model's own attributes."""


class PropertyDefinition(Schema):
    """A single property of a resource."""

    class Meta:
        unknown = RAISE

    remote_property = fields.String()
    sync = SyncField()


class RelationDefinition(Schema):
    """A link from one resource to another."""

    class Meta:
        unknown = RAISE

    resource = fields.String(required=True)
    property = fields.String()
    flatten = fields.Boolean()


class ResourceDefinition(Schema):
    """The full description of a resource type."""

    class Meta:
        unknown = RAISE

    route = fields.String()
    id_property = fields.String()
    properties = fields.Dict(keys=fields.String(), values=fields.Nested(PropertyDefinition))
    relations = fields.Dict(keys=fields.String(), values=fields.Nested(RelationDefinition))
    data_list_location = fields.String(allow_none=True)
    data_item_location = fields.String(allow_none=True)
    auto_parse = fields.Boolean()
    request_formatter = CallableField()
    is_array = fields.Boolean(allow_none=True)
    flatten_item_route = fields.Boolean()
    inherit = fields.String(allow_none=True)

    @validates_schema
    def assert_property_names(self, data, **kwargs):
        """Asserts that no property or relation shadows the model internals."""
        names = list(data.get("properties", {})) + list(data.get("relations", {}))
        for name in names:
            if name.startswith("_") or name in RESERVED_NAMES:
                raise ValidationError(f"The name {name!r} is reserved.", "properties")

    @validates_schema
    def assert_no_overlap(self, data, **kwargs):
        """Asserts that a relation never has the same name as a property."""
        overlap = set(data.get("properties", {})) & set(data.get("relations", {}))
        if overlap:
            raise ValidationError(f"Names used as both property and relation: {', '.join(sorted(overlap))}.")
