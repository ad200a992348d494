"""
.. autoclasstree:: nagrest.serializer

The serializer package houses the schemas that validate the resource
definitions registered with the library.
"""

from .fields import SyncField, SyncPolicy, CallableField
from .definitions import ResourceDefinition, PropertyDefinition, RelationDefinition, RESERVED_NAMES
