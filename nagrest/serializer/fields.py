"""
Fields
-------

Defines some additional fields so that the schema definitions can
carry sync policies and callables.
"""

from enum import Enum
from typing import Union

from marshmallow import fields, ValidationError


class SyncPolicy(str, Enum):
    """Enumerates the partial sync policies of a property."""

    CREATE = "create"
    """The property is only sent when the model is created."""

    UPDATE = "update"
    """The property is only sent when the model is updated."""


class SyncField(fields.Field):
    """
    A field that accepts either a :class:`bool` or a :class:`SyncPolicy`.

    ``True`` means the property is always synced, ``False`` means never.
    """

    def _serialize(self, value: Union[bool, SyncPolicy], attr, obj, **kwargs):
        """Converts the policy to a bool or a plain string."""
        if isinstance(value, SyncPolicy):
            return value.value
        return value

    def _deserialize(self, value, attr, data, **kwargs) -> Union[bool, SyncPolicy]:
        """Converts a bool or a string to the sync policy."""
        if isinstance(value, bool):
            return value
        try:
            return SyncPolicy(value)
        except ValueError:
            raise ValidationError(
                f"Sync must be a bool or one of {', '.join(p.value for p in SyncPolicy)}, not {value!r}."
            )


class CallableField(fields.Field):
    """A field that holds a callable, such as a request formatter."""

    def _serialize(self, value, attr, obj, **kwargs):
        return value

    def _deserialize(self, value, attr, data, **kwargs):
        if not callable(value):
            raise ValidationError(f"Expected a callable, got {type(value)} instead.")
        return value

