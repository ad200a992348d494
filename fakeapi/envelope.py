"""
Envelope
--------

The ``{"response": {"status": ..., "data": ...}}`` body the fake
API wraps its records in, mirroring the APIs the library is used with.
"""

from enum import Enum
from typing import Any, Dict, Union

from marshmallow import Schema, fields, validates_schema, ValidationError


class EnvelopeStatus(str, Enum):
    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"


class EnvelopeSchema(Schema):
    status = fields.Enum(EnvelopeStatus, by_value=True, required=True)
    data = fields.Dict()
    message = fields.String()

    @validates_schema
    def assert_message_on_error(self, data, **kwargs):
        """An error carries a message instead of data."""
        if data["status"] == EnvelopeStatus.ERROR and "message" not in data:
            raise ValidationError("An error response must have a message.")


def envelope(status: Union[EnvelopeStatus, str] = EnvelopeStatus.SUCCESS, message: str = None, **data) -> Dict[str, Any]:
    """
    Wraps the data in an envelope under a ``response`` key.

    >>> envelope(users=[])
    {'response': {'status': 'success', 'data': {'users': []}}}
    """
    body = {"status": EnvelopeStatus(status), "data": data}
    if message is not None:
        body["message"] = message
    return {"response": EnvelopeSchema().dump(body)}
