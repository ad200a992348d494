"""
A scriptable fake REST API. Tests queue the requests they expect
together with the responses to send back, then check that every
expectation was met.
"""

import logging

logger = logging.getLogger(__name__)
handler = logging.StreamHandler()
formatter = logging.Formatter('%(asctime)s %(name)-12s %(levelname)-8s %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)
logger.setLevel(logging.DEBUG)

from fakeapi.backend import MockBackend, Expectation  # noqa: E402
from fakeapi.envelope import envelope, EnvelopeSchema, EnvelopeStatus  # noqa: E402
