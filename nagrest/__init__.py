"""
The main package for the REST resource library.
"""

import logging

from nagrest.config import mode

logger = logging.getLogger(__name__)
handler = logging.StreamHandler()
formatter = logging.Formatter('%(asctime)s %(name)-12s %(levelname)-8s %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)
logger.setLevel(logging.DEBUG if mode == "development" else logging.INFO)

from nagrest.config import RestConfig  # noqa: E402
from nagrest.http import HttpClient, HttpResponse, ResponseError, RestResult  # noqa: E402
from nagrest.model import Model, ModelManager, ModelState, ModelStateError  # noqa: E402
from nagrest.repository import Repository, RepositoryFactory  # noqa: E402
from nagrest.schema_manager import SchemaManager, SchemaNotFoundError, InvalidSchemaError  # noqa: E402
