"""
Config
------

Environment defaults and the runtime configuration shared
by the schema manager and every repository.
"""

import os
from typing import Any, Callable

mode = os.getenv("NAGREST_MODE", "production")
"""The operational mode of the library, ``development`` enables debug logging."""

default_base_url = os.getenv("NAGREST_BASE_URL", "")
"""The base url prefixed to every full route."""

request_timeout = float(os.getenv("NAGREST_TIMEOUT", "30"))
"""The total timeout in seconds of a single request."""


def identity_formatter(data: Any) -> Any:
    """The default request formatter, which sends the data as is."""
    return data


class RestConfig:
    """
    The shared configuration of a set of repositories.

    Changing an attribute affects every schema resolved
    and every repository created afterwards.
    """

    def __init__(
        self, base_url: str = None, *, flatten_item_route=False, update_method="PUT",
        request_formatter: Callable[[Any], Any] = identity_formatter, id_property="id",
        jsonp_callback="JSON_CALLBACK", timeout: float = None
    ):
        self.base_url = base_url if base_url is not None else default_base_url
        self.flatten_item_route = flatten_item_route
        self.update_method = update_method.upper()
        self.request_formatter = request_formatter
        self.id_property = id_property
        self.jsonp_callback = jsonp_callback
        self.timeout = timeout if timeout is not None else request_timeout

    def full_url(self, route: str) -> str:
        """Prefixes the route with the base url."""
        if not self.base_url:
            return route
        return self.base_url.rstrip("/") + "/" + route.lstrip("/")
