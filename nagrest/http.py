"""
HTTP
----

A thin wrapper around :class:`aiohttp.ClientSession` that knows
about JSONP and decodes the JSON bodies the repositories parse.
Errors are passed through as :class:`ResponseError`, which is
still an :class:`aiohttp.ClientResponseError`. A successful response
that is not JSON raises :class:`aiohttp.ContentTypeError`, another
:class:`~aiohttp.ClientResponseError`.
"""

import json
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from aiohttp import ClientSession, ClientTimeout, ClientResponseError, ContentTypeError

from nagrest import logger
from nagrest.config import RestConfig

JSONP_PADDING = re.compile(r"^\s*[\w$.]+\s*\((?P<body>.*)\)\s*;?\s*$", re.DOTALL)


class ResponseError(ClientResponseError):
    """
    Raised when the server answers with a status outside of 2xx, redirects it did not follow included.

    The decoded body of the response is kept on ``raw_response``.
    """

    def __init__(self, *args, raw_response: Any = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.raw_response = raw_response


class HttpResponse:
    """The status, headers and decoded body of a response."""

    def __init__(self, status: int, headers: Mapping[str, str], body: Any):
        self.status = status
        self.headers = headers
        self.body = body

    def __repr__(self):
        return f"<HttpResponse {self.status}>"


class RestResult:
    """
    The outcome of a request made through a repository or model.

    :ivar parsed_data: A model, a list of models, or the raw payload if parsing is disabled.
    :ivar raw_response: The decoded body, envelope included.
    """

    def __init__(self, parsed_data: Any, raw_response: Any, status: int = None, headers: Mapping[str, str] = None):
        self.parsed_data = parsed_data
        self.raw_response = raw_response
        self.status = status
        self.headers = headers if headers is not None else {}

    def __repr__(self):
        return f"<RestResult {self.status} {self.parsed_data!r}>"


class HttpClient:
    """
    Sends the requests of every repository through one session.

    The session is created on first use, so the client can be
    constructed outside of a running event loop.
    """

    _session: Optional[ClientSession]

    def __init__(self, config: RestConfig = None, session: ClientSession = None):
        config = config if config is not None else RestConfig()
        self.timeout = config.timeout
        self.jsonp_callback = config.jsonp_callback
        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=ClientTimeout(total=self.timeout))
            self._owns_session = True
        return self._session

    async def close(self):
        """Closes the session, unless it was supplied by the caller."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()

    async def request(
        self, method: str, url: str, *, params: List[Tuple[str, str]] = None,
        data: Any = None, headers: Dict[str, str] = None
    ) -> HttpResponse:
        """
        Sends a single request and decodes the response.

        :param method: Any HTTP verb, or ``JSONP``.
        :param url: The absolute url.
        :param params: The ordered query string pairs.
        :param data: A body to send as JSON.
        :param headers: Additional request headers.
        :raises ResponseError: If the status is not a 2xx.
        :raises ContentTypeError: If a successful response is not JSON.
        """
        method = method.upper()
        params = list(params or [])
        jsonp = method == "JSONP"
        if jsonp:
            method = "GET"
            params.append(("callback", self.jsonp_callback))

        kwargs = {}
        if data is not None:
            kwargs["json"] = data

        logger.debug("%s %s %s", method, url, params)
        async with self.session.request(method, url, params=params or None, headers=headers, **kwargs) as response:
            text = await response.text()
            logger.debug("%s %s -> %s", method, url, response.status)

            if not 200 <= response.status < 300:
                logger.warning("%s %s failed with %s %s", method, url, response.status, response.reason)
                raise ResponseError(
                    response.request_info, response.history,
                    status=response.status, message=response.reason or "",
                    headers=response.headers, raw_response=self._decode_error(text, jsonp)
                )

            try:
                body = self._decode(text, jsonp)
            except json.JSONDecodeError as error:
                raise ContentTypeError(
                    response.request_info, response.history,
                    status=response.status, message=f"Expected a JSON body: {error}",
                    headers=response.headers
                ) from error

            return HttpResponse(response.status, dict(response.headers), body)

    @staticmethod
    def _decode(text: str, jsonp=False) -> Any:
        """Decodes a JSON body, stripping the padding from a JSONP one."""
        if not text.strip():
            return None
        if jsonp:
            match = JSONP_PADDING.match(text)
            if match is not None:
                text = match.group("body")
        return json.loads(text)

    @classmethod
    def _decode_error(cls, text: str, jsonp=False) -> Any:
        """Error pages are not always JSON, so fall back to the raw text."""
        try:
            return cls._decode(text, jsonp)
        except json.JSONDecodeError:
            return text
