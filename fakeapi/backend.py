"""
Backend
-------

An aiohttp application that answers requests from a queue of
expectations, in order, and records anything that does not match.

.. code:: python

    backend.expect("GET", "/users/1").respond(200, envelope(user={"id": 1}))
    result = await users.find(1)
    backend.verify_no_outstanding_expectation()
"""

import json
from collections import deque
from http import HTTPStatus
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Tuple, Union

from aiohttp import web
from aiohttp.web_request import Request

from fakeapi import logger

Responder = Callable[[str, str, Any], Tuple[int, Any, Dict[str, str]]]
HeaderCheck = Union[Dict[str, str], Callable[[Mapping[str, str]], bool]]

NO_BODY = object()
"""Marks an expectation that does not check the request body."""


class Expectation:
    """A single request the backend expects, and how to answer it."""

    def __init__(self, method: str, path: str, data: Any = NO_BODY, headers: Optional[HeaderCheck] = None):
        self.method = method.upper()
        self.path = path
        self.data = data
        self.headers = headers
        self.status = HTTPStatus.OK
        self.body: Any = None
        self.response_headers: Dict[str, str] = {}
        self.responder: Optional[Responder] = None

    def __repr__(self):
        return f"<Expectation {self.method} {self.path}>"

    def respond(self, status: Union[int, Responder] = HTTPStatus.OK, body: Any = None, headers: Dict[str, str] = None):
        """
        Sets the response, either as a status and body or as a callable
        receiving the method, url and data and returning all three.
        """
        if callable(status):
            self.responder = status
        else:
            self.status = status
            self.body = body
            self.response_headers = headers or {}
        return self

    @property
    def jsonp(self) -> bool:
        return self.method == "JSONP"

    def mismatches(self, request: Request, data: Any) -> List[str]:
        """Lists the ways the request differs from this expectation."""
        problems = []
        method = "GET" if self.jsonp else self.method
        if request.method != method:
            problems.append(f"expected method {self.method}, got {request.method}")
        if request.path_qs != self.path:
            problems.append(f"expected url {self.path}, got {request.path_qs}")
        if self.data is not NO_BODY and data != self.data:
            problems.append(f"expected body {self.data!r}, got {data!r}")
        if self.headers is not None:
            headers = request.headers
            if callable(self.headers):
                if not self.headers(headers):
                    problems.append(f"headers {dict(headers)!r} did not match")
            elif any(headers.get(key) != value for key, value in self.headers.items()):
                problems.append(f"expected headers {self.headers!r}, got {dict(headers)!r}")
        return problems

    def build_response(self, request: Request, data: Any) -> web.Response:
        if self.responder is not None:
            status, body, headers = self.responder(request.method, request.path_qs, data)
        else:
            status, body, headers = self.status, self.body, self.response_headers

        if body is None:
            return web.Response(status=status, headers=headers)
        if isinstance(body, bytes):
            return web.Response(status=status, body=body, content_type="text/plain", headers=headers)

        text = json.dumps(body)
        if self.jsonp:
            callback = request.query.get("callback", "callback")
            return web.Response(
                status=status, text=f"{callback}({text})", content_type="application/javascript", headers=headers
            )
        return web.Response(status=status, text=text, content_type="application/json", headers=headers)


class MockBackend:
    """
    Answers requests from a queue of :class:`Expectation`.
    """

    expectations: Deque[Expectation]
    errors: List[str]

    def __init__(self):
        self.expectations = deque()
        self.errors = []
        self.requests = []
        self.app = web.Application()
        self.app.router.add_route("*", "/{tail:.*}", self.handle)

    def expect(self, method: str, path: str, data: Any = NO_BODY, headers: HeaderCheck = None) -> Expectation:
        """Queues an expected request, returning it so the response can be set."""
        expectation = Expectation(method, path, data, headers)
        self.expectations.append(expectation)
        return expectation

    async def handle(self, request: Request) -> web.Response:
        data = None
        if request.body_exists:
            text = await request.text()
            data = json.loads(text) if text else None
        self.requests.append((request.method, request.path_qs, data))

        if not self.expectations:
            self.errors.append(f"unexpected request {request.method} {request.path_qs}")
            logger.error(self.errors[-1])
            return web.Response(status=HTTPStatus.INTERNAL_SERVER_ERROR)

        expectation = self.expectations.popleft()
        problems = expectation.mismatches(request, data)
        if problems:
            self.errors.append(f"{expectation!r}: {'; '.join(problems)}")
            logger.error(self.errors[-1])
            return web.Response(status=HTTPStatus.INTERNAL_SERVER_ERROR)

        logger.debug("Answering %s %s", request.method, request.path_qs)
        return expectation.build_response(request, data)

    def verify_no_outstanding_expectation(self):
        """Asserts every expected request was made, and made as expected."""
        assert not self.errors, "\n".join(self.errors)
        assert not self.expectations, f"Unsatisfied expectations: {list(self.expectations)!r}"

    def verify_no_outstanding_request(self):
        """Asserts no request arrived that was not expected."""
        unexpected = [error for error in self.errors if error.startswith("unexpected request")]
        assert not unexpected, "\n".join(unexpected)
