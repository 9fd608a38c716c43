"""Scripted CMS for ``httpx.MockTransport``."""

import json
import re
from collections.abc import Callable
from typing import Any

import httpx

from tests.mocks.cms_responses import NOT_FOUND_ERROR

CMS_API_URL = "http://cms.test/api"
CMS_GRAPHQL_URL = "http://cms.test/graphql"
CMS_MEDIA_URL = "http://cms.test"

_OPERATION_NAME = re.compile(r"query\s+(\w+)")

Reply = dict[str, Any] | tuple[int, Any] | Exception | Callable[..., Any]


class CMSStub:
    """Scripted CMS answering requests made through ``httpx.MockTransport``.

    GraphQL requests are matched by operation name, REST requests by path
    relative to the API root. A reply is one of:

    - a dict: GraphQL ``data`` member, or the REST body, returned with 200
    - ``(status, body)``: raw status and JSON body (``body`` may be bytes)
    - an exception: raised from the transport (e.g., ``httpx.ConnectError``)
    - a callable: called with the GraphQL variables (or REST query params)
      and its return value handled as above

    Every request is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.graphql: dict[str, Reply] = {}
        self.rest: dict[str, Reply] = {}
        self.requests: list[httpx.Request] = []

    def graphql_calls(self, operation: str) -> list[dict[str, Any]]:
        """Variables of every recorded call to a GraphQL operation."""
        calls = []
        for request in self.requests:
            if request.method != "POST":
                continue
            payload = json.loads(request.content)
            if self._operation(payload["query"]) == operation:
                calls.append(payload.get("variables") or {})
        return calls

    def rest_calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET" and self._path(r) == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.method == "POST" and str(request.url) == CMS_GRAPHQL_URL:
            payload = json.loads(request.content)
            operation = self._operation(payload["query"])
            if operation not in self.graphql:
                return httpx.Response(
                    200, json={"errors": [{"message": f"Unknown operation {operation}"}]}
                )
            reply = self.graphql[operation]
            if callable(reply):
                reply = reply(payload.get("variables") or {})
            return self._respond(request, reply, graphql=True)

        path = self._path(request)
        if path not in self.rest:
            return httpx.Response(404, json=NOT_FOUND_ERROR)
        reply = self.rest[path]
        if callable(reply):
            reply = reply(request.url.params)
        return self._respond(request, reply, graphql=False)

    @staticmethod
    def _respond(request: httpx.Request, reply: Any, graphql: bool) -> httpx.Response:
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, tuple):
            status, body = reply
            if isinstance(body, bytes):
                return httpx.Response(status, content=body)
            return httpx.Response(status, json=body)
        if graphql:
            return httpx.Response(200, json={"data": reply})
        return httpx.Response(200, json=reply)

    @staticmethod
    def _operation(query: str) -> str:
        match = _OPERATION_NAME.search(query)
        return match.group(1) if match else ""

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.path.removeprefix("/api/")
