"""Test helper functions: an in-memory flats backend served through httpx.MockTransport."""

import asyncio
import json
from typing import Any, Dict, List, Optional

import httpx

TEST_BASE_URL = "http://testserver/api"
FLATS_PATH = "/api/flats"


class FakeFlatsBackend:
    """
    Minimal stand-in for the flats REST API.

    Set `fail_mode` to "timeout" or "unreachable" to make requests fail at the
    transport level, or `fail_status` to answer with an HTTP error. Both can
    be limited to some methods with `fail_methods`. `list_gate` holds GET
    responses until the event is set.
    """

    def __init__(self, flats: Optional[List[Dict[str, Any]]] = None, id_key: str = "_id"):
        self.flats: List[Dict[str, Any]] = [dict(flat) for flat in flats or []]
        self.id_key = id_key
        self.requests: List[httpx.Request] = []
        self.fail_mode: Optional[str] = None
        self.fail_status: Optional[int] = None
        self.fail_methods: Optional[set] = None
        self.list_body: Any = None
        self.list_gate: Optional[asyncio.Event] = None
        self._next_id = 1000

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str) -> int:
        return sum(1 for request in self.requests if request.method == method)

    def ids(self) -> List[str]:
        return [flat[self.id_key] for flat in self.flats]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.method == "GET" and self.list_gate is not None:
            await self.list_gate.wait()

        if self.fail_methods is None or request.method in self.fail_methods:
            if self.fail_mode == "timeout":
                raise httpx.ReadTimeout("timed out", request=request)
            if self.fail_mode == "unreachable":
                raise httpx.ConnectError("connection refused", request=request)
            if self.fail_status is not None:
                return httpx.Response(self.fail_status, json={"message": "rejected"})

        path = request.url.path.rstrip("/")
        if path == FLATS_PATH:
            if request.method == "GET":
                body = self.list_body if self.list_body is not None else self.flats
                return httpx.Response(200, json=body)
            if request.method == "POST":
                return self._create(json.loads(request.content))
        elif path.startswith(FLATS_PATH + "/"):
            listing_id = path[len(FLATS_PATH) + 1:]
            if request.method == "PUT":
                return self._update(listing_id, json.loads(request.content))
            if request.method == "DELETE":
                return self._delete(listing_id)
        return httpx.Response(405)

    def _create(self, body: Dict[str, Any]) -> httpx.Response:
        self._next_id += 1
        created = {**body, self.id_key: str(self._next_id)}
        self.flats.append(created)
        return httpx.Response(201, json=created)

    def _update(self, listing_id: str, body: Dict[str, Any]) -> httpx.Response:
        for flat in self.flats:
            if flat[self.id_key] == listing_id:
                flat.update(body)
                return httpx.Response(200, json=flat)
        return httpx.Response(404, json={"message": "Flat not found"})

    def _delete(self, listing_id: str) -> httpx.Response:
        remaining = [flat for flat in self.flats if flat[self.id_key] != listing_id]
        if len(remaining) == len(self.flats):
            return httpx.Response(404, json={"message": "Flat not found"})
        self.flats = remaining
        return httpx.Response(200, json={"message": "Flat deleted"})


def request_json(request: httpx.Request) -> Dict[str, Any]:
    """Decode a captured request body."""
    return json.loads(request.content)
