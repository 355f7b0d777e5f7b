from __future__ import annotations

import json

import httpx
import pytest

from bedita_client import BEditaClient

BASE_URL = "https://api.example.test"


class Scripted:
    """MockTransport handler answering with a fixed list of responses, in order."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"unexpected request {request.method} {request.url}")
        return self.responses.pop(0)

    def body(self, index: int = -1):
        content = self.requests[index].content
        return json.loads(content) if content else None


def expired() -> httpx.Response:
    return httpx.Response(401, json={"error": {"status": "401", "title": "Expired token", "code": "be_token_expired"}})


def renewed(jwt: str = "new-jwt", renew: str = "new-renew") -> httpx.Response:
    return httpx.Response(200, json={"meta": {"jwt": jwt, "renew": renew}})


class FakeBEdita:
    """Tiny in-memory server with objects and trashcan endpoints."""

    def __init__(self):
        self.objects: dict[str, dict] = {}
        self.trash: set[str] = set()
        self.next_id = 1
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = [p for p in request.url.path.split("/") if p]
        method = request.method
        payload = json.loads(request.content) if request.content else {}

        if parts[0] == "trash" and len(parts) == 2:
            obj_id = parts[1]
            if obj_id not in self.trash:
                return _not_found()
            self.trash.discard(obj_id)
            if method == "DELETE":
                self.objects.pop(obj_id, None)
            return httpx.Response(204)

        if len(parts) == 1 and method == "POST":
            obj_id = str(self.next_id)
            self.next_id += 1
            data = payload["data"]
            self.objects[obj_id] = {"id": obj_id, "type": parts[0], "attributes": dict(data["attributes"])}
            return httpx.Response(201, json={"data": self.objects[obj_id]})

        if len(parts) == 2:
            obj_id = parts[1]
            obj = self.objects.get(obj_id)
            if obj is None or obj_id in self.trash:
                return _not_found()
            if method == "GET":
                return httpx.Response(200, json={"data": obj})
            if method == "PATCH":
                obj["attributes"].update(payload["data"].get("attributes") or {})
                return httpx.Response(200, json={"data": obj})
            if method == "DELETE":
                self.trash.add(obj_id)
                return httpx.Response(204)

        return _not_found()


def _not_found() -> httpx.Response:
    return httpx.Response(404, json={"error": {"status": "404", "title": "Not Found"}})


@pytest.fixture
def client_for():
    created: list[BEditaClient] = []

    def _make(handler, **kwargs) -> BEditaClient:
        kwargs.setdefault("api_key", "api-key")
        client = BEditaClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)
        created.append(client)
        return client

    yield _make
    for client in created:
        client.close()
