"""Shared fixtures: an in-memory Zendesk OAuth API behind httpx.MockTransport."""

import json
import re
import secrets

import httpx
import pytest

_ROUTE = re.compile(r"^/api/v2/oauth/(clients|tokens)(?:/(-?\d+))?\.json$")


class FakeZendesk:
    """Minimal stand-in for the Zendesk OAuth endpoints.

    Every request is recorded. Set ``override`` to force the next responses.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.clients: dict[int, dict] = {}
        self.tokens: dict[int, dict] = {}
        self.override: httpx.Response | None = None
        self._next_id = 1000

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.override is not None:
            return self.override

        match = _ROUTE.match(request.url.path)
        if not match:
            return httpx.Response(404, json={"error": "InvalidEndpoint"})
        kind, raw_id = match.groups()
        store = self.clients if kind == "clients" else self.tokens

        if raw_id is None and request.method == "POST":
            body = json.loads(request.content)
            if kind == "clients":
                return self._create_client(body["client"])
            return self._create_token(body["token"])

        if raw_id is not None:
            item_id = int(raw_id)
            if item_id not in store:
                return httpx.Response(404, json={"error": "RecordNotFound", "description": "Not found"})
            if request.method == "GET":
                key = "client" if kind == "clients" else "token"
                item = dict(store[item_id])
                item.pop("full_token", None)
                return httpx.Response(200, json={key: item})
            if request.method == "DELETE":
                del store[item_id]
                return httpx.Response(204)

        return httpx.Response(405, text="Method Not Allowed")

    def _create_client(self, fields: dict) -> httpx.Response:
        if any(c["identifier"] == fields["identifier"] for c in self.clients.values()):
            return httpx.Response(
                422,
                json={"error": "RecordInvalid", "details": {"identifier": [{"description": "is taken"}]}},
            )
        client = {
            "id": self._new_id(),
            "name": fields["name"],
            "identifier": fields["identifier"],
            "kind": fields["kind"],
            "description": fields.get("description"),
            "url": "https://testco.zendesk.com/api/v2/oauth/clients/0.json",
        }
        self.clients[client["id"]] = client
        return httpx.Response(201, json={"client": client})

    def _create_token(self, fields: dict) -> httpx.Response:
        if fields["client_id"] not in self.clients:
            return httpx.Response(422, json={"error": "RecordInvalid", "description": "Client not found"})
        token = {
            "id": self._new_id(),
            "client_id": fields["client_id"],
            "user_id": 42,
            "scopes": fields["scopes"],
            "expires_at": fields.get("expires_at"),
            "full_token": secrets.token_hex(32),
        }
        self.tokens[token["id"]] = token
        return httpx.Response(201, json={"token": token})


@pytest.fixture
def fake_api() -> FakeZendesk:
    return FakeZendesk()


@pytest.fixture
def transport(fake_api) -> httpx.MockTransport:
    return httpx.MockTransport(fake_api.handler)


@pytest.fixture
def api_client(transport):
    from zendesk_oauth.client import ZendeskClient

    return ZendeskClient(
        subdomain="testco",
        email="test@example.com",
        api_token="abc123",
        transport=transport,
    )


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from real credentials."""
    for var in ("ZENDESK_SUBDOMAIN", "ZENDESK_EMAIL", "ZENDESK_API_TOKEN"):
        monkeypatch.delenv(var, raising=False)
    config_path = tmp_path / "config.json"
    monkeypatch.setattr("zendesk_oauth.client.CONFIG_PATH", config_path)
    return config_path
