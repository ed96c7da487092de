"""Tests for the OAuth client and OAuth token resources."""

import httpx
import pytest

from zendesk_oauth.diagnostics import Severity
from zendesk_oauth.resources import UNKNOWN, OAuthClientResource, OAuthTokenResource, Resource


@pytest.fixture
def client_resource(api_client):
    resource = OAuthClientResource()
    assert len(resource.configure(api_client)) == 0
    return resource


@pytest.fixture
def token_resource(api_client):
    resource = OAuthTokenResource()
    assert len(resource.configure(api_client)) == 0
    return resource


@pytest.fixture
def existing_client_id(api_client):
    return api_client.create_oauth_client("Parent", "parent_client", "public").id


def _basic_client_plan() -> dict:
    return {
        "id": UNKNOWN,
        "name": "Basic Client",
        "identifier": "basic_client",
        "kind": "public",
        "description": None,
    }


# =============================================================================
# Protocol and schema
# =============================================================================


def test_resources_satisfy_protocol():
    """Test that both resources implement the Resource protocol."""
    assert isinstance(OAuthClientResource(), Resource)
    assert isinstance(OAuthTokenResource(), Resource)


def test_type_names():
    assert OAuthClientResource().metadata("zendesk") == "zendesk_oauth_client"
    assert OAuthTokenResource().metadata("zendesk") == "zendesk_oauth_token"


def test_client_schema():
    schema = OAuthClientResource().schema()

    assert set(schema.attributes) == {"id", "name", "identifier", "kind", "description"}
    assert sorted(schema.required()) == ["identifier", "kind", "name"]
    assert schema.attributes["id"].computed
    assert schema.attributes["id"].use_state_for_unknown
    assert schema.attributes["description"].optional


def test_token_schema():
    schema = OAuthTokenResource().schema()

    assert sorted(schema.required()) == ["client_id", "scopes"]
    assert schema.sensitive() == ["full_token"]
    assert schema.attributes["full_token"].computed
    assert schema.attributes["scopes"].element_type == "string"
    assert schema.attributes["expires_at"].optional


@pytest.mark.parametrize("resource_cls", [OAuthClientResource, OAuthTokenResource])
def test_configure_none_is_noop(resource_cls):
    resource = resource_cls()
    diagnostics = resource.configure(None)
    assert len(diagnostics) == 0
    assert resource.client is None


@pytest.mark.parametrize("resource_cls", [OAuthClientResource, OAuthTokenResource])
def test_configure_wrong_type(resource_cls):
    """Test a mismatched provider value is reported, not accepted."""
    diagnostics = resource_cls().configure({"subdomain": "testco"})

    assert diagnostics.has_error()
    error = diagnostics.errors()[0]
    assert error.summary == "Unexpected Resource Configure Type"
    assert "dict" in error.detail


def test_unconfigured_resource_reports_error():
    response = OAuthClientResource().read({"id": "1"})
    assert response.diagnostics.has_error()
    assert response.state == {"id": "1"}


# =============================================================================
# OAuth client lifecycle
# =============================================================================


def test_create_basic_client(client_resource):
    """Test create fills in the id and the server's description."""
    response = client_resource.create(_basic_client_plan())

    assert not response.diagnostics.has_error()
    state = response.state
    assert int(state["id"]) > 0
    assert state["name"] == "Basic Client"
    assert state["identifier"] == "basic_client"
    assert state["kind"] == "public"
    assert state["description"] == ""


def test_create_client_api_error(client_resource):
    """Test a failed create leaves no state and forwards the API body."""
    client_resource.create(_basic_client_plan())
    response = client_resource.create(_basic_client_plan())

    assert response.state is None
    error = response.diagnostics.errors()[0]
    assert error.summary == "Error Creating OAuth Client"
    assert "RecordInvalid" in error.detail


def test_create_client_missing_required(client_resource, fake_api):
    plan = _basic_client_plan()
    del plan["kind"]
    response = client_resource.create(plan)

    assert response.state is None
    assert [d.attribute for d in response.diagnostics.errors()] == ["kind"]
    assert fake_api.requests == []


def test_create_client_malformed_plan(client_resource, fake_api):
    """Test wrongly typed plan values become diagnostics."""
    plan = _basic_client_plan()
    plan["name"] = ["not", "a", "string"]
    response = client_resource.create(plan)

    assert response.diagnostics.has_error()
    assert response.state is None
    assert fake_api.requests == []


def test_read_client_refreshes(client_resource, fake_api):
    created = client_resource.create(_basic_client_plan()).state
    fake_api.clients[int(created["id"])]["name"] = "Renamed Elsewhere"

    response = client_resource.read(created)

    assert not response.diagnostics.has_error()
    assert response.state["name"] == "Renamed Elsewhere"
    assert response.state["id"] == created["id"]


def test_read_client_is_idempotent(client_resource):
    created = client_resource.create(_basic_client_plan()).state
    first = client_resource.read(created).state
    second = client_resource.read(first).state
    assert first == second == created


def test_read_missing_client_removes_state(client_resource):
    """Test a 404 drops the resource from state without any error."""
    response = client_resource.read({"id": "999999"})

    assert response.state is None
    assert len(response.diagnostics) == 0


def test_read_client_error_keeps_state(client_resource, fake_api):
    state = {"id": "7", "name": "x", "identifier": "x", "kind": "public", "description": ""}
    fake_api.override = httpx.Response(500, text="Internal Server Error")

    response = client_resource.read(state)

    assert response.state == state
    error = response.diagnostics.errors()[0]
    assert error.summary == "Error Reading OAuth Client"
    assert "Internal Server Error" in error.detail


@pytest.mark.parametrize("bad_id", ["abc", "", "12.5", "1_000", None])
def test_read_client_bad_id(client_resource, fake_api, bad_id):
    """Test an unparseable id aborts before any request."""
    response = client_resource.read({"id": bad_id})

    assert response.diagnostics.errors()[0].summary == "Error Parsing OAuth Client ID"
    assert fake_api.requests == []


def test_import_then_read_client(client_resource):
    """Test import seeds the id and the next read fills in everything else."""
    created = client_resource.create(_basic_client_plan()).state

    imported = client_resource.import_state(created["id"])
    assert imported.state == {"id": created["id"]}

    response = client_resource.read(imported.state)
    assert response.state == created


def test_import_empty_id(client_resource):
    response = client_resource.import_state("")
    assert response.diagnostics.has_error()
    assert response.state is None


def test_delete_client_then_read(client_resource):
    """Test delete succeeds and a later read reports the client gone."""
    created = client_resource.create(_basic_client_plan()).state

    deleted = client_resource.delete(created)
    assert not deleted.diagnostics.has_error()
    assert deleted.state is None

    response = client_resource.read(created)
    assert response.state is None
    assert len(response.diagnostics) == 0


def test_delete_client_error(client_resource):
    response = client_resource.delete({"id": "123456"})
    error = response.diagnostics.errors()[0]
    assert error.summary == "Error Deleting OAuth Client"
    assert "RecordNotFound" in error.detail


def test_delete_client_bad_id(client_resource, fake_api):
    response = client_resource.delete({"id": "not-a-number"})
    assert response.diagnostics.errors()[0].summary == "Error Parsing OAuth Client ID"
    assert fake_api.requests == []


# =============================================================================
# OAuth token lifecycle
# =============================================================================


def test_create_token(token_resource, existing_client_id):
    """Test create stores id, full token and expiry from the response."""
    response = token_resource.create({
        "id": UNKNOWN,
        "client_id": str(existing_client_id),
        "scopes": ["read"],
        "full_token": UNKNOWN,
        "expires_at": "",
    })

    assert not response.diagnostics.has_error()
    state = response.state
    assert int(state["id"]) > 0
    assert state["full_token"]
    assert state["expires_at"] == ""
    assert state["client_id"] == str(existing_client_id)
    assert state["scopes"] == ["read"]


def test_create_token_keeps_scope_order(token_resource, existing_client_id, fake_api):
    scopes = ["write", "read", "tickets:read"]
    state = token_resource.create({"client_id": str(existing_client_id), "scopes": scopes}).state

    assert state["scopes"] == scopes
    assert fake_api.tokens[int(state["id"])]["scopes"] == scopes


def test_create_token_bad_client_id(token_resource, fake_api):
    response = token_resource.create({"client_id": "client-one", "scopes": ["read"]})

    error = response.diagnostics.errors()[0]
    assert error.summary == "Error Parsing Client ID"
    assert error.attribute == "client_id"
    assert response.state is None
    assert fake_api.requests == []


def test_create_token_api_error(token_resource):
    response = token_resource.create({"client_id": "55555", "scopes": ["read"]})

    assert response.state is None
    error = response.diagnostics.errors()[0]
    assert error.summary == "Error Creating OAuth Token"
    assert "Client not found" in error.detail


def test_read_token_keeps_full_token(token_resource, existing_client_id):
    """Test reads never clear the secret captured at creation."""
    created = token_resource.create({
        "client_id": str(existing_client_id),
        "scopes": ["read"],
    }).state

    first = token_resource.read(created)
    second = token_resource.read(first.state)

    assert first.state["full_token"] == created["full_token"]
    assert first.state == second.state


def test_read_imported_token_has_no_full_token(token_resource, existing_client_id):
    created = token_resource.create({
        "client_id": str(existing_client_id),
        "scopes": ["read"],
    }).state

    imported = token_resource.import_state(created["id"])
    state = token_resource.read(imported.state).state

    assert state["full_token"] is None
    assert state["client_id"] == str(existing_client_id)
    assert state["scopes"] == ["read"]


def test_read_missing_token_removes_state(token_resource):
    response = token_resource.read({"id": "404404"})
    assert response.state is None
    assert len(response.diagnostics) == 0


def test_read_token_bad_id(token_resource, fake_api):
    response = token_resource.read({"id": "x1"})
    assert response.diagnostics.errors()[0].summary == "Error Parsing OAuth Token ID"
    assert fake_api.requests == []


def test_delete_token_then_read(token_resource, existing_client_id):
    created = token_resource.create({
        "client_id": str(existing_client_id),
        "scopes": ["read"],
    }).state

    assert not token_resource.delete(created).diagnostics.has_error()
    assert token_resource.read(created).state is None


def test_delete_token_error(token_resource, fake_api):
    fake_api.override = httpx.Response(403, text='{"error":"Forbidden"}')
    response = token_resource.delete({"id": "9"})

    error = response.diagnostics.errors()[0]
    assert error.summary == "Error Deleting OAuth Token"
    assert '{"error":"Forbidden"}' in error.detail


# =============================================================================
# Update
# =============================================================================


@pytest.mark.parametrize(
    "resource_cls, noun",
    [(OAuthClientResource, "clients"), (OAuthTokenResource, "tokens")],
)
def test_update_always_rejected(resource_cls, noun, api_client, fake_api):
    """Test update never touches the network and always fails."""
    resource = resource_cls()
    resource.configure(api_client)
    state = {"id": "1", "name": "old"}

    response = resource.update({"id": "1", "name": "new"}, state)

    assert response.state == state
    assert [d.severity for d in response.diagnostics] == [Severity.ERROR]
    error = response.diagnostics.errors()[0]
    assert error.summary == "Update Not Supported"
    assert f"does not support updating OAuth {noun}" in error.detail
    assert fake_api.requests == []


def test_update_token_on_existing(token_resource, existing_client_id, fake_api):
    created = token_resource.create({
        "client_id": str(existing_client_id),
        "scopes": ["read"],
    }).state
    calls = len(fake_api.requests)

    response = token_resource.update({**created, "scopes": ["read", "write"]}, created)

    assert response.diagnostics.has_error()
    assert len(fake_api.requests) == calls


def test_create_client_non_utf8_response(client_resource, fake_api):
    """Test an undecodable success body becomes a create diagnostic."""
    fake_api.override = httpx.Response(
        201, content=b'{"client": {"id": 1, "name": "\xff"}}'
    )

    response = client_resource.create(_basic_client_plan())

    assert response.state is None
    error = response.diagnostics.errors()[0]
    assert error.summary == "Error Creating OAuth Client"
    assert "Could not decode" in error.detail


@pytest.mark.parametrize("big_id", ["9" * 30, str(2**63), str(-(2**63) - 1)])
def test_read_client_id_out_of_range(client_resource, fake_api, big_id):
    """Test IDs beyond 64 bits are rejected before any request."""
    response = client_resource.read({"id": big_id})

    assert response.diagnostics.errors()[0].summary == "Error Parsing OAuth Client ID"
    assert fake_api.requests == []


def test_parse_id_bounds():
    from zendesk_oauth.resources.base import parse_id

    assert parse_id(str(2**63 - 1)) == 2**63 - 1
    assert parse_id(str(-(2**63))) == -(2**63)
    with pytest.raises(ValueError):
        parse_id(2**63)
