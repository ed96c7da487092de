"""Pydantic records for the Zendesk OAuth API payloads."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Responses carry more fields than we track (url, created_at, secret, ...)
_MODEL_CONFIG = ConfigDict(extra="ignore")


class OAuthClient(BaseModel):
    """An OAuth client registered on the Zendesk account."""
    model_config = _MODEL_CONFIG
    id: int
    name: str = ""
    identifier: str = ""
    kind: str = ""
    description: str = ""

    @field_validator("description", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class OAuthToken(BaseModel):
    """An OAuth access token issued for an OAuth client.

    ``full_token`` is only present in the create response; reads never
    return it.
    """
    model_config = _MODEL_CONFIG
    id: int
    client_id: int
    user_id: Optional[int] = None
    scopes: list[str] = Field(default_factory=list)
    full_token: str = ""
    expires_at: str = ""

    @field_validator("full_token", "expires_at", mode="before")
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("scopes", mode="before")
    @classmethod
    def _null_to_list(cls, value: Any) -> Any:
        return [] if value is None else value


class OAuthClientEnvelope(BaseModel):
    """``{"client": {...}}`` wrapper used by the clients endpoints."""
    model_config = _MODEL_CONFIG
    client: OAuthClient


class OAuthTokenEnvelope(BaseModel):
    """``{"token": {...}}`` wrapper used by the tokens endpoints."""
    model_config = _MODEL_CONFIG
    token: OAuthToken


def client_payload(
    name: str,
    identifier: str,
    kind: str,
    description: Optional[str] = None,
) -> dict[str, Any]:
    """Build the request body for creating an OAuth client."""
    client: dict[str, Any] = {
        "name": name,
        "identifier": identifier,
        "kind": kind,
    }
    if description:
        client["description"] = description
    return {"client": client}


def token_payload(
    client_id: int,
    scopes: list[str],
    expires_at: Optional[str] = None,
) -> dict[str, Any]:
    """Build the request body for creating an OAuth token.

    An absent ``expires_at`` means the token never expires.
    """
    token: dict[str, Any] = {
        "client_id": client_id,
        "scopes": list(scopes),
    }
    if expires_at:
        token["expires_at"] = expires_at
    return {"token": token}
