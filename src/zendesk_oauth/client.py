"""Zendesk API client for OAuth clients and tokens."""

import base64
import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from zendesk_oauth.models import (
    OAuthClient,
    OAuthClientEnvelope,
    OAuthToken,
    OAuthTokenEnvelope,
    client_payload,
    token_payload,
)

logger = logging.getLogger(__name__)

# Config file location
CONFIG_PATH = Path.home() / ".config" / "zendesk-oauth" / "config.json"

ZENDESK_DOMAIN = "zendesk.com"

# Credential name -> environment variable
ENV_VARS = {
    "subdomain": "ZENDESK_SUBDOMAIN",
    "email": "ZENDESK_EMAIL",
    "api_token": "ZENDESK_API_TOKEN",
}

_Envelope = TypeVar("_Envelope", bound=BaseModel)


class ZendeskClientError(Exception):
    """Base exception for Zendesk client errors."""


class ZendeskAuthError(ZendeskClientError):
    """Authentication error."""


class ZendeskAPIError(ZendeskClientError):
    """API request error.

    ``body`` holds the raw response text; Zendesk puts its structured error
    detail there.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ZendeskDecodeError(ZendeskClientError):
    """A successful response whose body could not be decoded."""


def _load_config_from_file() -> dict[str, str]:
    """Load configuration from config file."""
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                config = json.load(f)
        except (ValueError, OSError):
            return {}
        if isinstance(config, dict):
            return config
    return {}


def _save_config(config: dict) -> Path:
    """Save config dict to file, preserving permissions.

    Args:
        config: Config dictionary to save

    Returns:
        Path to the config file
    """
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_PATH, "w") as f:
        json.dump(config, f, indent=2)
    # Secure permissions (Unix only, no-op on Windows)
    try:
        CONFIG_PATH.chmod(0o600)
    except OSError:
        pass  # Windows doesn't support Unix permissions
    return CONFIG_PATH


def save_credentials(subdomain: str, email: str, api_token: str) -> Path:
    """Save Zendesk credentials to config file.

    Args:
        subdomain: Zendesk subdomain
        email: Zendesk email
        api_token: Zendesk API token

    Returns:
        Path to the config file
    """
    # Load existing config to preserve other settings
    config = _load_config_from_file()
    config.update({"subdomain": subdomain, "email": email, "api_token": api_token})
    return _save_config(config)


def resolve_credentials(
    subdomain: Optional[str] = None,
    email: Optional[str] = None,
    api_token: Optional[str] = None,
) -> dict[str, str]:
    """Merge explicit credentials with environment variables and config file.

    Resolution order: explicit args -> env vars -> config file. An explicit
    value wins even when empty. Missing values come back as empty strings;
    deciding what is fatal is up to the caller.

    Returns:
        Dict with ``subdomain``, ``email`` and ``api_token`` keys
    """
    explicit = {"subdomain": subdomain, "email": email, "api_token": api_token}
    resolved: dict[str, str] = {}
    config: dict[str, str] | None = None

    for name, env_var in ENV_VARS.items():
        value = explicit[name]
        if value is None:
            value = os.environ.get(env_var)
            if not value:
                if config is None:
                    config = _load_config_from_file()
                value = config.get(name)
        resolved[name] = value or ""

    return resolved


def _build_auth_header(email: str, api_token: str) -> str:
    """Build Basic auth header for Zendesk API.

    Zendesk uses email/token auth: {email}/token:{token}
    """
    auth_string = f"{email}/token:{api_token}"
    encoded = base64.b64encode(auth_string.encode()).decode()
    return f"Basic {encoded}"


class ZendeskClient:
    """Synchronous HTTP client for the Zendesk OAuth endpoints.

    Holds only credentials, so one instance can be shared by every resource.
    Each call opens its own connection, sends a single request and never
    retries.
    """

    def __init__(
        self,
        subdomain: str,
        email: str,
        api_token: str,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Raises:
            ZendeskAuthError: If any credential is empty
        """
        missing = [
            name
            for name, value in (("subdomain", subdomain), ("email", email), ("api_token", api_token))
            if not value
        ]
        if missing:
            raise ZendeskAuthError(f"Missing Zendesk credentials: {', '.join(missing)}")

        self.subdomain = subdomain
        self.email = email
        self.base_url = f"https://{subdomain}.{ZENDESK_DOMAIN}/api/v2"
        self._auth_header = _build_auth_header(email, api_token)
        self._transport = transport

    def __repr__(self) -> str:
        return f"ZendeskClient(subdomain={self.subdomain!r}, email={self.email!r})"

    def _get_headers(self, with_body: bool = False) -> dict[str, str]:
        """Get headers for API requests."""
        headers = {
            "Authorization": self._auth_header,
            "Accept": "application/json",
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def request(
        self,
        method: str,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one request and return the raw response, whatever its status.

        Args:
            method: HTTP method (GET, POST, DELETE)
            endpoint: API endpoint (without base URL)
            json_data: JSON body data

        Raises:
            ZendeskAPIError: If no response was received
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        logger.debug("%s %s", method, url)

        with httpx.Client(transport=self._transport) as client:
            try:
                response = client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(with_body=json_data is not None),
                    json=json_data,
                )
            except httpx.TimeoutException as e:
                raise ZendeskAPIError(
                    "Request timed out. The Zendesk API may be slow or unavailable."
                ) from e
            except httpx.RequestError as e:
                raise ZendeskAPIError(f"Request failed: {e}") from e

        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    @staticmethod
    def _unexpected(response: httpx.Response, action: str) -> ZendeskAPIError:
        body = response.text
        return ZendeskAPIError(f"failed to {action}: {body}", response.status_code, body)

    @staticmethod
    def _decode(response: httpx.Response, envelope: type[_Envelope]) -> _Envelope:
        try:
            return envelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ZendeskDecodeError(
                f"Could not decode {envelope.__name__} response: {e}"
            ) from e

    def _create(
        self,
        endpoint: str,
        payload: dict[str, Any],
        envelope: type[_Envelope],
        action: str,
    ) -> _Envelope:
        response = self.request("POST", endpoint, json_data=payload)
        if response.status_code != httpx.codes.CREATED:
            raise self._unexpected(response, action)
        return self._decode(response, envelope)

    def _read(
        self,
        endpoint: str,
        envelope: type[_Envelope],
        action: str,
    ) -> _Envelope | None:
        response = self.request("GET", endpoint)
        if response.status_code == httpx.codes.NOT_FOUND:
            logger.debug("%s: not found", endpoint)
            return None
        if response.status_code != httpx.codes.OK:
            raise self._unexpected(response, action)
        return self._decode(response, envelope)

    def _delete(self, endpoint: str, action: str) -> None:
        response = self.request("DELETE", endpoint)
        if response.status_code != httpx.codes.NO_CONTENT:
            raise self._unexpected(response, action)

    # -------------------------------------------------------------------------
    # OAuth clients
    # -------------------------------------------------------------------------

    def create_oauth_client(
        self,
        name: str,
        identifier: str,
        kind: str,
        description: str = "",
    ) -> OAuthClient:
        """Create an OAuth client. Succeeds only on HTTP 201."""
        result = self._create(
            "oauth/clients.json",
            client_payload(name, identifier, kind, description),
            OAuthClientEnvelope,
            "create OAuth client",
        )
        return result.client

    def read_oauth_client(self, client_id: int) -> OAuthClient | None:
        """Read an OAuth client by ID, or None if it no longer exists."""
        result = self._read(
            f"oauth/clients/{client_id}.json",
            OAuthClientEnvelope,
            "read OAuth client",
        )
        return result.client if result is not None else None

    def delete_oauth_client(self, client_id: int) -> None:
        """Delete an OAuth client. Succeeds only on HTTP 204."""
        self._delete(f"oauth/clients/{client_id}.json", "delete OAuth client")

    # -------------------------------------------------------------------------
    # OAuth tokens
    # -------------------------------------------------------------------------

    def create_oauth_token(
        self,
        client_id: int,
        scopes: list[str],
        expires_at: str = "",
    ) -> OAuthToken:
        """Issue an OAuth token for a client.

        The returned record is the only place ``full_token`` ever appears.
        """
        result = self._create(
            "oauth/tokens.json",
            token_payload(client_id, scopes, expires_at),
            OAuthTokenEnvelope,
            "create OAuth token",
        )
        return result.token

    def read_oauth_token(self, token_id: int) -> OAuthToken | None:
        """Read an OAuth token by ID, or None if it no longer exists."""
        result = self._read(
            f"oauth/tokens/{token_id}.json",
            OAuthTokenEnvelope,
            "read OAuth token",
        )
        return result.token if result is not None else None

    def delete_oauth_token(self, token_id: int) -> None:
        """Revoke an OAuth token. Succeeds only on HTTP 204."""
        self._delete(f"oauth/tokens/{token_id}.json", "delete OAuth token")


ClientFactory = Callable[[str, str, str], ZendeskClient]
