"""Zendesk provider: configuration and the resource types it serves."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from zendesk_oauth.client import ENV_VARS, ClientFactory, ZendeskClient, resolve_credentials
from zendesk_oauth.diagnostics import Diagnostics
from zendesk_oauth.resources.base import UNKNOWN, Attribute, Resource, Schema
from zendesk_oauth.resources.oauth_client import OAuthClientResource
from zendesk_oauth.resources.oauth_token import OAuthTokenResource

logger = logging.getLogger(__name__)

TYPE_NAME = "zendesk"

# Attribute -> human label used in diagnostics
_LABELS = {
    "subdomain": "subdomain",
    "email": "email",
    "api_token": "API token",
}


@dataclass
class ProviderConfigureResponse:
    """Result of configuring the provider.

    ``client`` is handed to every resource's ``configure``; it is None when
    any error diagnostic was raised.
    """

    client: Optional[ZendeskClient] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


class ZendeskProvider:
    """Entry point the declarative host talks to."""

    def __init__(self, version: str, client_factory: ClientFactory = ZendeskClient):
        self.version = version
        self._client_factory = client_factory

    def metadata(self) -> tuple[str, str]:
        return TYPE_NAME, self.version

    def schema(self) -> Schema:
        return Schema(
            description="Interact with Zendesk.",
            attributes={
                "subdomain": Attribute(
                    description=(
                        "The Zendesk subdomain (e.g., company in company.zendesk.com). "
                        f"Defaults to {ENV_VARS['subdomain']}."
                    ),
                    optional=True,
                ),
                "email": Attribute(
                    description=(
                        "The email address associated with the Zendesk account. "
                        f"Defaults to {ENV_VARS['email']}."
                    ),
                    optional=True,
                ),
                "api_token": Attribute(
                    description=(
                        "The API token for authentication. "
                        f"Defaults to {ENV_VARS['api_token']}."
                    ),
                    optional=True,
                    sensitive=True,
                ),
            },
        )

    def configure(self, config: dict[str, Any] | None = None) -> ProviderConfigureResponse:
        """Build the shared Zendesk client.

        Explicit config wins over environment variables, which win over the
        config file. Every missing value is reported before giving up.
        """
        response = ProviderConfigureResponse()
        config = config or {}

        for name, label in _LABELS.items():
            if config.get(name) is UNKNOWN:
                response.diagnostics.add_attribute_error(
                    name,
                    f"Unknown Zendesk {label}",
                    f"The provider cannot create the Zendesk API client as the {label} is unknown.",
                )
        if response.diagnostics.has_error():
            return response

        credentials = resolve_credentials(
            subdomain=config.get("subdomain"),
            email=config.get("email"),
            api_token=config.get("api_token"),
        )

        for name, label in _LABELS.items():
            if not credentials[name]:
                response.diagnostics.add_attribute_error(
                    name,
                    f"Missing Zendesk {label}",
                    f"The provider cannot create the Zendesk API client as the {label} is missing. "
                    f"Set it in the provider configuration or via {ENV_VARS[name]}.",
                )
        if response.diagnostics.has_error():
            return response

        logger.debug("Configured Zendesk client for subdomain %s", credentials["subdomain"])
        response.client = self._client_factory(
            credentials["subdomain"],
            credentials["email"],
            credentials["api_token"],
        )
        return response

    def resources(self) -> list[Callable[[], Resource]]:
        return [
            OAuthClientResource,
            OAuthTokenResource,
        ]

    def get_resource(self, type_name: str) -> Resource:
        """Instantiate the resource registered under ``type_name``.

        Raises:
            KeyError: If no resource has that type name
        """
        for factory in self.resources():
            resource = factory()
            if resource.metadata(TYPE_NAME) == type_name:
                return resource
        raise KeyError(type_name)
