"""Zendesk OAuth token resource."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from zendesk_oauth.client import ZendeskClient, ZendeskClientError
from zendesk_oauth.diagnostics import Diagnostics
from zendesk_oauth.resources.base import (
    Attribute,
    ResourceResponse,
    Schema,
    check_required,
    import_state_passthrough_id,
    load_model,
    parse_id,
)


class OAuthTokenResourceModel(BaseModel):
    """Plan/state shape of ``zendesk_oauth_token``."""
    model_config = ConfigDict(extra="ignore")
    id: Optional[str] = None
    client_id: str = ""
    scopes: list[str] = Field(default_factory=list)
    full_token: Optional[str] = None
    expires_at: Optional[str] = None


class OAuthTokenResource:
    """Manages a Zendesk OAuth token.

    The secret ``full_token`` is returned by the API once, on creation, and
    is carried in state from then on.
    """

    def __init__(self) -> None:
        self.client: ZendeskClient | None = None

    def metadata(self, provider_type_name: str) -> str:
        return f"{provider_type_name}_oauth_token"

    def schema(self) -> Schema:
        return Schema(
            description="Manages a Zendesk OAuth token.",
            attributes={
                "id": Attribute(
                    description="The ID of the OAuth token.",
                    computed=True,
                    use_state_for_unknown=True,
                ),
                "client_id": Attribute(
                    description="The ID of the OAuth client.",
                    required=True,
                ),
                "scopes": Attribute(
                    description="The scopes granted to the OAuth token.",
                    required=True,
                    element_type="string",
                ),
                "full_token": Attribute(
                    description="The full OAuth token value (only available after creation).",
                    computed=True,
                    sensitive=True,
                ),
                "expires_at": Attribute(
                    description=(
                        "The expiration date of the token in ISO 8601 format "
                        "(e.g., '2024-12-31T23:59:59Z'). If not set, the token will not expire."
                    ),
                    optional=True,
                ),
            },
        )

    def configure(self, provider_data: Any) -> Diagnostics:
        diagnostics = Diagnostics()
        if provider_data is None:
            return diagnostics

        if not isinstance(provider_data, ZendeskClient):
            diagnostics.add_error(
                "Unexpected Resource Configure Type",
                f"Expected ZendeskClient, got: {type(provider_data).__name__}. "
                "Please report this issue to the provider developers.",
            )
            return diagnostics

        self.client = provider_data
        return diagnostics

    def _require_client(self, diagnostics: Diagnostics) -> ZendeskClient | None:
        if self.client is None:
            diagnostics.add_error(
                "Unconfigured OAuth Token Resource",
                "The resource was used before the provider supplied a Zendesk client.",
            )
        return self.client

    def _parse_state_id(
        self, state: OAuthTokenResourceModel, diagnostics: Diagnostics
    ) -> int | None:
        try:
            return parse_id(state.id)
        except ValueError as e:
            diagnostics.add_error(
                "Error Parsing OAuth Token ID",
                f"Could not parse OAuth token ID: {e}",
            )
            return None

    def create(self, plan: dict[str, Any]) -> ResourceResponse:
        response = ResourceResponse()
        check_required(self.schema(), plan, response.diagnostics)
        if response.diagnostics.has_error():
            return response
        model = load_model(
            OAuthTokenResourceModel, plan, response.diagnostics, "Invalid OAuth Token Plan"
        )
        if model is None:
            return response

        try:
            client_id = parse_id(model.client_id)
        except ValueError as e:
            response.diagnostics.add_attribute_error(
                "client_id",
                "Error Parsing Client ID",
                f"Could not parse client ID: {e}",
            )
            return response

        api = self._require_client(response.diagnostics)
        if api is None:
            return response

        try:
            token = api.create_oauth_token(client_id, model.scopes, model.expires_at or "")
        except ZendeskClientError as e:
            response.diagnostics.add_error(
                "Error Creating OAuth Token",
                f"Could not create OAuth token: {e}",
            )
            return response

        model.id = str(token.id)
        model.full_token = token.full_token
        model.expires_at = token.expires_at
        response.state = model.model_dump()
        return response

    def read(self, state: dict[str, Any]) -> ResourceResponse:
        response = ResourceResponse(state=state)
        model = load_model(
            OAuthTokenResourceModel, state, response.diagnostics, "Invalid OAuth Token State"
        )
        if model is None:
            return response
        token_id = self._parse_state_id(model, response.diagnostics)
        if token_id is None:
            return response
        api = self._require_client(response.diagnostics)
        if api is None:
            return response

        try:
            token = api.read_oauth_token(token_id)
        except ZendeskClientError as e:
            response.diagnostics.add_error(
                "Error Reading OAuth Token",
                f"Could not read OAuth token: {e}",
            )
            return response

        if token is None:
            # Revoked outside of our control; drop it from state
            response.state = None
            return response

        # full_token is never echoed on read, keep whatever state holds
        model.client_id = str(token.client_id)
        model.scopes = list(token.scopes)
        model.expires_at = token.expires_at
        response.state = model.model_dump()
        return response

    def update(self, plan: dict[str, Any], state: dict[str, Any]) -> ResourceResponse:
        response = ResourceResponse(state=state)
        response.diagnostics.add_error(
            "Update Not Supported",
            "The Zendesk API does not support updating OAuth tokens. "
            "To change the configuration, you must create a new token.",
        )
        return response

    def delete(self, state: dict[str, Any]) -> ResourceResponse:
        response = ResourceResponse(state=state)
        model = load_model(
            OAuthTokenResourceModel, state, response.diagnostics, "Invalid OAuth Token State"
        )
        if model is None:
            return response
        token_id = self._parse_state_id(model, response.diagnostics)
        if token_id is None:
            return response
        api = self._require_client(response.diagnostics)
        if api is None:
            return response

        try:
            api.delete_oauth_token(token_id)
        except ZendeskClientError as e:
            response.diagnostics.add_error(
                "Error Deleting OAuth Token",
                f"Could not delete OAuth token: {e}",
            )
            return response

        response.state = None
        return response

    def import_state(self, import_id: str) -> ResourceResponse:
        return import_state_passthrough_id(import_id)
