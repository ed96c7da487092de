"""Zendesk OAuth client resource."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

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


class OAuthClientResourceModel(BaseModel):
    """Plan/state shape of ``zendesk_oauth_client``."""
    model_config = ConfigDict(extra="ignore")
    id: Optional[str] = None
    name: str = ""
    identifier: str = ""
    kind: str = ""
    description: Optional[str] = None


class OAuthClientResource:
    """Manages a Zendesk OAuth client.

    Clients cannot be modified through the API, so every change is a replace.
    """

    def __init__(self) -> None:
        self.client: ZendeskClient | None = None

    def metadata(self, provider_type_name: str) -> str:
        return f"{provider_type_name}_oauth_client"

    def schema(self) -> Schema:
        return Schema(
            description="Manages a Zendesk OAuth client.",
            attributes={
                "id": Attribute(
                    description="The ID of the OAuth client.",
                    computed=True,
                    use_state_for_unknown=True,
                ),
                "name": Attribute(
                    description="The name of the OAuth client.",
                    required=True,
                ),
                "identifier": Attribute(
                    description="The unique identifier of the OAuth client.",
                    required=True,
                ),
                "kind": Attribute(
                    description="The kind of OAuth client (e.g., 'public').",
                    required=True,
                ),
                "description": Attribute(
                    description="A description of the OAuth client.",
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
                "Unconfigured OAuth Client Resource",
                "The resource was used before the provider supplied a Zendesk client.",
            )
        return self.client

    def _parse_state_id(
        self, state: OAuthClientResourceModel, diagnostics: Diagnostics
    ) -> int | None:
        try:
            return parse_id(state.id)
        except ValueError as e:
            diagnostics.add_error(
                "Error Parsing OAuth Client ID",
                f"Could not parse OAuth client ID: {e}",
            )
            return None

    def create(self, plan: dict[str, Any]) -> ResourceResponse:
        response = ResourceResponse()
        check_required(self.schema(), plan, response.diagnostics)
        if response.diagnostics.has_error():
            return response
        model = load_model(
            OAuthClientResourceModel, plan, response.diagnostics, "Invalid OAuth Client Plan"
        )
        if model is None:
            return response
        api = self._require_client(response.diagnostics)
        if api is None:
            return response

        try:
            created = api.create_oauth_client(
                model.name,
                model.identifier,
                model.kind,
                model.description or "",
            )
        except ZendeskClientError as e:
            response.diagnostics.add_error(
                "Error Creating OAuth Client",
                f"Could not create OAuth client: {e}",
            )
            return response

        model.id = str(created.id)
        model.description = created.description
        response.state = model.model_dump()
        return response

    def read(self, state: dict[str, Any]) -> ResourceResponse:
        response = ResourceResponse(state=state)
        model = load_model(
            OAuthClientResourceModel, state, response.diagnostics, "Invalid OAuth Client State"
        )
        if model is None:
            return response
        client_id = self._parse_state_id(model, response.diagnostics)
        if client_id is None:
            return response
        api = self._require_client(response.diagnostics)
        if api is None:
            return response

        try:
            found = api.read_oauth_client(client_id)
        except ZendeskClientError as e:
            response.diagnostics.add_error(
                "Error Reading OAuth Client",
                f"Could not read OAuth client: {e}",
            )
            return response

        if found is None:
            # Deleted outside of our control; drop it from state
            response.state = None
            return response

        model.name = found.name
        model.identifier = found.identifier
        model.kind = found.kind
        model.description = found.description
        response.state = model.model_dump()
        return response

    def update(self, plan: dict[str, Any], state: dict[str, Any]) -> ResourceResponse:
        response = ResourceResponse(state=state)
        response.diagnostics.add_error(
            "Update Not Supported",
            "The Zendesk API does not support updating OAuth clients. "
            "To change the configuration, you must create a new client.",
        )
        return response

    def delete(self, state: dict[str, Any]) -> ResourceResponse:
        response = ResourceResponse(state=state)
        model = load_model(
            OAuthClientResourceModel, state, response.diagnostics, "Invalid OAuth Client State"
        )
        if model is None:
            return response
        client_id = self._parse_state_id(model, response.diagnostics)
        if client_id is None:
            return response
        api = self._require_client(response.diagnostics)
        if api is None:
            return response

        try:
            api.delete_oauth_client(client_id)
        except ZendeskClientError as e:
            response.diagnostics.add_error(
                "Error Deleting OAuth Client",
                f"Could not delete OAuth client: {e}",
            )
            return response

        response.state = None
        return response

    def import_state(self, import_id: str) -> ResourceResponse:
        return import_state_passthrough_id(import_id)
