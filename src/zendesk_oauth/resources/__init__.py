"""Managed resource types."""

from zendesk_oauth.resources.base import UNKNOWN, Resource, ResourceResponse, Schema
from zendesk_oauth.resources.oauth_client import OAuthClientResource
from zendesk_oauth.resources.oauth_token import OAuthTokenResource

__all__ = [
    "OAuthClientResource",
    "OAuthTokenResource",
    "Resource",
    "ResourceResponse",
    "Schema",
    "UNKNOWN",
]
