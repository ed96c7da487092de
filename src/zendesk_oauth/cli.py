"""Zendesk OAuth CLI - Thin wrapper around the provider and its resources."""

import json
import logging
import sys
from typing import Annotated, Any, Optional

import typer

from zendesk_oauth import __version__
from zendesk_oauth.client import save_credentials
from zendesk_oauth.diagnostics import Diagnostics
from zendesk_oauth.provider import TYPE_NAME, ZendeskProvider
from zendesk_oauth.resources.base import Resource

# Main app
app = typer.Typer(
    name="zendesk-oauth",
    help="Zendesk OAuth CLI - Create, inspect and delete OAuth clients and tokens.",
    no_args_is_help=True,
    add_completion=False,
)

auth_app = typer.Typer(
    help="Authentication management - save Zendesk credentials.",
    no_args_is_help=True,
)
app.add_typer(auth_app, name="auth")

client_app = typer.Typer(
    help="OAuth clients.",
    no_args_is_help=True,
)
app.add_typer(client_app, name="client")

token_app = typer.Typer(
    help="OAuth tokens.",
    no_args_is_help=True,
)
app.add_typer(token_app, name="token")


def output_json(data: dict) -> None:
    """Output JSON to stdout."""
    print(json.dumps(data, indent=2, default=str))


def output_error(message: str, exit_code: int = 1, details: Optional[list] = None) -> None:
    """Output error and exit."""
    error: dict[str, Any] = {"error": message}
    if details:
        error["diagnostics"] = details
    print(json.dumps(error), file=sys.stderr)
    raise typer.Exit(exit_code)


def check_diagnostics(diagnostics: Diagnostics) -> None:
    """Exit with the collected errors if any were raised."""
    if diagnostics.has_error():
        first = diagnostics.errors()[0]
        output_error(first.summary, details=diagnostics.to_list())


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        output_json({"version": __version__})
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version", "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    subdomain: Annotated[
        Optional[str],
        typer.Option("--subdomain", "-s", help="Zendesk subdomain (e.g., 'company' for company.zendesk.com)"),
    ] = None,
    email: Annotated[
        Optional[str],
        typer.Option("--email", "-e", help="Zendesk email address"),
    ] = None,
    api_token: Annotated[
        Optional[str],
        typer.Option("--api-token", "-t", help="Zendesk API token"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log HTTP requests to stderr."),
    ] = False,
) -> None:
    """Zendesk OAuth CLI - Manage OAuth clients and tokens."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = {"subdomain": subdomain, "email": email, "api_token": api_token}


def get_resource(ctx: typer.Context, kind: str) -> Resource:
    """Configure the provider and return a ready-to-use resource."""
    provider = ZendeskProvider(__version__)
    configured = provider.configure(ctx.obj)
    check_diagnostics(configured.diagnostics)

    resource = provider.get_resource(f"{TYPE_NAME}_{kind}")
    check_diagnostics(resource.configure(configured.client))
    return resource


def read_by_id(resource: Resource, resource_id: str) -> None:
    """Import an ID and refresh it, printing the current state."""
    imported = resource.import_state(resource_id)
    check_diagnostics(imported.diagnostics)

    result = resource.read(imported.state)
    check_diagnostics(result.diagnostics)
    if result.state is None:
        output_json({"id": resource_id, "found": False})
        return
    output_json({**result.state, "found": True})


def delete_by_id(resource: Resource, resource_id: str) -> None:
    result = resource.delete({"id": resource_id})
    check_diagnostics(result.diagnostics)
    output_json({"id": resource_id, "deleted": True})


# =============================================================================
# Auth Commands
# =============================================================================


@auth_app.command("login")
def auth_login_cmd(
    subdomain: Annotated[
        str,
        typer.Option("--subdomain", "-s", prompt="Subdomain (e.g., 'company' for company.zendesk.com)"),
    ],
    email: Annotated[
        str,
        typer.Option("--email", "-e", prompt="Email"),
    ],
    api_token: Annotated[
        str,
        typer.Option("--api-token", "-t", prompt="API Token", hide_input=True),
    ],
) -> None:
    """Save Zendesk credentials to the config file.

    Environment variables and global options still take precedence.
    """
    path = save_credentials(subdomain, email, api_token)
    output_json({"success": True, "config_path": str(path)})


# =============================================================================
# OAuth Client Commands
# =============================================================================


@client_app.command("create")
def client_create_cmd(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", help="Client name")],
    identifier: Annotated[str, typer.Option("--identifier", help="Unique client identifier")],
    kind: Annotated[str, typer.Option("--kind", help="Client kind (e.g., 'public')")],
    description: Annotated[
        Optional[str],
        typer.Option("--description", help="Client description"),
    ] = None,
) -> None:
    """Create an OAuth client."""
    resource = get_resource(ctx, "oauth_client")
    result = resource.create({
        "name": name,
        "identifier": identifier,
        "kind": kind,
        "description": description,
    })
    check_diagnostics(result.diagnostics)
    output_json(result.state)


@client_app.command("read")
def client_read_cmd(
    ctx: typer.Context,
    client_id: Annotated[str, typer.Argument(help="OAuth client ID")],
) -> None:
    """Show an OAuth client."""
    read_by_id(get_resource(ctx, "oauth_client"), client_id)


@client_app.command("delete")
def client_delete_cmd(
    ctx: typer.Context,
    client_id: Annotated[str, typer.Argument(help="OAuth client ID")],
) -> None:
    """Delete an OAuth client."""
    delete_by_id(get_resource(ctx, "oauth_client"), client_id)


# =============================================================================
# OAuth Token Commands
# =============================================================================


@token_app.command("create")
def token_create_cmd(
    ctx: typer.Context,
    client_id: Annotated[str, typer.Option("--client-id", help="OAuth client ID")],
    scopes: Annotated[
        list[str],
        typer.Option("--scope", help="Scope to grant (repeatable)"),
    ],
    expires_at: Annotated[
        Optional[str],
        typer.Option("--expires-at", help="ISO 8601 expiry; omit for a token that never expires"),
    ] = None,
) -> None:
    """Issue an OAuth token.

    The full token is printed once and cannot be retrieved again.
    """
    resource = get_resource(ctx, "oauth_token")
    result = resource.create({
        "client_id": client_id,
        "scopes": scopes,
        "expires_at": expires_at,
    })
    check_diagnostics(result.diagnostics)
    output_json(result.state)


@token_app.command("read")
def token_read_cmd(
    ctx: typer.Context,
    token_id: Annotated[str, typer.Argument(help="OAuth token ID")],
) -> None:
    """Show an OAuth token (without its secret value)."""
    read_by_id(get_resource(ctx, "oauth_token"), token_id)


@token_app.command("delete")
def token_delete_cmd(
    ctx: typer.Context,
    token_id: Annotated[str, typer.Argument(help="OAuth token ID")],
) -> None:
    """Revoke an OAuth token."""
    delete_by_id(get_resource(ctx, "oauth_token"), token_id)


if __name__ == "__main__":
    app()
