"""Flask CLI commands for bootstrapping bearer tokens."""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from message_archive.services._shared.errors import ServiceError
from message_archive.services.tokens import TokenCreateIn, TokenService


@click.group("tokens")
def tokens_cli() -> None:
    """Bearer token commands."""


@tokens_cli.command("issue")
@click.option("--name", required=True, help="Label stored with the token.")
@click.option("--ttl", type=int, default=None, help="Lifetime in seconds (default: 30 days).")
@with_appcontext
def issue_command(name: str, ttl: int | None) -> None:
    """Issue a token without going through the HTTP API."""
    try:
        token = TokenService().issue(TokenCreateIn(name=name, expires_in=ttl))
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"id:         {token.id}")
    click.echo(f"token:      {token.token}")
    click.echo(f"expires_at: {token.expires_at.isoformat()}")
