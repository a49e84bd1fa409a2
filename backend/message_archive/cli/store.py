"""Flask CLI commands managing the message and token tables."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect

from message_archive.core.extensions import db

LOGGER = logging.getLogger(__name__)


def _echo_tables() -> None:
    """Print every table with its index names."""
    inspector = inspect(db.engine)
    for table in sorted(db.metadata.tables):
        indexes = sorted(ix["name"] for ix in inspector.get_indexes(table) if ix.get("name"))
        click.echo(f"  {table}: {', '.join(indexes) or '(no indexes)'}")


def _ensure_non_production() -> None:
    """Abort destructive commands when running in production."""
    config = current_app.config
    if not (config.get("DEBUG") or config.get("TESTING")):
        raise click.UsageError(
            "The 'flask store reset' command is restricted to non-production environments."
        )


@click.group("store")
def store_cli() -> None:
    """Store schema management commands."""


@store_cli.command("init")
@with_appcontext
def init_command() -> None:
    """Create missing tables and indexes (existing ones are left untouched)."""
    LOGGER.info("Creating store schema...")
    db.create_all()
    click.echo("Store schema ready:")
    _echo_tables()


@store_cli.command("reset")
@click.option("--yes", is_flag=True, help="Skip the destructive confirmation prompt.")
@with_appcontext
def reset_command(yes: bool) -> None:
    """Drop and recreate every table. All messages and tokens are lost."""
    _ensure_non_production()
    if not yes:
        click.confirm("This will DROP the messages and tokens tables. Continue?", abort=True)
    LOGGER.info("Dropping store schema...")
    db.session.remove()
    db.drop_all()
    db.create_all()
    click.echo("Store schema recreated:")
    _echo_tables()
