"""Flask CLI commands for role seeding, admin bootstrap and revocation cleanup."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from authcore.core.components import get_components
from authcore.models.role import ROLE_NAMES
from authcore.services._shared.errors import (
    DuplicateFieldError,
    StoreUnavailableError,
    ValidationFailedError,
)
from authcore.services.auth.dto import RegisterIn

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.getLogger("authcore").setLevel(level)


@click.group("auth")
@click.option("--verbose", is_flag=True, help="Enable verbose logging.")
def auth_cli(verbose: bool) -> None:
    """Account and token maintenance commands."""
    _configure_logging(verbose)


@auth_cli.command("seed-roles")
@with_appcontext
def seed_roles_command() -> None:
    """Create the user, admin and moderator roles if missing."""
    try:
        refs = get_components().roles.resolve_roles(ROLE_NAMES)
    except StoreUnavailableError as exc:
        raise click.ClickException(str(exc)) from exc
    for ref in refs:
        click.echo(f"  role {ref.name:<10} id={ref.id}")


@auth_cli.command("create-admin")
@click.option("--username", required=True)
@click.option("--email", required=True)
@click.password_option(help="Password for the new admin account.")
@with_appcontext
def create_admin_command(username: str, email: str, password: str) -> None:
    """Register an account holding the admin and user roles."""
    try:
        account = get_components().auth.register(
            RegisterIn(username=username, email=email, password=password, roles=("user", "admin"))
        )
    except ValidationFailedError as exc:
        lines = [f"{field}: {'; '.join(msgs)}" for field, msgs in exc.errors.items()]
        raise click.ClickException("Invalid admin account: " + ", ".join(lines)) from exc
    except (DuplicateFieldError, StoreUnavailableError) as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created admin {account.username} (id={account.id})")


@auth_cli.command("purge-revocations")
@with_appcontext
def purge_revocations_command() -> None:
    """Delete revocation records whose token has already expired."""
    try:
        removed = get_components().registry.purge_expired()
    except StoreUnavailableError as exc:
        raise click.ClickException(str(exc)) from exc
    LOGGER.info("Purged revocations", extra={"event": "revocations.purged"})
    click.echo(f"Purged {removed} expired revocation record(s).")
