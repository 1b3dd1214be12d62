"""Login and logout commands."""

import logging
from typing import Annotated

import typer
from rich.console import Console

from hla.api.client import LeagueAPIClient
from hla.cache.session import SessionStore
from hla.cli.utils.errors import error_boundary
from hla.config import load_config
from hla.models.auth import AuthSession

console = Console()
logger = logging.getLogger(__name__)


def login(
    email: Annotated[
        str,
        typer.Option("--email", "-e", prompt=True, help="Admin account email"),
    ],
    password: Annotated[
        str,
        typer.Option("--password", prompt=True, hide_input=True, help="Admin account password"),
    ],
) -> None:
    """Log in and store the session for later commands.

    The stored token is used whenever neither --token nor HLA_ACCESS_TOKEN
    is given, until it expires.
    """
    with error_boundary(retry_hint=False):
        config = load_config()
        with LeagueAPIClient(config.api_url, timeout=config.request_timeout) as client:
            response = client.login(email, password)
        session = AuthSession.from_login(response)
        with SessionStore(config.session_dir) as store:
            store.save(session)

    who = session.name or session.email
    minutes = session.remaining_seconds / 60
    console.print(f"[green]✓ Logged in as {who}[/green] [dim](session valid for {minutes:.0f} min)[/dim]")


def logout() -> None:
    """Revoke the stored session and forget it locally."""
    with error_boundary(retry_hint=False):
        config = load_config()
        with SessionStore(config.session_dir) as store:
            session = store.load()
            if session is None:
                console.print("[yellow]Not logged in[/yellow]")
                return
            try:
                with LeagueAPIClient(config.api_url, timeout=config.request_timeout) as client:
                    client.logout(session.refresh_token, session.access_token)
            finally:
                # The local session goes even if the server could not be told
                store.clear()

    console.print(f"[green]✓ Logged out {session.email}[/green]")
