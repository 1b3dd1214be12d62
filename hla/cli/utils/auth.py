"""Credential resolution and service wiring for CLI commands."""

import logging

from rich.console import Console

from hla.cache.session import SessionStore
from hla.config import Config, load_config
from hla.services.admin import LeagueAdmin
from hla.services.notifications import Notifier

console = Console()
logger = logging.getLogger(__name__)


def resolve_token(token: str | None = None, config: Config | None = None) -> str | None:
    """Pick the bearer token for a command.

    Order: explicit ``--token``, ``HLA_ACCESS_TOKEN``, then the stored login
    session. Returns None when none is available; reads then go out
    unauthenticated.
    """
    if token:
        return token
    config = config or load_config()
    if config.access_token:
        return config.access_token.get_secret_value()
    with SessionStore(config.session_dir) as store:
        session = store.load()
    if session:
        logger.debug(f"Using stored session for {session.email}")
        return session.access_token
    return None


def open_admin(token: str | None = None, notifier: Notifier | None = None) -> LeagueAdmin:
    """Build the services for one command run.

    Returns:
        Admin wiring; use it as a context manager to open the HTTP session
    """
    config = load_config()
    return LeagueAdmin(config, auth_token=resolve_token(token, config), notifier=notifier)
