"""Error boundary for CLI commands."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.markup import escape

from hla.exceptions import APIError, AuthenticationError, HLAError, NetworkError, ValidationError

console = Console(stderr=True)
logger = logging.getLogger(__name__)


@contextmanager
def error_boundary(retry_hint: bool = True) -> Iterator[None]:
    """Print HLA errors and exit with status 1.

    Validation errors name the offending field. Backend errors print a retry
    hint since re-running the command is the retry.
    """
    try:
        yield
    except ValidationError as e:
        console.print(f"[red]Invalid {escape(e.field)}:[/red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except AuthenticationError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        console.print("[dim]Log in with 'hla login' or pass --token.[/dim]")
        raise typer.Exit(1) from e
    except NetworkError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        if retry_hint:
            console.print("[dim]Check HLA_API_URL and run the command again to retry.[/dim]")
        raise typer.Exit(1) from e
    except APIError as e:
        console.print(f"[red]{escape(e.message)}[/red] (status {e.status_code})")
        if e.response_text:
            logger.debug(f"Response body: {e.response_text}")
        if retry_hint:
            console.print("[dim]Run the command again to retry.[/dim]")
        raise typer.Exit(1) from e
    except HLAError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(1) from e
