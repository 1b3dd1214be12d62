"""Main CLI entry point for Hockey League Admin."""

from typing import Annotated

import typer

from hla.cli.commands.auth import login, logout
from hla.cli.commands.export import export_entities
from hla.cli.commands.list import list_entities
from hla.cli.commands.match import match_app
from hla.cli.commands.mutate import create_entity, delete_entity, toggle_entity, update_entity
from hla.logging_config import configure_logging

app = typer.Typer(
    name="hla",
    help="Hockey League Admin - Manage countries, teams, players, events, seasons and matches",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback()
def callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")] = False,
) -> None:
    """
    Hockey League Admin CLI
    """
    configure_logging(verbose)


app.command("login", help="Log in and store the session locally")(login)
app.command("logout", help="Revoke and forget the stored session")(logout)
app.command("list", help="List one page of an entity (use --format tui for the interactive table)")(list_entities)
app.command("export", help="Export every row of an entity as JSON or CSV")(export_entities)
app.command("create", help="Create a row")(create_entity)
app.command("update", help="Update a row by id or name")(update_entity)
app.command("delete", help="Delete a row by id or name")(delete_entity)
app.command("toggle", help="Enable or disable a country")(toggle_entity)
app.add_typer(match_app, name="match")


if __name__ == "__main__":
    app()
