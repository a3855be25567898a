"""
Tuskfish CLI Main Application

Typer application that wires the db, content and config subcommands
together.
"""

import sys
from typing import Optional

import typer

from tuskfish.cli import __version__
from tuskfish.cli.commands import config, content, db
from tuskfish.cli.utils import console, print_error
from tuskfish.core.exceptions import TuskfishError

app = typer.Typer(
    name="tuskfish",
    help="Tuskfish content database tools",
    context_settings={"help_option_names": ["-h", "--help"]},
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.add_typer(db.app, name="db", help="Create and inspect the content database")
app.add_typer(content.app, name="content", help="Query and manage content objects")
app.add_typer(config.app, name="config", help="Create and inspect configuration")


def version_callback(value: bool):
    """Show version information."""
    if value:
        console.print(f"[bold cyan]Tuskfish[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def app_callback(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version information and exit"
    ),
):
    """
    Tuskfish content database tools.

    [bold]Quick Start:[/bold]

    • Create a database: [cyan]tuskfish db init[/cyan]
    • List videos: [cyan]tuskfish content list --type Video[/cyan]
    • Search: [cyan]tuskfish content search "tusk fish"[/cyan]
    """


def main():
    """Entry point for the tuskfish console script."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(1)
    except TuskfishError as e:
        print_error(e)
        sys.exit(1)


if __name__ == "__main__":
    main()
