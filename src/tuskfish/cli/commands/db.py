"""
Database Command

Create the content database and report on its contents.
"""

from typing import Annotated, Optional

import typer
from rich.table import Table

from tuskfish.cli.utils import build_cli_args, console, load_config_from_cli, open_registry, print_error
from tuskfish.core.exceptions import TuskfishError
from tuskfish.database.database import Database

app = typer.Typer(
    name="db",
    help="Create and inspect the content database",
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.command("init")
def db_init(
    config: Annotated[Optional[str], typer.Option("--config", "-c", help="Configuration file path")] = None,
    db: Annotated[Optional[str], typer.Option("--db", help="Database file path")] = None,
):
    """
    Create the content and taglink tables.

    Safe to run on an existing database; existing tables are left alone.
    """
    app_config = load_config_from_cli(config, build_cli_args(db=db))
    database = Database(app_config.database)
    try:
        database.initialize_schema()
    except TuskfishError as e:
        print_error(e, debug=app_config.debug)
        raise typer.Exit(1)
    finally:
        database.close()

    console.print(f"[green]✓ Database initialised at {app_config.database.path}[/green]")


@app.command("stats")
def db_stats(
    config: Annotated[Optional[str], typer.Option("--config", "-c", help="Configuration file path")] = None,
    db: Annotated[Optional[str], typer.Option("--db", help="Database file path")] = None,
):
    """Count content objects per type."""
    app_config = load_config_from_cli(config, build_cli_args(db=db))

    with open_registry(app_config) as registry:
        table = Table(title="Content by type")
        table.add_column("Type", style="magenta")
        table.add_column("Count", justify="right", style="cyan")

        total = 0
        for handler in registry.list_handlers():
            count = handler.get_count()
            total += count
            table.add_row(handler.content_type.label, str(count))
        table.add_row("[bold]Total[/bold]", f"[bold]{total}[/bold]")

        console.print(table)
