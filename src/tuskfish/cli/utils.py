"""
CLI Utilities

Shared helpers for CLI commands: configuration loading, logging setup,
database access and Rich-formatted output.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tuskfish.content.objects import ContentObject
from tuskfish.content_handlers.registry import HandlerRegistry
from tuskfish.core.config import AppConfig, ConfigManager
from tuskfish.core.exceptions import ConfigurationError, TuskfishError
from tuskfish.database.database import Database

console = Console()


def build_cli_args(**kwargs) -> Dict[str, Any]:
    """Collect CLI option values, dropping the ones that were not given."""
    return {key: value for key, value in kwargs.items() if value is not None}


def setup_logging(config: AppConfig) -> None:
    """Set up logging configuration for the application."""
    logging.basicConfig(
        level=getattr(logging, config.get_log_level()),
        format=config.logging.format,
        datefmt=config.logging.datefmt,
    )


def load_config_from_cli(config_file: Optional[str] = None,
                         cli_args: Optional[Dict[str, Any]] = None) -> AppConfig:
    """
    Load configuration and configure logging.

    Raises:
        typer.Exit: If the configuration is invalid
    """
    try:
        config_manager = ConfigManager(config_file=config_file)
        app_config = config_manager.load_config(cli_args=cli_args or {})
    except ConfigurationError as e:
        print_error(e)
        raise typer.Exit(1)

    setup_logging(app_config)

    warnings = config_manager.validate_config(app_config)
    if warnings and app_config.verbose:
        console.print("[yellow]Configuration warnings:[/yellow]")
        for warning in warnings:
            console.print(f"  • {warning}")

    return app_config


@contextmanager
def open_registry(config: AppConfig) -> Iterator[HandlerRegistry]:
    """Open the configured database and yield a handler registry over it."""
    db = Database(config.database)
    try:
        yield HandlerRegistry(db, config.site)
    except TuskfishError as e:
        print_error(e, debug=config.debug)
        raise typer.Exit(1)
    finally:
        db.close()


def print_header(title: str, subtitle: Optional[str] = None) -> None:
    """Print a formatted header for CLI output."""
    if subtitle:
        header_text = f"[bold cyan]{title}[/bold cyan]\n[dim]{subtitle}[/dim]"
    else:
        header_text = f"[bold cyan]{title}[/bold cyan]"

    console.print(Panel(header_text, border_style="cyan"))


def print_error(error: Exception, debug: bool = False) -> None:
    """Print an error, with recovery suggestions for Tuskfish errors."""
    message = error.get_user_message() if isinstance(error, TuskfishError) else str(error)
    console.print(Panel(message, title="[red]Error[/red]", border_style="red"))
    if debug and isinstance(error, TuskfishError):
        console.print(error.get_debug_info())


def content_table(objects: List[ContentObject], title: str = "Content") -> Table:
    """Tabulate content objects."""
    table = Table(title=title)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Title")
    table.add_column("Date")
    table.add_column("Online", justify="center")
    table.add_column("Tags")

    for obj in objects:
        table.add_row(
            str(obj.id),
            obj.type.value,
            obj.title or "",
            obj.date or "",
            "✓" if obj.online else "✗",
            ", ".join(str(tag) for tag in obj.tags),
        )
    return table
