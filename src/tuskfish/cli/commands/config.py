"""
Config Command

Create and display configuration files.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer
import yaml
from rich.syntax import Syntax

from tuskfish.cli.utils import build_cli_args, console, load_config_from_cli, print_header
from tuskfish.core.config import ConfigManager

app = typer.Typer(
    name="config",
    help="Create and inspect configuration",
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.command("init")
def config_init(
    output: Annotated[str, typer.Argument(help="Where to write the configuration file")] = "tuskfish.yaml",
    profile: Annotated[str, typer.Option("--profile", "-p", help="default or memory")] = "default",
    force: Annotated[bool, typer.Option("--force", "-f", help="Overwrite an existing file")] = False,
):
    """Write an example configuration file."""
    if profile not in ("default", "memory"):
        raise typer.BadParameter("Profile must be 'default' or 'memory'", param_hint="--profile")

    output_file = Path(output)
    if output_file.exists() and not force:
        console.print(f"[red]{output_file} already exists (use --force to overwrite)[/red]")
        raise typer.Exit(1)

    ConfigManager().create_example_config(output_file, profile)
    console.print(f"[green]✓ Wrote {profile} configuration to {output_file}[/green]")


@app.command("show")
def config_show(
    config: Annotated[Optional[str], typer.Option("--config", "-c", help="Configuration file path")] = None,
    db: Annotated[Optional[str], typer.Option("--db", help="Database file path")] = None,
    debug: Annotated[Optional[bool], typer.Option("--debug", help="Enable debug logging")] = None,
):
    """Show the effective configuration after files, environment and options are merged."""
    app_config = load_config_from_cli(config, build_cli_args(db=db, debug=debug))

    print_header("Effective configuration", config or "defaults and environment")
    rendered = yaml.dump(app_config.model_dump(mode='json'), default_flow_style=False, indent=2)
    console.print(Syntax(rendered, "yaml"))
