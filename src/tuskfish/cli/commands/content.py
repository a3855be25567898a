"""
Content Command

List, count, show, search and publish content objects.
"""

from typing import Annotated, List, Optional

import typer
from rich.panel import Panel
from rich.table import Table

from tuskfish.cli.utils import (
    build_cli_args,
    console,
    content_table,
    load_config_from_cli,
    open_registry,
)
from tuskfish.content_handlers.base import SEARCH_MODES

app = typer.Typer(
    name="content",
    help="Query and manage content objects",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

ConfigOption = Annotated[Optional[str], typer.Option("--config", "-c", help="Configuration file path")]
DbOption = Annotated[Optional[str], typer.Option("--db", help="Database file path")]


def _build_criteria(handler, tag: Optional[List[int]], online_only: bool,
                    limit: int, offset: int, order: Optional[str], ascending: bool):
    criteria = handler.criteria_factory.get_criteria()
    if online_only:
        criteria.add(handler.item_factory.get_item('online', 1))
    if tag:
        criteria.set_tag(tag)
    if limit:
        criteria.set_limit(limit)
    if offset:
        criteria.set_offset(offset)
    if order:
        criteria.set_order(order, 'ASC' if ascending else 'DESC')
    return criteria


@app.command("list")
def content_list(
    content_type: Annotated[Optional[str], typer.Option("--type", "-t", help="Only this content type")] = None,
    tag: Annotated[Optional[List[int]], typer.Option("--tag", help="Only content with this tag id (repeatable)")] = None,
    online_only: Annotated[bool, typer.Option("--online-only/--all", help="Hide offline content")] = True,
    limit: Annotated[Optional[int], typer.Option("--limit", "-l", min=0, help="Maximum number of objects")] = None,
    offset: Annotated[int, typer.Option("--offset", min=0, help="Objects to skip")] = 0,
    order: Annotated[Optional[str], typer.Option("--order", help="Sort column")] = None,
    ascending: Annotated[bool, typer.Option("--asc", help="Sort ascending")] = False,
    config: ConfigOption = None,
    db: DbOption = None,
):
    """
    List content objects, newest first.

    [bold cyan]Examples:[/bold cyan]

    • Latest videos: [green]tuskfish content list --type Video[/green]
    • Tagged content: [green]tuskfish content list --tag 3 --tag 7[/green]
    """
    app_config = load_config_from_cli(config, build_cli_args(db=db))
    page_size = app_config.site.admin_pagination if limit is None else limit

    with open_registry(app_config) as registry:
        handler = registry.get_handler(content_type)
        criteria = _build_criteria(handler, tag, online_only, page_size, offset, order, ascending)
        objects = handler.get_objects(criteria)
        total = handler.get_count(criteria)

        if not objects:
            console.print("[yellow]No content found[/yellow]")
            return
        console.print(content_table(objects, title=f"{content_type or 'Content'} ({total} total)"))


@app.command("count")
def content_count(
    content_type: Annotated[Optional[str], typer.Option("--type", "-t", help="Only this content type")] = None,
    tag: Annotated[Optional[List[int]], typer.Option("--tag", help="Only content with this tag id (repeatable)")] = None,
    online_only: Annotated[bool, typer.Option("--online-only/--all", help="Ignore offline content")] = True,
    config: ConfigOption = None,
    db: DbOption = None,
):
    """Count content objects."""
    app_config = load_config_from_cli(config, build_cli_args(db=db))

    with open_registry(app_config) as registry:
        handler = registry.get_handler(content_type)
        criteria = _build_criteria(handler, tag, online_only, 0, 0, None, False)
        console.print(f"{content_type or 'Content'}: [bold cyan]{handler.get_count(criteria)}[/bold cyan]")


@app.command("show")
def content_show(
    content_id: Annotated[int, typer.Argument(help="Content id")],
    config: ConfigOption = None,
    db: DbOption = None,
):
    """Show every field of one content object."""
    app_config = load_config_from_cli(config, build_cli_args(db=db))

    with open_registry(app_config) as registry:
        obj = registry.content_handler.get_object(content_id)
        if obj is None:
            console.print(f"[red]No content with id {content_id}[/red]")
            raise typer.Exit(1)

        table = Table(show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        for name, value in obj.to_row().items():
            if name not in obj.type.zeroed_fields:
                table.add_row(name, "" if value is None else str(value))
        table.add_row("tags", ", ".join(str(tag) for tag in obj.tags))
        table.add_row("template", obj.template)
        table.add_row("module", obj.module)
        console.print(Panel(table, title=f"[bold]{obj.title or obj.id}[/bold]", border_style="cyan"))


@app.command("search")
def content_search(
    terms: Annotated[str, typer.Argument(help="Search terms")],
    mode: Annotated[str, typer.Option("--mode", "-m", help="AND, OR or exact")] = "AND",
    limit: Annotated[int, typer.Option("--limit", "-l", min=0, help="Results per page (0 = configured default)")] = 0,
    offset: Annotated[int, typer.Option("--offset", min=0, help="Results to skip")] = 0,
    config: ConfigOption = None,
    db: DbOption = None,
):
    """
    Search online content.

    Terms shorter than the configured minimum search length are ignored.
    """
    if mode not in SEARCH_MODES:
        raise typer.BadParameter(f"Mode must be one of: {', '.join(SEARCH_MODES)}", param_hint="--mode")
    app_config = load_config_from_cli(config, build_cli_args(db=db))

    with open_registry(app_config) as registry:
        result = registry.content_handler.search_content(terms, mode, limit, offset)
        if not result.count:
            console.print("[yellow]No matches[/yellow]")
            return
        console.print(content_table(result.objects, title=f"{result.count} matches"))


@app.command("toggle")
def content_toggle(
    content_id: Annotated[int, typer.Argument(help="Content id")],
    config: ConfigOption = None,
    db: DbOption = None,
):
    """Switch a content object between online and offline."""
    app_config = load_config_from_cli(config, build_cli_args(db=db))

    with open_registry(app_config) as registry:
        handler = registry.content_handler
        if not handler.toggle_online_status(content_id):
            console.print(f"[red]No content with id {content_id}[/red]")
            raise typer.Exit(1)
        obj = handler.get_object(content_id)
        state = "online" if obj.online else "offline"
        console.print(f"[green]✓ Content {content_id} is now {state}[/green]")


@app.command("tags")
def content_tags(
    content_type: Annotated[Optional[str], typer.Option("--type", "-t", help="Only tags used by this content type")] = None,
    active: Annotated[bool, typer.Option("--active", help="Only tags that are linked to content")] = False,
    online_only: Annotated[bool, typer.Option("--online-only/--all", help="Hide offline tags")] = True,
    config: ConfigOption = None,
    db: DbOption = None,
):
    """List tags in alphabetical order."""
    app_config = load_config_from_cli(config, build_cli_args(db=db))

    with open_registry(app_config) as registry:
        handler = registry.content_handler
        if active or content_type:
            tags = handler.get_active_tag_list(content_type, online_only)
        else:
            tags = handler.get_tag_list(online_only)

        if not tags:
            console.print("[yellow]No tags found[/yellow]")
            return

        table = Table(title="Tags")
        table.add_column("ID", justify="right", style="cyan")
        table.add_column("Title")
        for tag_id, title in tags.items():
            table.add_row(str(tag_id), title)
        console.print(table)
