"""CLI commands for compiling, listing and searching content."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

if TYPE_CHECKING:
    from folio.content.manager import ContentManager
    from folio.content.menu import MenuNode

console = Console()


def _manager() -> ContentManager:
    from folio.content.manager import ContentManager

    return ContentManager.from_site()


@click.group(name="content")
def content() -> None:
    """Compile, list and search site content."""
    pass


@content.command(name="compile")
@click.argument("page", required=False)
@click.option("-f", "--force", is_flag=True, help="Recompile pages with a valid cache")
@click.pass_obj
def compile_cmd(ctx, page: str | None, force: bool) -> None:
    """Compile pages into the cache.

    Without PAGE, every page whose cache is stale is compiled.

    \b
    Examples:
        folio content compile
        folio content compile --force
        folio content compile blog/hello-world
    """
    manager = _manager()
    dry_run = ctx.dry_run if ctx else False

    if page:
        found = manager.get(page, include_drafts=True)
        if found is None:
            console.print(f"[red]Couldn't find {page!r}[/red]")
            raise SystemExit(1)
        console.print(f"[cyan]Compiling {found.id}[/cyan]")
        if not dry_run:
            found.compile()
        console.print("[green]Done![/green]")
        return

    pages = manager.every_page()
    console.print(f"[cyan]Processing {len(pages)} page(s)...[/cyan]")

    stale = manager.stale_pages(force)
    for item in stale:
        console.print(f"  Compiling {item.id}")
    if not dry_run:
        manager.compile(pages=stale)

    console.print(f"[green]Compiled {len(stale)} page(s)[/green]")
    console.print(f"[dim]Skipped {len(pages) - len(stale)} page(s)[/dim]")


@content.command(name="routes")
def routes_cmd() -> None:
    """List public and draft routes."""
    manager = _manager()

    console.print("[bold]Public routes:[/bold]")
    for route in manager.router.all():
        console.print(f"  {route}")

    console.print("\n[bold]Draft routes:[/bold]")
    drafts = manager.router.drafts()
    if not drafts:
        console.print("  [dim]none[/dim]")
    for route in drafts:
        console.print(f"  {route}")


@content.command(name="search")
@click.argument("terms", nargs=-1, required=True)
@click.option("-n", "--limit", type=int, default=10, help="Maximum results to show")
@click.option("--summary/--no-summary", default=True, help="Show text excerpts")
def search_cmd(terms: tuple[str, ...], limit: int, summary: bool) -> None:
    """Search published pages.

    \b
    Examples:
        folio content search markdown cache
        folio content search "getting started" --no-summary
    """
    manager = _manager()
    search = manager.search(" ".join(terms))

    if not len(search):
        console.print(f"[yellow]No results for {search.terms!r}[/yellow]")
        return

    table = Table(title=f"Results for {search.terms!r}", show_header=True, header_style="bold cyan")
    table.add_column("Rank", justify="right")
    table.add_column("Title")
    table.add_column("Route", style="dim")
    if summary:
        table.add_column("Summary", style="dim")

    for result in search.results[:limit]:
        row = [f"{result.rank:.2f}", result.page.title, result.page.route]
        if summary:
            row.append(search.get_summary(result.page, radius=30, max_excerpts=2) or "")
        table.add_row(*row)

    console.print(table)
    if len(search) > limit:
        console.print(f"[dim]{len(search) - limit} more result(s) not shown[/dim]")


@content.command(name="new")
@click.argument("path")
@click.option("-t", "--title", help="Page title")
@click.option("--draft", is_flag=True, help="Create as a draft")
@click.option("--no-template", is_flag=True, help="Ignore the directory template")
@click.pass_obj
def new_cmd(ctx, path: str, title: str | None, draft: bool, no_template: bool) -> None:
    """Create a new page.

    PATH is relative to the content directory; the extension is optional.

    \b
    Examples:
        folio content new blog/hello-world --title "Hello World"
        folio content new about --no-template
    """
    from pathlib import PurePosixPath

    from folio.core.errors import AlreadyExists

    manager = _manager()
    config = manager.config
    dry_run = ctx.dry_run if ctx else False

    rel = PurePosixPath(path.strip("/"))
    if rel.suffix != f".{config.extension}":
        rel = rel.with_name(f"{rel.name}.{config.extension}")
    if draft:
        rel = rel.with_name(config.draft_marker + rel.name)

    meta = {"title": title} if title else {}
    if dry_run:
        console.print(f"[yellow]Would create {rel}[/yellow]")
        return

    try:
        page = manager.factory.create(
            config.content_dir / rel,
            meta=meta,
            template=False if no_template else None,
        )
    except AlreadyExists:
        console.print(f"[red]Page already exists: {rel}[/red]")
        raise SystemExit(1) from None

    console.print(f"[green]Created:[/green] {page.path}")
    console.print(f"[dim]Route: {page.route}[/dim]")


def _add_menu_nodes(tree: Tree, nodes: list[MenuNode]) -> None:
    for node in nodes:
        label = node.label or node.route or "?"
        suffix = f" [dim]{node.url}[/dim]" if node.url else ""
        _add_menu_nodes(tree.add(f"{label}{suffix}"), node.children)


@content.command(name="menu")
@click.argument("name")
def menu_cmd(name: str) -> None:
    """Show a menu as a tree."""
    manager = _manager()
    nodes = manager.menu(name)

    if not nodes:
        console.print(f"[yellow]Menu {name!r} is empty or not defined[/yellow]")
        return

    tree = Tree(f"[bold]{name}[/bold]")
    _add_menu_nodes(tree, nodes)
    console.print(tree)
