"""CLI commands for the page cache."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.group(name="cache")
def cache() -> None:
    """Inspect and maintain the compiled page cache."""
    pass


@cache.command(name="status")
def status_cmd() -> None:
    """Show how many pages have a fresh, stale or missing cache."""
    from folio.content.manager import ContentManager

    manager = ContentManager.from_site()
    store = manager.factory.cache
    pages = manager.every_page()

    fresh = stale = missing = 0
    for page in pages:
        if not store.artifact(page.hashid).exists:
            missing += 1
        elif store.is_valid(page.hashid, page.path, ignore_mtime=False):
            fresh += 1
        else:
            stale += 1

    live = {page.hashid for page in pages}
    orphans = len(store.hashids() - live)

    table = Table(title="Cache", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Directory", str(store.cache_dir))
    table.add_row("Enabled", "yes" if manager.config.cache_enabled else "no")
    table.add_row("Pages", str(len(pages)))
    table.add_row("Fresh", f"[green]{fresh}[/green]")
    table.add_row("Stale", f"[yellow]{stale}[/yellow]")
    table.add_row("Missing", str(missing))
    table.add_row("Orphaned", f"[red]{orphans}[/red]" if orphans else "0")
    console.print(table)


@cache.command(name="clear")
@click.option("-f", "--force", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
def clear_cmd(ctx, force: bool) -> None:
    """Remove every cached artifact."""
    from folio.cache.store import CacheStore
    from folio.core.config import load_config

    store = CacheStore.from_config(load_config())
    count = len(store.hashids())
    dry_run = ctx.dry_run if ctx else False

    if not count:
        console.print("[dim]Cache is already empty[/dim]")
        return
    if dry_run:
        console.print(f"[yellow]Would remove {count} cached page(s)[/yellow]")
        return
    if not force and not click.confirm(f"Remove {count} cached page(s)?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    store.purge()
    console.print(f"[green]Removed {count} cached page(s)[/green]")


@cache.command(name="sweep")
@click.pass_obj
def sweep_cmd(ctx) -> None:
    """Remove cached artifacts of pages that no longer exist."""
    from folio.content.manager import ContentManager

    manager = ContentManager.from_site()
    dry_run = ctx.dry_run if ctx else False

    if dry_run:
        live = {page.hashid for page in manager.every_page()}
        orphans = sorted(manager.factory.cache.hashids() - live)
        console.print(f"[yellow]Would remove {len(orphans)} orphaned entr(ies)[/yellow]")
        for hashid in orphans:
            console.print(f"  {hashid}")
        return

    removed = manager.sweep_cache()
    if not removed:
        console.print("[dim]No orphaned cache entries[/dim]")
        return
    console.print(f"[green]Removed {len(removed)} orphaned entr(ies)[/green]")
    for hashid in removed:
        console.print(f"  [dim]{hashid}[/dim]")
