"""
Main CLI dispatcher for folio.

Usage:
    folio init                           # Create folio.yaml and content/
    folio content [compile|routes|search|new|menu]
    folio cache [status|clear|sweep]
    folio config [show|path]
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from folio import __version__

console = Console()


class Context:
    """Shared context for all commands."""

    def __init__(self, verbose: bool = False, dry_run: bool = False):
        self.verbose = verbose
        self.dry_run = dry_run
        self.console = console


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich; debug output with -v."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="folio")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-n", "--dry-run", is_flag=True, help="Preview without making changes")
@click.pass_context
def main(ctx: click.Context, verbose: bool, dry_run: bool) -> None:
    """Flat-file markdown content tools.

    Compile, cache, search and route the markdown pages of a folio site.
    """
    ctx.ensure_object(dict)
    ctx.obj = Context(verbose=verbose, dry_run=dry_run)
    setup_logging(verbose)

    if dry_run:
        console.print("[yellow]DRY RUN MODE - No changes will be made[/yellow]")


@main.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing folio.yaml")
@click.pass_obj
def init(ctx, force: bool) -> None:
    """Initialize a folio site in the current directory.

    Creates folio.yaml, the content directory and a starter page, and keeps
    the cache out of git.
    """
    from pathlib import Path

    import yaml

    from folio.core.config import CONFIG_FILENAME

    dry_run = ctx.dry_run if ctx else False
    site_root = Path.cwd()
    config_path = site_root / CONFIG_FILENAME

    if config_path.exists() and not force:
        console.print(f"[yellow]{CONFIG_FILENAME} already exists at {config_path}[/yellow]")
        console.print("[dim]Use --force to reinitialize.[/dim]")
        return

    console.print(f"[cyan]Initializing folio site at {site_root}[/cyan]")

    settings = {
        "content_dir": "content",
        "cache_dir": ".folio/cache",
        "root_url": "",
        "drafts_enabled": False,
    }
    index_page = site_root / "content" / "index.md"

    if not dry_run:
        config_path.write_text(
            yaml.safe_dump(settings, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
        index_page.parent.mkdir(parents=True, exist_ok=True)
        if not index_page.exists():
            index_page.write_text("---\ntitle: Home\n---\n\nWelcome.\n", encoding="utf-8")
    console.print(f"  [green]Created[/green] {CONFIG_FILENAME}")
    console.print(f"  [green]Created[/green] {index_page.relative_to(site_root)}")

    gitignore_path = site_root / ".gitignore"
    gitignore_entry = ".folio/cache/"

    if gitignore_path.exists():
        content = gitignore_path.read_text()
        if gitignore_entry not in content:
            if not dry_run:
                with open(gitignore_path, "a") as f:
                    f.write(f"\n# folio cache\n{gitignore_entry}\n")
            console.print(f"  [green]Updated[/green] .gitignore with {gitignore_entry}")

    console.print()
    if dry_run:
        console.print("[yellow]DRY RUN - no changes made[/yellow]")
    else:
        console.print("[green]Done![/green] folio site initialized.")


# Import and register command groups (imports after main definition intentional)
from folio.cache.commands import cache  # noqa: E402
from folio.config.commands import config  # noqa: E402
from folio.content.commands import content  # noqa: E402

main.add_command(content)
main.add_command(cache)
main.add_command(config)


if __name__ == "__main__":
    main()
