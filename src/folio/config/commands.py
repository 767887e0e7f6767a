"""
Configuration CLI commands.

Shows the settings a site resolves to from its folio.yaml.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any

import click
from rich.console import Console
from rich.table import Table

console = Console()


def _display(value: Any) -> str:
    if isinstance(value, (tuple, list)):
        return ", ".join(str(v) for v in value) or "[dim](none)[/dim]"
    if isinstance(value, dict):
        return "; ".join(f"{k}={_display(v)}" for k, v in value.items()) or "[dim](none)[/dim]"
    if value is None or value == "":
        return "[dim](none)[/dim]"
    return str(value)


@click.group()
def config() -> None:
    """Inspect folio configuration.

    Settings are read from folio.yaml at the site root.
    """
    pass


@config.command(name="show")
@click.option("--all", "show_all", is_flag=True, help="Show all settings including defaults")
def show_cmd(show_all: bool) -> None:
    """Show the resolved configuration.

    Without --all, only settings that differ from the defaults are shown.
    """
    from folio.core.config import CONFIG_FILENAME, ContentConfig, get_site_root, load_config

    site_root = get_site_root()
    current = load_config(site_root)
    defaults = ContentConfig.from_dict(site_root, {})

    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value", style="green")
    table.add_column("Default", style="dim")

    shown = 0
    for f in fields(ContentConfig):
        value = getattr(current, f.name)
        default = getattr(defaults, f.name)
        if show_all or value != default:
            table.add_row(f.name, _display(value), _display(default))
            shown += 1

    if not shown:
        console.print("[dim]No custom configuration set. Using defaults.[/dim]")
        console.print(f"[dim]Config file: {site_root / CONFIG_FILENAME}[/dim]")
        console.print("\n[dim]Use 'folio config show --all' to see all settings.[/dim]")
        return

    console.print(table)
    console.print(f"\n[dim]Config file: {site_root / CONFIG_FILENAME}[/dim]")


@config.command(name="path")
def path_cmd() -> None:
    """Show path to the site config file."""
    from folio.core.config import CONFIG_FILENAME, get_site_root

    console.print(str(get_site_root() / CONFIG_FILENAME))
