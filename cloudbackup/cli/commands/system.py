"""
System Commands.

Commands for version information and the effective configuration.
"""

from typing import Any, Optional

import typer
from rich.console import Console
from rich.tree import Tree

from cloudbackup import __version__
from cloudbackup.cli.client import get_state
from cloudbackup.cli.output import fail, handle_errors

app = typer.Typer(help="Version and configuration information")
console = Console()


@app.command()
def version() -> None:
    """
    Display version information.
    """
    console.out(__version__, highlight=False)


@app.command()
def config(
    ctx: typer.Context,
    section: Optional[str] = typer.Argument(None, help="Config section to show (connection, logging)"),
) -> None:
    """
    Display the effective configuration.

    Values are merged from flags, BL_* environment variables and the
    config file. The secret key is masked.
    """
    with handle_errors():
        resolved = get_state(ctx).resolve().masked()

    logging_section = resolved.pop("logging")
    sections = {
        "connection": resolved,
        "logging": logging_section,
    }

    if section:
        if section not in sections:
            fail(f"Unknown section: {section}. Available sections: {', '.join(sections)}")
        _display_config_section(section, sections[section])
        return

    for name, data in sections.items():
        _display_config_section(name, data)
        console.print()


def _display_config_section(name: str, data: dict[str, Any]) -> None:
    """Display a configuration section as a tree."""
    tree = Tree(f"[bold cyan]{name}[/bold cyan]")

    def add_items(parent: Tree, items: dict[str, Any]) -> None:
        for key, value in items.items():
            if isinstance(value, dict):
                branch = parent.add(f"[cyan]{key}[/cyan]")
                add_items(branch, value)
            else:
                parent.add(f"[cyan]{key}[/cyan]: {value}")

    add_items(tree, data)
    console.print(tree)
