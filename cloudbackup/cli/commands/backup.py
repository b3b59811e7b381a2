"""
Backup Commands.

Information about successful backups.
"""

import typer
from rich.console import Console

from cloudbackup.cli.client import api_client
from cloudbackup.cli.output import handle_errors

app = typer.Typer(help="Get information about successful backups")
console = Console()


@app.command()
def keys(ctx: typer.Context) -> None:
    """
    Print all your backup encryption keys in JSON format.
    """
    with handle_errors(), api_client(ctx) as client:
        payload = client.backup_keys()

    console.out(payload.decode("utf-8", errors="replace"), highlight=False)
