"""
Server Commands.

Create, update, remove and get information for database servers, and
install the backup agent on this host.
"""

import os
import subprocess
from typing import Optional

import typer
from rich.console import Console

from cloudbackup.api.models import DatabaseType, Server
from cloudbackup.cli.client import api_client
from cloudbackup.cli.output import fail, handle_errors, print_record, print_success

app = typer.Typer(help="Create, update, remove and get information for servers")
console = Console()

SERVER_ID_HELP = "Server ID"
DB_TYPE_HELP = "The database type (mysql, mariadb, percona_server, mongodb, postgresql)"


@app.command()
def new(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="The server name to show in the control panel"),
    db_type: str = typer.Option(..., "--db-type", help=DB_TYPE_HELP),
    db_port: str = typer.Option(..., "--db-port", help="The port of the database to connect the agent to"),
    db_host: str = typer.Option("localhost", "--db-host", help="The host of the database to connect the agent to"),
    db_user: str = typer.Option("", "--db-user", help="The user the agent will use to connect to the database"),
    db_pass: str = typer.Option("", "--db-pass", help="The password the agent will use to connect to the database"),
    readonly: bool = typer.Option(
        False, "--readonly", help="If the server is readonly (can be backed up but can't receive restores)",
    ),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Add a new server.

    Examples:
        cloudbackup-cli server new --name db1 --db-type mysql --db-port 3306
    """
    with handle_errors(), api_client(ctx) as client:
        server = client.servers.create(Server(
            name=name,
            db_type=DatabaseType.parse(db_type),
            readonly=readonly,
            db_host=db_host,
            db_port=db_port,
            db_user=db_user,
            db_pass=db_pass,
        ))

    print_success("Server created successfully")
    print_record(server, as_json)


@app.command()
def update(
    ctx: typer.Context,
    server_id: int = typer.Option(..., "--server-id", help=SERVER_ID_HELP),
    name: Optional[str] = typer.Option(None, "--name", help="The server name to show in the control panel"),
    db_type: Optional[str] = typer.Option(None, "--db-type", help=DB_TYPE_HELP + ", cannot be changed"),
    db_host: Optional[str] = typer.Option(None, "--db-host", help="The host of the database"),
    db_port: Optional[str] = typer.Option(None, "--db-port", help="The port of the database"),
    db_user: Optional[str] = typer.Option(None, "--db-user", help="The database user for the agent"),
    db_pass: Optional[str] = typer.Option(None, "--db-pass", help="The database password for the agent"),
    readonly: Optional[bool] = typer.Option(None, "--readonly/--writable", help="If the server is readonly"),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Update a server. Only the options given are changed.
    """
    changes = {
        "name": name,
        "db_host": db_host,
        "db_port": db_port,
        "db_user": db_user,
        "db_pass": db_pass,
        "readonly": readonly,
    }

    with handle_errors(), api_client(ctx) as client:
        current = client.servers.get(server_id)
        if db_type is not None:
            changes["db_type"] = DatabaseType.parse(db_type)

        server = client.servers.update(
            current.model_copy(update={k: v for k, v in changes.items() if v is not None}),
            previous=current,
        )

    print_success("Server updated successfully")
    print_record(server, as_json)


@app.command()
def delete(
    ctx: typer.Context,
    server_id: int = typer.Option(..., "--server-id", help=SERVER_ID_HELP),
) -> None:
    """
    Delete a server.
    """
    with handle_errors(), api_client(ctx) as client:
        client.servers.delete(server_id)

    print_success("Server deleted successfully")


@app.command()
def info(
    ctx: typer.Context,
    server_id: int = typer.Option(..., "--server-id", help=SERVER_ID_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Get information for a server.
    """
    with handle_errors(), api_client(ctx) as client:
        server = client.servers.get(server_id)

    print_record(server, as_json)


@app.command()
def install(
    ctx: typer.Context,
    server_id: int = typer.Option(..., "--server-id", help=SERVER_ID_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help="Output install script instead of executing it"),
) -> None:
    """
    Install the backup agent for a server on this host, or print the install script.

    Running the script needs root privileges; --dry-run only prints it.

    Examples:
        cloudbackup-cli server install --server-id 12 --dry-run
        sudo cloudbackup-cli server install --server-id 12
    """
    with handle_errors(), api_client(ctx) as client:
        script = client.servers.install(server_id)

    if dry_run:
        console.out(script.decode("utf-8", errors="replace"), highlight=False)
        return

    if os.geteuid() != 0 or os.getegid() != 0:
        fail("You need root privileges to execute this command")

    result = subprocess.run(["bash"], input=script, check=False)
    if result.returncode != 0:
        fail(f"Install script failed (exit code: {result.returncode})")
