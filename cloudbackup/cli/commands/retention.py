"""
Retention Commands.

Create, update, remove and get information for backup retention policies.
"""

from typing import Optional

import typer

from cloudbackup.api.models import Retention, RetentionType
from cloudbackup.cli.client import api_client
from cloudbackup.cli.output import handle_errors, print_record, print_success

app = typer.Typer(help="Create, update, remove and get information for retentions")

RETENTION_ID_HELP = "Retention ID"
RETENTION_TYPE_HELP = "The retention type (bydays or bycount)"
COUNT_HELP = "How many days (bydays) or backups (bycount) to keep"


@app.command()
def new(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="The retention name to show in the control panel"),
    retention_type: str = typer.Option(..., "--retention-type", help=RETENTION_TYPE_HELP),
    count: int = typer.Option(..., "--count", help=COUNT_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Add a new retention policy.

    Examples:
        cloudbackup-cli retention new --name week --retention-type bydays --count 7
    """
    with handle_errors(), api_client(ctx) as client:
        retention = client.retentions.create(Retention(
            name=name,
            retention_type=RetentionType.parse(retention_type),
            count=count,
        ))

    print_success("Retention created successfully")
    print_record(retention, as_json)


@app.command()
def update(
    ctx: typer.Context,
    retention_id: int = typer.Option(..., "--retention-id", help=RETENTION_ID_HELP),
    name: Optional[str] = typer.Option(None, "--name", help="The retention name to show in the control panel"),
    retention_type: Optional[str] = typer.Option(None, "--retention-type", help=RETENTION_TYPE_HELP),
    count: Optional[int] = typer.Option(None, "--count", help=COUNT_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Update a retention policy. Only the options given are changed.
    """
    changes = {
        "name": name,
        "count": count,
    }

    with handle_errors(), api_client(ctx) as client:
        current = client.retentions.get(retention_id)
        if retention_type is not None:
            changes["retention_type"] = RetentionType.parse(retention_type)

        retention = client.retentions.update(
            current.model_copy(update={k: v for k, v in changes.items() if v is not None}),
            previous=current,
        )

    print_success("Retention updated successfully")
    print_record(retention, as_json)


@app.command()
def delete(
    ctx: typer.Context,
    retention_id: int = typer.Option(..., "--retention-id", help=RETENTION_ID_HELP),
) -> None:
    """
    Delete a retention policy.
    """
    with handle_errors(), api_client(ctx) as client:
        client.retentions.delete(retention_id)

    print_success("Retention deleted successfully")


@app.command()
def info(
    ctx: typer.Context,
    retention_id: int = typer.Option(..., "--retention-id", help=RETENTION_ID_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Get information for a retention policy.
    """
    with handle_errors(), api_client(ctx) as client:
        retention = client.retentions.get(retention_id)

    print_record(retention, as_json)
