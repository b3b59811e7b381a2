"""
Storage Commands.

Create, update, remove and get information for backup storages: a local
path on the agent host, or a bucket on a cloud provider.
"""

from typing import Optional

import typer

from cloudbackup.api.models import Storage, StorageType
from cloudbackup.cli.client import api_client
from cloudbackup.cli.output import handle_errors, print_record, print_success

app = typer.Typer(help="Create, update, remove and get information for backup storages")

STORAGE_ID_HELP = "Storage ID"
STORAGE_TYPE_HELP = "The storage type: 'local', 's3', 'google', 'digitalocean' or 'alibaba'"
PATH_HELP = "The local storage full path to store the backups (for ex: '/data/backups')"
BUCKET_HELP = "The cloud bucket to store the backups into (does not apply to local storage)"
ACCESS_KEY_HELP = "The access key for the cloud storage (does not apply to local storage)"
SECRET_KEY_HELP = "The secret key for the cloud storage (does not apply to local storage)"
REGION_HELP = (
    "The cloud storage region endpoint, without https, as reported by your "
    "provider (for ex: 's3.ap-south-1.amazonaws.com')"
)


@app.command()
def new(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="The storage name to show in the control panel"),
    storage_type: str = typer.Option(..., "--storage-type", help=STORAGE_TYPE_HELP),
    path: str = typer.Option("", "--path", help=PATH_HELP),
    bucket: str = typer.Option("", "--bucket", help=BUCKET_HELP),
    access_key: str = typer.Option("", "--storage-access-key", help=ACCESS_KEY_HELP),
    secret_key: str = typer.Option("", "--storage-secret-key", help=SECRET_KEY_HELP),
    region_endpoint: str = typer.Option("", "--region-endpoint", help=REGION_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Add a new backup storage.

    Examples:
        cloudbackup-cli storage new --name disk --storage-type local --path /data/backups
    """
    with handle_errors(), api_client(ctx) as client:
        storage = client.storages.create(Storage(
            name=name,
            storage_type=StorageType.parse(storage_type),
            local_path=path,
            bucket=bucket,
            access_key=access_key,
            secret_key=secret_key,
            region_endpoint=region_endpoint,
        ))

    print_success("Storage created successfully")
    print_record(storage, as_json)


@app.command()
def update(
    ctx: typer.Context,
    storage_id: int = typer.Option(..., "--storage-id", help=STORAGE_ID_HELP),
    name: Optional[str] = typer.Option(None, "--name", help="The storage name to show in the control panel"),
    storage_type: Optional[str] = typer.Option(None, "--storage-type", help=STORAGE_TYPE_HELP + ", cannot be changed"),
    path: Optional[str] = typer.Option(None, "--path", help=PATH_HELP),
    bucket: Optional[str] = typer.Option(None, "--bucket", help=BUCKET_HELP),
    access_key: Optional[str] = typer.Option(None, "--storage-access-key", help=ACCESS_KEY_HELP),
    secret_key: Optional[str] = typer.Option(None, "--storage-secret-key", help=SECRET_KEY_HELP),
    region_endpoint: Optional[str] = typer.Option(None, "--region-endpoint", help=REGION_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Update a backup storage. Only the options given are changed.
    """
    changes = {
        "name": name,
        "local_path": path,
        "bucket": bucket,
        "access_key": access_key,
        "secret_key": secret_key,
        "region_endpoint": region_endpoint,
    }

    with handle_errors(), api_client(ctx) as client:
        current = client.storages.get(storage_id)
        if storage_type is not None:
            changes["storage_type"] = StorageType.parse(storage_type)

        storage = client.storages.update(
            current.model_copy(update={k: v for k, v in changes.items() if v is not None}),
            previous=current,
        )

    print_success("Storage updated successfully")
    print_record(storage, as_json)


@app.command()
def delete(
    ctx: typer.Context,
    storage_id: int = typer.Option(..., "--storage-id", help=STORAGE_ID_HELP),
) -> None:
    """
    Delete a backup storage.
    """
    with handle_errors(), api_client(ctx) as client:
        client.storages.delete(storage_id)

    print_success("Storage deleted successfully")


@app.command()
def info(
    ctx: typer.Context,
    storage_id: int = typer.Option(..., "--storage-id", help=STORAGE_ID_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output info in JSON format"),
) -> None:
    """
    Get information for a backup storage.
    """
    with handle_errors(), api_client(ctx) as client:
        storage = client.storages.get(storage_id)

    print_record(storage, as_json)
