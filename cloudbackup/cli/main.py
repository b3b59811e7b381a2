"""
Command-line interface for the backup management service.

Usage:
    cloudbackup-cli --help                                  # Show help

    # Servers
    cloudbackup-cli server new --name db1 --db-type mysql --db-port 3306
    cloudbackup-cli server info --server-id 12 --json
    cloudbackup-cli server install --server-id 12 --dry-run

    # Schedules, retentions and storages
    cloudbackup-cli schedule new --name nightly --schedule-type daily --hours 03:00
    cloudbackup-cli retention new --name week --retention-type bydays --count 7
    cloudbackup-cli storage new --name disk --storage-type local --path /data/backups

    # Backups
    cloudbackup-cli backup keys

    # System info
    cloudbackup-cli system version
    cloudbackup-cli system config

Options:
    --config          Config file (default ~/.cloudbackup-cli.yaml)
    --host            API host (env BL_HOST)
    --access-key      API access key (env BL_ACCESS_KEY)
    --secret-key      API secret key (env BL_SECRET_KEY)
    --verbose, -v     Enable verbose output
    --debug, -d       Enable debug mode (detailed logging)
"""

from pathlib import Path
from typing import Optional

import typer

from cloudbackup.cli.client import get_state
from cloudbackup.cli.commands import (
    backup_app,
    retention_app,
    schedule_app,
    server_app,
    storage_app,
    system_app,
)
from cloudbackup.core.config_schema import LoggingSchema
from cloudbackup.core.exceptions import ConfigurationError
from cloudbackup.core.logging import get_logger, log_with_source, setup_logging

logger = get_logger(__name__)

app = typer.Typer(
    name="cloudbackup-cli",
    help="Manage servers, schedules, retentions and storages of your cloud backup account.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(server_app, name="server")
app.add_typer(schedule_app, name="schedule")
app.add_typer(retention_app, name="retention")
app.add_typer(storage_app, name="storage")
app.add_typer(backup_app, name="backup")
app.add_typer(system_app, name="system")


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file (default is $HOME/.cloudbackup-cli.yaml)",
    ),
    host: Optional[str] = typer.Option(None, "--host", help="API Host"),
    access_key: Optional[str] = typer.Option(None, "--access-key", help="API Access key"),
    secret_key: Optional[str] = typer.Option(None, "--secret-key", help="API Secret key"),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output (INFO level logging)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode (DEBUG level logging)",
    ),
) -> None:
    """
    Cloud backup CLI.

    Connection settings are taken from the flags, then the BL_HOST,
    BL_ACCESS_KEY and BL_SECRET_KEY environment variables, then the
    config file.
    """
    state = get_state(ctx)
    state.config_path = config
    state.host = host
    state.access_key = access_key
    state.secret_key = secret_key

    logging_config: LoggingSchema | None
    try:
        logging_config = state.resolve().logging
    except ConfigurationError:
        # Reported by the command once it needs the configuration.
        logging_config = None

    if debug:
        setup_logging(level="DEBUG", enable_console=True, config=logging_config)
    elif verbose:
        setup_logging(level="INFO", enable_console=True, config=logging_config)
    else:
        setup_logging(config=logging_config)

    log_with_source(logger, "cli", "debug", "CLI started", command=ctx.invoked_subcommand)


def run() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
