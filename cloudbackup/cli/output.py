"""
CLI Output.

Rendering of records and errors. Command results go to stdout;
status messages and errors go to stderr.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from cloudbackup.api.models import Record
from cloudbackup.core.exceptions import ApplicationError
from cloudbackup.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

console = Console()
err_console = Console(stderr=True)


def print_record(record: Record, as_json: bool = False) -> None:
    """Print a record as text or JSON, secrets masked."""
    console.out(record.render_json() if as_json else record.render(), highlight=False)


def print_success(message: str) -> None:
    err_console.print(f"[green]{escape(message)}[/green]", soft_wrap=True)


def fail(error: ApplicationError | str) -> NoReturn:
    """Print an error and exit with status 1."""
    if isinstance(error, ApplicationError):
        log_with_source(logger, "cli", "debug", "Command failed",
                        code=error.code, error=str(error))
    err_console.print(f"[red]Error: {escape(str(error))}[/red]", soft_wrap=True)
    raise typer.Exit(1)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn application errors into a printed message and exit status 1."""
    try:
        yield
    except ApplicationError as e:
        fail(e)
