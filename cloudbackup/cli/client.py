"""
API Client for CLI.

Builds the BackupClient for one command invocation from the global
options stored on the Typer context (--config, --host, --access-key,
--secret-key), the BL_* environment and the config file.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import httpx
import typer

from cloudbackup.api.client import BackupClient
from cloudbackup.core.config import ResolvedConfig, resolve_config
from cloudbackup.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


@dataclass
class CliState:
    """
    Global options shared by all commands through ctx.obj.

    `transport` replaces the network transport (tests).
    """

    config_path: Path | None = None
    host: str | None = None
    access_key: str | None = None
    secret_key: str | None = None
    transport: httpx.BaseTransport | None = None
    _config: ResolvedConfig | None = None

    def resolve(self) -> ResolvedConfig:
        """Resolve and cache the effective configuration."""
        if self._config is None:
            self._config = resolve_config(
                config_path=self.config_path,
                host=self.host,
                access_key=self.access_key,
                secret_key=self.secret_key,
            )
        return self._config


def get_state(ctx: typer.Context) -> CliState:
    """Get the CLI state, creating an empty one if the callback did not run."""
    return ctx.ensure_object(CliState)


@contextmanager
def api_client(ctx: typer.Context) -> Iterator[BackupClient]:
    """
    Build a BackupClient for the current command and close it afterwards.

    Usage:
        with api_client(ctx) as client:
            server = client.servers.get(server_id)

    Raises:
        ConfigurationError: If the config file is unusable
        ValidationError: If host or credentials are missing
    """
    state = get_state(ctx)
    config = state.resolve()

    log_with_source(
        logger,
        "cli",
        "debug",
        "Building API client",
        host=config.host,
        access_key=config.access_key,
        timeout=config.timeout,
    )

    client = BackupClient(
        config.host,
        config.access_key,
        config.secret_key,
        timeout=config.timeout,
        transport=state.transport,
    )
    try:
        yield client
    finally:
        client.close()
