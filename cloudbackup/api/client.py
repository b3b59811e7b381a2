"""
Backup Service Client.

Entry point to the API: holds the credentials, the normalized endpoint and
one resource accessor per kind.

Usage:
    with BackupClient("backups.example.com", access_key, secret_key) as client:
        server = client.servers.create(Server(name="db1", db_type=DatabaseType.MYSQL,
                                              db_host="localhost", db_port="3306"))
        client.servers.delete(server.id)
"""

import posixpath
from typing import Any

import httpx

from cloudbackup.api.envelope import parse_payload
from cloudbackup.api.resources import (
    RetentionResource,
    ScheduleResource,
    ServerResource,
    StorageResource,
    operation_context,
)
from cloudbackup.api.signer import Credentials, Signer
from cloudbackup.api.transport import DEFAULT_TIMEOUT_SECONDS, SignedTransport
from cloudbackup.core.exceptions import ValidationError
from cloudbackup.core.utils import mask_secret

API_PATH_SEGMENT = "api"
BACKUP_KEYS_PATH = "/backups/keys"


def normalize_host(host: str) -> str:
    """
    Turn the configured host into the API base URL.

    The scheme is always forced to https and the "api" segment is
    appended to any existing path.

    Examples:
        "backups.example.com"        -> "https://backups.example.com/api"
        "http://example.com/panel/"  -> "https://example.com/panel/api"

    Raises:
        ValidationError: If the host cannot be parsed as a URL
    """
    raw = host.strip()
    if "://" not in raw:
        raw = f"https://{raw}"

    try:
        url = httpx.URL(raw)
        path = posixpath.join(url.path or "/", API_PATH_SEGMENT)
        url = url.copy_with(scheme="https", path=path)
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid API host {host}: {e}") from e

    if not url.host:
        raise ValidationError(f"Invalid API host {host}: no host name")

    return str(url).rstrip("/")


class BackupClient:
    """
    Client for the backup-management API.

    Immutable once built: credentials, endpoint and timeout are fixed at
    construction. Safe to share, but requests are never batched or retried.
    """

    def __init__(
        self,
        host: str,
        access_key: str,
        secret_key: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            host: Host or URL of the backup control panel
            access_key: API access key
            secret_key: API secret key
            timeout: Per-request timeout in seconds
            transport: httpx transport override (tests)

        Raises:
            ValidationError: If any of host, access_key, secret_key is empty
        """
        if not host:
            raise ValidationError("API Host cannot be empty")
        if not access_key:
            raise ValidationError("API Access key cannot be empty")
        if not secret_key:
            raise ValidationError("API Access secret cannot be empty")

        self.host = normalize_host(host)
        self.credentials = Credentials(access_key=access_key, secret_key=secret_key)
        self.transport = SignedTransport(Signer(self.credentials), timeout=timeout, transport=transport)

        self.servers = ServerResource(self.transport, self.host)
        self.schedules = ScheduleResource(self.transport, self.host)
        self.retentions = RetentionResource(self.transport, self.host)
        self.storages = StorageResource(self.transport, self.host)

    def backup_keys(self) -> bytes:
        """Fetch all backup encryption keys as raw JSON bytes."""
        with operation_context("while getting backup keys"):
            response = self.transport.get(f"{self.host}{BACKUP_KEYS_PATH}")
            return parse_payload(response)

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "BackupClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"BackupClient(host={self.host!r}, access_key={self.credentials.access_key!r}, "
            f"secret_key={mask_secret(self.credentials.secret_key)!r})"
        )
