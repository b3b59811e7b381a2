"""
API Client Module.

Signed HTTP access to the backup-management service.

Usage:
    from cloudbackup.api import BackupClient, Schedule, ScheduleType

    with BackupClient(host, access_key, secret_key) as client:
        schedule = client.schedules.create(
            Schedule(name="nightly", schedule_type=ScheduleType.DAILY, schedule_hours="03:00")
        )
"""

from cloudbackup.api.client import BackupClient, normalize_host
from cloudbackup.api.models import (
    DatabaseType,
    Record,
    Retention,
    RetentionType,
    Schedule,
    ScheduleType,
    Server,
    Storage,
    StorageType,
)
from cloudbackup.api.signer import Credentials, Signer

__all__ = [
    "BackupClient",
    "Credentials",
    "DatabaseType",
    "Record",
    "Retention",
    "RetentionType",
    "Schedule",
    "ScheduleType",
    "Server",
    "Signer",
    "Storage",
    "StorageType",
    "normalize_host",
]
