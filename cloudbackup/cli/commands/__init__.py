"""
CLI Commands.

One command group per resource kind, plus backups and system information.
"""

from cloudbackup.cli.commands.backup import app as backup_app
from cloudbackup.cli.commands.retention import app as retention_app
from cloudbackup.cli.commands.schedule import app as schedule_app
from cloudbackup.cli.commands.server import app as server_app
from cloudbackup.cli.commands.storage import app as storage_app
from cloudbackup.cli.commands.system import app as system_app

__all__ = [
    "backup_app",
    "retention_app",
    "schedule_app",
    "server_app",
    "storage_app",
    "system_app",
]
