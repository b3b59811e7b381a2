"""
CLI Module.

Command-line client built with Typer for the backup-management API.

Architecture:
- CLI is a thin presentation layer
- All API logic lives in cloudbackup.api
- One BackupClient is built per invocation and closed when the command ends

Usage:
    cloudbackup-cli --help
    cloudbackup-cli server info --server-id 12
    cloudbackup-cli storage new --name s3 --storage-type s3 ...
"""
