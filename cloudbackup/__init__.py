"""
cloudbackup-cli.

Command-line client for a remote backup-management service.

- api/: Signed HTTP transport, response envelope parsing, resource client, records
- core/: Configuration, logging, exceptions, utilities
- cli/: Typer command-line application (Rich output)
"""

__version__ = "1.0.0"
