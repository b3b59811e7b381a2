#!/usr/bin/env python3
"""
Cloud backup CLI.

Entry point for running the CLI from a source checkout. Installed
packages provide the `cloudbackup-cli` console script instead.

Usage:
    python cli.py --help
    python cli.py server info --server-id 12
    python cli.py --debug backup keys
"""

from cloudbackup.cli.main import app

if __name__ == "__main__":
    app()
