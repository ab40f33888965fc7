"""
CLI module for safe-sqlplus.

This module provides the command-line interface that starts a sqlplus
session with credentials fetched from provider programs.
"""

from safe_sqlplus.cli.commands import main

__all__ = ["main"]
