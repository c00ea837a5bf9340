"""
Command-line interface for sqlsession.

This module provides a command-line interface to check configuration
files, inspect the resolved configuration and manage encrypted values.
"""
from sqlsession.cli.commands import main_cli
from sqlsession.cli.utils import print_colored

# Explicit export of public components
__all__ = [
    'main_cli',
    'print_colored',
]
