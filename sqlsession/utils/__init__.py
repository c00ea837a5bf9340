"""
General utilities for sqlsession.

This package provides utilities shared by different components,
such as value encryption and logging setup.
"""
from sqlsession.utils.encrypter import (
    ConfigEncrypter,
    generate_key,
    is_encrypted,
)
from sqlsession.utils.logging import setup_logger

# Explicit export of public components
__all__ = [
    'ConfigEncrypter',
    'generate_key',
    'is_encrypted',
    'setup_logger',
]
