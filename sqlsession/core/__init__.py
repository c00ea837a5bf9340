"""
sqlsession core components.

This package contains the logger, the exception hierarchy and the
per-thread diagnostic context shared by the rest of the package.
"""
from sqlsession.core.error_context import ErrorContext
from sqlsession.core.common import (
    logger,
    PropertiesDict,
    SqlSessionError,
    ConfigError,
    ConfigParseError,
    BuildError,
    wrap_exception,
)

# Explicit export of public components
__all__ = [
    'ErrorContext',
    'logger',
    'PropertiesDict',
    'SqlSessionError',
    'ConfigError',
    'ConfigParseError',
    'BuildError',
    'wrap_exception',
]
