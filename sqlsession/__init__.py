"""
sqlsession.

This package builds ready-to-use SQLAlchemy session factories from XML
configuration documents, with named environments, property overrides
and encrypted values.
"""
import logging
from typing import Mapping, Optional, Union

# Basic logging configuration
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

from sqlsession.builder import SessionFactoryBuilder, ConfigurationSource
from sqlsession.config.model import Configuration
from sqlsession.config.parser import XMLConfigParser
from sqlsession.core.common import SqlSessionError, ConfigError, ConfigParseError, BuildError
from sqlsession.core.error_context import ErrorContext
from sqlsession.session.factory import SessionFactory

# Explicit export of public components
__all__ = [
    'build_session_factory',
    'SessionFactoryBuilder',
    'SessionFactory',
    'Configuration',
    'ConfigurationSource',
    'XMLConfigParser',
    'ErrorContext',
    'SqlSessionError',
    'ConfigError',
    'ConfigParseError',
    'BuildError',
    '__version__'
]

__version__ = "1.0.0"


def build_session_factory(source: ConfigurationSource,
                          environment: Optional[Union[str, Mapping[str, str]]] = None,
                          properties: Optional[Mapping[str, str]] = None) -> SessionFactory:
    """
    Builds a session factory with a default SessionFactoryBuilder.

    Args:
        source: Text stream, byte stream or resolved Configuration
        environment: Environment id to activate
        properties: Property overrides

    Returns:
        New SessionFactory
    """
    return SessionFactoryBuilder().build(source, environment, properties)
