"""
Core functionalities shared across the sqlsession package.

This module contains common elements used throughout the package, including:
- The package logger
- Common type definitions and aliases
- Custom exceptions for uniform error handling
- The exception wrapping helper used at the build boundary

These elements provide a common foundation for the builder, the
configuration parser and the session factory.
"""
import logging
from typing import Dict, Any, Optional

from sqlsession.core.error_context import ErrorContext

# Global logging configuration
logger = logging.getLogger("sqlsession")
logger.addHandler(logging.NullHandler())

# Type aliases to improve readability
PropertiesDict = Dict[str, str]
"""
Type representing a flat set of configuration properties.

Example:
```python
properties: PropertiesDict = {
    "url": "postgresql://localhost/app",
    "username": "app",
    "timeout": "30"
}
```
"""


class SqlSessionError(Exception):
    """
    Base exception for all sqlsession errors.

    All other specific exceptions inherit from this class,
    allowing you to catch any package error with a single
    except block.

    Example:
    ```python
    try:
        factory = build_session_factory(open("sqlsession.xml"))
    except SqlSessionError as e:
        print(f"sqlsession error: {e}")
    ```
    """
    pass


class ConfigError(SqlSessionError):
    """
    Error related to the configuration content or its use.

    Raised when a configuration is missing something the caller needs,
    such as an environment to open sessions against, or a secret key
    to decrypt an encrypted property.
    """
    pass


class ConfigParseError(ConfigError):
    """
    Error raised by the XML configuration parser.

    Raised for malformed documents, unknown elements, unresolved
    ``${...}`` references, unknown environments and invalid values.
    The low-level failure, when there is one, is chained as ``__cause__``.
    """
    pass


class BuildError(SqlSessionError):
    """
    Error raised when a session factory cannot be built.

    This is the only error the builder lets escape for stream sources.
    The original failure is preserved in ``cause`` (and ``__cause__``)
    for diagnostics.

    Example:
    ```python
    try:
        factory = SessionFactoryBuilder().build(stream, "dev")
    except BuildError as e:
        print(f"Build failed: {e}")
        print(f"Underlying error: {e.cause!r}")
    ```
    """
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        """
        Initialize a BuildError exception.

        Args:
            message: Descriptive error message
            cause: The original failure that prevented the build
        """
        self.cause = cause
        super().__init__(message)


def wrap_exception(message: str, error: BaseException) -> BuildError:
    """
    Wraps any failure into a BuildError carrying the current error context.

    The message of the returned error starts with ``message`` and is followed
    by whatever the calling thread's ErrorContext knows about where the
    failure happened.

    Args:
        message: Fixed human-readable prefix
        error: Original failure

    Returns:
        BuildError ready to be raised
    """
    context = ErrorContext.instance().message(message).cause(error)
    return BuildError(str(context), cause=error)


def describe(value: Any) -> str:
    """Short description of a configuration source for log messages."""
    name = getattr(value, "name", None)
    if isinstance(name, str) and name:
        return name
    return f"<{type(value).__name__}>"
