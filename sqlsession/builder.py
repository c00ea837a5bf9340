"""
Session factory builder.

Turns a configuration source into a ready-to-use SessionFactory. A source
is either an open text or byte stream holding an XML configuration
document, or an already resolved Configuration.
"""
import logging
from collections import abc
from contextlib import contextmanager
from typing import IO, Iterator, Mapping, Optional, Type, Union

from sqlsession.config.model import Configuration
from sqlsession.config.parser import XMLConfigParser
from sqlsession.core.common import describe, wrap_exception
from sqlsession.core.error_context import ErrorContext
from sqlsession.session.factory import SessionFactory

logger = logging.getLogger(__name__)

BUILD_ERROR_MESSAGE = "Error building session factory."

ConfigurationSource = Union[IO[str], IO[bytes], Configuration]


@contextmanager
def _closing_quietly(stream: IO) -> Iterator[IO]:
    """Closes the stream on exit and discards any error raised by close()."""
    try:
        yield stream
    finally:
        try:
            stream.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing {describe(stream)}: {e!r}")


class SessionFactoryBuilder:
    """
    Builds SessionFactory instances from configuration sources.

    The builder keeps no state between calls, so a single instance can be
    shared freely across threads.

    Example:
        ```python
        from sqlsession import SessionFactoryBuilder

        with open("sqlsession.xml", "rb") as stream:
            factory = SessionFactoryBuilder().build(stream, "dev", {"timeout": "30"})

        session = factory.open_session()
        ```
    """

    def __init__(self, parser_class: Type[XMLConfigParser] = XMLConfigParser):
        """
        Initializes the builder.

        Args:
            parser_class: Parser used for stream sources
        """
        self._parser_class = parser_class

    def build(self, source: ConfigurationSource,
              environment: Optional[Union[str, Mapping[str, str]]] = None,
              properties: Optional[Mapping[str, str]] = None) -> SessionFactory:
        """
        Builds a session factory.

        A mapping passed in place of ``environment`` is taken as the
        property overrides, so ``build(stream, {"timeout": "30"})`` works
        like ``build(stream, properties={"timeout": "30"})``.

        Stream sources are always closed before this method returns or
        raises, and the calling thread's ErrorContext is always reset
        (before the stream is closed).

        Args:
            source: Text stream, byte stream or resolved Configuration
            environment: Environment id to activate (the document's default if None)
            properties: Overrides applied on top of the document's properties

        Returns:
            New SessionFactory

        Raises:
            BuildError: If the configuration stream cannot be parsed
            TypeError: If the source is not a stream or a Configuration, or
                if options are passed together with a Configuration
        """
        if isinstance(environment, abc.Mapping):
            if properties is not None:
                raise TypeError("Property overrides given twice")
            environment, properties = None, environment

        if isinstance(source, Configuration):
            if environment is not None or properties is not None:
                raise TypeError("A resolved Configuration takes no environment or property overrides")
            return SessionFactory.from_configuration(source)

        if source is None or not hasattr(source, "read"):
            raise TypeError(f"Expected a readable stream or a Configuration, got {type(source).__name__}")

        logger.debug(f"Building session factory from {describe(source)} (environment={environment!r})")
        with _closing_quietly(source):
            try:
                parser = self._parser_class(source, environment, properties)
                factory = self.build(parser.parse())
            except Exception as e:
                raise wrap_exception(BUILD_ERROR_MESSAGE, e) from e
            finally:
                ErrorContext.instance().reset()

        logger.info(f"Session factory built from {describe(source)}")
        return factory
