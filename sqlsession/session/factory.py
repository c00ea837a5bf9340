"""
Session factory built from a resolved Configuration.
"""
import logging
import threading
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from sqlsession.config.model import Configuration
from sqlsession.core.common import ConfigError

logger = logging.getLogger(__name__)


class SessionFactory:
    """
    Runtime entry point wrapping a Configuration.

    The configuration is fixed at construction. The SQLAlchemy engine for
    the active environment is only created when the first session is
    opened, so constructing a factory never touches the database.
    """

    def __init__(self, configuration: Configuration):
        self._configuration = configuration
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None
        self._lock = threading.Lock()

    @classmethod
    def from_configuration(cls, configuration: Configuration) -> "SessionFactory":
        """
        Wraps a configuration into a new factory.

        Args:
            configuration: Resolved configuration

        Returns:
            New SessionFactory instance
        """
        return cls(configuration)

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def open_session(self) -> Session:
        """
        Opens a new SQLAlchemy session against the active environment.

        Returns:
            New Session, to be closed by the caller

        Raises:
            ConfigError: If the configuration has no environment, or its data
                source cannot be turned into an engine
        """
        with self._lock:
            if self._sessionmaker is None:
                self._engine = self._create_engine()
                self._sessionmaker = sessionmaker(bind=self._engine)
            factory = self._sessionmaker
        return factory()

    def dispose(self) -> None:
        """Releases the engine and its pooled connections."""
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                logger.debug("Engine disposed")
            self._engine = None
            self._sessionmaker = None

    def _create_engine(self) -> Engine:
        environment = self._configuration.environment
        if environment is None:
            raise ConfigError("Cannot open a session: the configuration defines no environment")

        data_source = environment.data_source
        url = data_source.to_url()

        options = {}
        if data_source.type == "UNPOOLED":
            options["poolclass"] = NullPool
        else:
            if data_source.pool_size is not None:
                options["pool_size"] = data_source.pool_size
            if data_source.pool_timeout is not None:
                options["pool_timeout"] = data_source.pool_timeout
        if self._configuration.settings.log_prefix:
            options["logging_name"] = self._configuration.settings.log_prefix

        logger.debug(f"Creating engine for environment '{environment.id}' ({url.get_backend_name()})")
        try:
            return create_engine(url, **options)
        except (SQLAlchemyError, TypeError, ImportError) as e:
            raise ConfigError(f"Cannot create engine for environment '{environment.id}': {e}") from e

    def __repr__(self) -> str:
        environment = self._configuration.environment
        return f"SessionFactory(environment={environment.id if environment else None!r})"
