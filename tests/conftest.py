"""
Shared pytest fixtures for all tests.

Provides reusable fixtures for:
- Configuration documents
- Stream doubles that record close() calls
- Secret keys for encrypted values
"""

import io
import pytest
from typing import Optional, Union

from cryptography.fernet import Fernet


DEV_CONFIG = """<configuration>
  <settings>
    <setting name="defaultStatementTimeout" value="${timeout:25}"/>
    <setting name="cacheEnabled" value="false"/>
  </settings>
  <environments default="dev">
    <environment id="dev">
      <transactionManager type="JDBC"/>
      <dataSource type="POOLED">
        <property name="url" value="sqlite://"/>
      </dataSource>
    </environment>
    <environment id="test">
      <transactionManager type="MANAGED"/>
      <dataSource type="UNPOOLED">
        <property name="url" value="${test_url:sqlite://}"/>
      </dataSource>
    </environment>
  </environments>
  <mappers>
    <mapper resource="mappers/user.xml"/>
  </mappers>
</configuration>
"""


class RecordingStream:
    """
    Stream double recording close() calls.

    Reads from an in-memory buffer (bytes or text), and can be told to
    fail on read() or on close().
    """

    def __init__(self, data: Union[str, bytes],
                 read_error: Optional[Exception] = None,
                 close_error: Optional[Exception] = None,
                 events: Optional[list] = None):
        self._buffer = io.BytesIO(data) if isinstance(data, bytes) else io.StringIO(data)
        self.read_error = read_error
        self.close_error = close_error
        self.close_calls = 0
        self.events = events if events is not None else []

    def read(self, *args):
        if self.read_error is not None:
            raise self.read_error
        return self._buffer.read(*args)

    def close(self):
        self.close_calls += 1
        self.events.append("close")
        if self.close_error is not None:
            raise self.close_error


@pytest.fixture
def dev_config() -> str:
    """Configuration document with a 'dev' (default) and a 'test' environment."""
    return DEV_CONFIG


@pytest.fixture
def stream_factory():
    """Factory creating RecordingStream instances."""
    def _create(data: Union[str, bytes] = DEV_CONFIG, **kwargs) -> RecordingStream:
        return RecordingStream(data, **kwargs)
    return _create


@pytest.fixture
def secret_key() -> str:
    """Fresh Fernet key."""
    return Fernet.generate_key().decode()


@pytest.fixture(autouse=True)
def isolated_secret_key(monkeypatch, tmp_path):
    """Keeps tests away from the user's real secret key."""
    monkeypatch.delenv("SQLSESSION_SECRET_KEY", raising=False)
    monkeypatch.setattr("sqlsession.utils.encrypter.DEFAULT_KEY_PATH", tmp_path / "missing" / "secret.key")
