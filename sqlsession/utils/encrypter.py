"""
Encryption utilities for sqlsession configuration values.

Sensitive property values (typically data source passwords) may be stored
in configuration documents as ``ENC(<fernet token>)``. The parser decrypts
them with the key found by ConfigEncrypter.
"""
import os
import re
import logging

from pathlib import Path
from typing import Optional, Union
from cryptography.fernet import Fernet, InvalidToken

from sqlsession.core.common import ConfigError

logger = logging.getLogger(__name__)

SECRET_KEY_ENV = "SQLSESSION_SECRET_KEY"
DEFAULT_KEY_PATH = Path.home() / ".sqlsession" / "secret.key"

_ENCRYPTED_VALUE = re.compile(r"^ENC\((?P<token>.+)\)$", re.DOTALL)


def generate_key() -> str:
    """
    Generates a new random encryption key.

    Returns:
        Encryption key in base64 format
    """
    key = Fernet.generate_key()
    return key.decode()


def is_encrypted(value: str) -> bool:
    """Returns True if the value uses the ``ENC(...)`` notation."""
    return bool(_ENCRYPTED_VALUE.match(value.strip()))


class ConfigEncrypter:
    """
    Encrypts and decrypts configuration values with a Fernet key.

    The key is taken, in order, from the ``key`` argument, the
    ``SQLSESSION_SECRET_KEY`` environment variable, and the key file
    (``~/.sqlsession/secret.key`` unless ``key_path`` is given).
    """

    def __init__(self, key: Optional[Union[str, bytes]] = None,
                 key_path: Optional[Union[str, Path]] = None):
        """
        Initializes the encrypter.

        Args:
            key: Explicit Fernet key
            key_path: Path to the key file
        """
        self.key_path = Path(key_path) if key_path else DEFAULT_KEY_PATH
        self.cipher = None
        self._init_cipher(key)

    def _init_cipher(self, key: Optional[Union[str, bytes]]) -> None:
        """Loads the key from the first available source."""
        if not key:
            key = os.environ.get(SECRET_KEY_ENV)
            if key:
                logger.debug(f"Key loaded from environment variable {SECRET_KEY_ENV}")
        if not key and self.key_path.exists():
            with open(self.key_path, 'rb') as f:
                key = f.read().strip()
            logger.debug(f"Key loaded from {self.key_path}")

        if not key:
            return

        if isinstance(key, str):
            key = key.encode()
        try:
            self.cipher = Fernet(key)
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Invalid encryption key: {e}") from e

    def _require_cipher(self) -> Fernet:
        if self.cipher is None:
            raise ConfigError(
                f"No encryption key available. Set {SECRET_KEY_ENV} "
                f"or create the key file {self.key_path}"
            )
        return self.cipher

    def encrypt_value(self, value: str) -> str:
        """
        Encrypts a plain value.

        Args:
            value: Plain text value

        Returns:
            Value in ``ENC(...)`` notation
        """
        token = self._require_cipher().encrypt(value.encode()).decode()
        return f"ENC({token})"

    def decrypt_value(self, value: str) -> str:
        """
        Decrypts a value in ``ENC(...)`` notation.

        Args:
            value: Encrypted value

        Returns:
            Plain text value
        """
        match = _ENCRYPTED_VALUE.match(value.strip())
        if not match:
            raise ConfigError("Value is not in ENC(...) notation")

        cipher = self._require_cipher()
        try:
            return cipher.decrypt(match.group("token").encode()).decode()
        except InvalidToken as e:
            logger.error("Invalid token or corrupted data")
            raise ConfigError("Value cannot be decrypted: invalid token or wrong key") from e

    @staticmethod
    def generate_key_file(key_path: Union[str, Path]) -> Path:
        """
        Generates and saves a new key to a file.

        Args:
            key_path: Path to save the key

        Returns:
            Path of the key file
        """
        key_path = Path(key_path)
        if key_path.exists():
            raise ConfigError(f"Key file already exists: {key_path}")

        key_path.parent.mkdir(parents=True, exist_ok=True)

        with open(key_path, 'wb') as f:
            f.write(Fernet.generate_key())

        # Owner read/write only
        try:
            os.chmod(key_path, 0o600)
        except OSError as e:
            logger.warning(f"Could not set permissions on key file: {e}")

        return key_path
