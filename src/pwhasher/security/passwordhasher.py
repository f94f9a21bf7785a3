# third-party imports
from loguru import logger

# built-in imports
from base64 import b64encode
from concurrent.futures import Executor
from hmac import compare_digest
from typing import Any

# local imports
from ..str import uid
from .codec import (
    deserialize_encrypted_password,
    serialize_encrypted_password,
    validate_encrypted_password,
)
from .containers import EncryptedPassword
from .exceptions import MalformedRecordError
from .kdf import KeyDerivation
from .types import HasherOptions

DEFAULT_OPTIONS: HasherOptions = {
    "iterations": 10000,
    "salt_length": 12,
    "derived_key_length": 30,
    "digest": "sha512",
}


class PasswordHasher:

    uid = staticmethod(uid)
    serialize_encrypted_password = staticmethod(serialize_encrypted_password)
    deserialize_encrypted_password = staticmethod(deserialize_encrypted_password)

    def __init__(
        self, options: HasherOptions | None = None, executor: Executor | None = None
    ) -> None:
        """Encrypt passwords with PBKDF2 and check passwords against them.

        The options only apply to newly encrypted passwords. Encrypted passwords
        carry their own salt, iterations and derived key length, so they can
        still be checked after the options change.

        Args:
            options (HasherOptions | None, optional): iterations, salt_length,
                derived_key_length and digest. Missing options use
                DEFAULT_OPTIONS. Defaults to None.
            executor (Executor | None, optional): Executor for the asynchronous
                methods. If None, the event loop's default executor is used.
                Defaults to None.

        Raises:
            ValueError: If iterations, salt_length or derived_key_length is not
                a positive integer.
        """
        options = options or {}

        resolved: dict[str, Any] = {
            key: default if options.get(key) is None else options[key]
            for key, default in DEFAULT_OPTIONS.items()
        }

        for key in ("iterations", "salt_length", "derived_key_length"):
            value = resolved[key]
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{key} must be a positive integer, got {value!r}.")

        self._iterations: int = resolved["iterations"]
        self._salt_length: int = resolved["salt_length"]
        self._derived_key_length: int = resolved["derived_key_length"]
        self._digest: str = resolved["digest"]
        self._executor = executor

        logger.debug(
            f"Password hasher using {self._digest}, {self._iterations} iterations,"
            f" {self._salt_length} character salts and {self._derived_key_length}"
            " byte derived keys."
        )

    @property
    def iterations(self) -> int:
        return self._iterations

    @iterations.setter
    def iterations(self, _: Any) -> None:
        raise AttributeError("Hasher options can't be changed. Create a new hasher.")

    @property
    def salt_length(self) -> int:
        return self._salt_length

    @salt_length.setter
    def salt_length(self, _: Any) -> None:
        raise AttributeError("Hasher options can't be changed. Create a new hasher.")

    @property
    def derived_key_length(self) -> int:
        return self._derived_key_length

    @derived_key_length.setter
    def derived_key_length(self, _: Any) -> None:
        raise AttributeError("Hasher options can't be changed. Create a new hasher.")

    @property
    def digest(self) -> str:
        return self._digest

    @digest.setter
    def digest(self, _: Any) -> None:
        raise AttributeError("Hasher options can't be changed. Create a new hasher.")

    @property
    def options(self) -> HasherOptions:
        return {
            "iterations": self._iterations,
            "salt_length": self._salt_length,
            "derived_key_length": self._derived_key_length,
            "digest": self._digest,
        }

    def _serialize(self, salt: str, derived_key: bytes) -> str:
        return serialize_encrypted_password(
            EncryptedPassword(
                salt=salt,
                derived_key=b64encode(derived_key).decode("ascii"),
                derived_key_length=self._derived_key_length,
                iterations=self._iterations,
            )
        )

    @classmethod
    def _load(cls, encrypted_password: str) -> EncryptedPassword:
        if not isinstance(encrypted_password, str):
            raise MalformedRecordError(encrypted_password, "not a string")
        return validate_encrypted_password(
            deserialize_encrypted_password(encrypted_password), encrypted_password
        )

    @classmethod
    def _matches(cls, derived_key: bytes, record: EncryptedPassword) -> bool:
        return compare_digest(
            b64encode(derived_key), record.derived_key.encode("utf-8")
        )

    def encrypt_password_sync(self, password: str) -> str:
        """Encrypt a password, blocking the calling thread.

        Args:
            password (str): The password.

        Raises:
            KeyDerivationError: If the key derivation fails.

        Returns:
            str: The serialized encrypted password.
        """
        salt = uid(self._salt_length)
        derived_key = KeyDerivation.derive(
            password, salt, self._iterations, self._derived_key_length, self._digest
        )
        return self._serialize(salt, derived_key)

    async def encrypt_password(self, password: str) -> str:
        """Encrypt a password in a worker thread.

        Args:
            password (str): The password.

        Raises:
            KeyDerivationError: If the key derivation fails.

        Returns:
            str: The serialized encrypted password.
        """
        salt = uid(self._salt_length)
        derived_key = await KeyDerivation.derive_async(
            password,
            salt,
            self._iterations,
            self._derived_key_length,
            self._digest,
            executor=self._executor,
        )
        return self._serialize(salt, derived_key)

    def check_password_sync(self, password: str, encrypted_password: str) -> bool:
        """Check a password against an encrypted password, blocking the calling thread.

        The encrypted password's own salt, iterations and derived key length are
        used, with this hasher's digest.

        Args:
            password (str): The password to check.
            encrypted_password (str): The serialized encrypted password.

        Raises:
            MalformedRecordError: If encrypted_password doesn't have the right
                format.
            KeyDerivationError: If the key derivation fails.

        Returns:
            bool: Whether the password matches.
        """
        record = self._load(encrypted_password)
        derived_key = KeyDerivation.derive(
            password,
            record.salt,
            record.iterations,
            record.derived_key_length,
            self._digest,
        )
        return self._matches(derived_key, record)

    async def check_password(self, password: str, encrypted_password: str) -> bool:
        """Check a password against an encrypted password in a worker thread.

        The encrypted password's own salt, iterations and derived key length are
        used, with this hasher's digest.

        Args:
            password (str): The password to check.
            encrypted_password (str): The serialized encrypted password.

        Raises:
            MalformedRecordError: If encrypted_password doesn't have the right
                format.
            KeyDerivationError: If the key derivation fails.

        Returns:
            bool: Whether the password matches.
        """
        record = self._load(encrypted_password)
        derived_key = await KeyDerivation.derive_async(
            password,
            record.salt,
            record.iterations,
            record.derived_key_length,
            self._digest,
            executor=self._executor,
        )
        return self._matches(derived_key, record)

    def needs_rehash(self, encrypted_password: str) -> bool:
        """Whether an encrypted password was made with weaker options than these.

        Args:
            encrypted_password (str): The serialized encrypted password.

        Raises:
            MalformedRecordError: If encrypted_password doesn't have the right
                format.

        Returns:
            bool: True if its iterations, derived key length or salt length is
                below this hasher's.
        """
        record = self._load(encrypted_password)
        return (
            record.iterations < self._iterations
            or record.derived_key_length < self._derived_key_length
            or len(record.salt) < self._salt_length
        )
