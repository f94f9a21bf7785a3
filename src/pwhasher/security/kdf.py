# third-party imports
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from loguru import logger

# built-in imports
from asyncio import get_running_loop
from concurrent.futures import Executor
from functools import partial

# local imports
from .exceptions import KeyDerivationError, UnsupportedDigestError
from .types import Digest


class KeyDerivation:
    """PBKDF2 key derivation (https://en.wikipedia.org/wiki/PBKDF2)."""

    ALGORITHMS: dict[str, type[hashes.HashAlgorithm]] = {
        "sha1": hashes.SHA1,
        "sha224": hashes.SHA224,
        "sha256": hashes.SHA256,
        "sha384": hashes.SHA384,
        "sha512": hashes.SHA512,
        "sha512_224": hashes.SHA512_224,
        "sha512_256": hashes.SHA512_256,
        "sha3_224": hashes.SHA3_224,
        "sha3_256": hashes.SHA3_256,
        "sha3_384": hashes.SHA3_384,
        "sha3_512": hashes.SHA3_512,
        "md5": hashes.MD5,
    }

    @classmethod
    def get_algorithm(cls, digest: Digest | str) -> hashes.HashAlgorithm:
        """Get the hash algorithm for a digest name.

        Args:
            digest (Digest | str): Digest name, e.g. "sha512". Case is ignored and
                "-" may be used instead of "_".

        Raises:
            UnsupportedDigestError: If there is no such digest.

        Returns:
            hashes.HashAlgorithm: The hash algorithm.
        """
        if not isinstance(digest, str):
            raise UnsupportedDigestError(digest)
        try:
            return cls.ALGORITHMS[digest.lower().replace("-", "_")]()
        except KeyError as e:
            raise UnsupportedDigestError(digest) from e

    @classmethod
    def get_kdf(
        cls, salt: bytes, iterations: int, key_length: int, digest: Digest | str
    ) -> PBKDF2HMAC:
        """Get a single-use PBKDF2HMAC instance.

        Args:
            salt (bytes): The salt.
            iterations (int): Number of iterations.
            key_length (int): Length of the derived key in bytes.
            digest (Digest | str): Digest of the underlying HMAC.

        Raises:
            KeyDerivationError: If a parameter is invalid or the digest is not
                supported.

        Returns:
            PBKDF2HMAC: The key derivation function.
        """
        for name, value in (("iterations", iterations), ("key_length", key_length)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise KeyDerivationError(
                    f"{name} must be a positive integer, got {value!r}."
                )

        algorithm = cls.get_algorithm(digest)

        try:
            return PBKDF2HMAC(
                algorithm=algorithm,
                length=key_length,
                salt=salt,
                iterations=iterations,
            )
        except UnsupportedAlgorithm as e:
            raise UnsupportedDigestError(digest) from e
        except (ValueError, TypeError, OverflowError) as e:
            raise KeyDerivationError(str(e)) from e

    @classmethod
    def derive(
        cls,
        password: str | bytes,
        salt: str | bytes,
        iterations: int,
        key_length: int,
        digest: Digest | str,
    ) -> bytes:
        """Derive a key from a password, blocking the calling thread.

        Args:
            password (str | bytes): The password. str is UTF-8 encoded.
            salt (str | bytes): The salt. str is UTF-8 encoded.
            iterations (int): Number of iterations.
            key_length (int): Length of the derived key in bytes.
            digest (Digest | str): Digest of the underlying HMAC.

        Raises:
            KeyDerivationError: If the derivation fails.

        Returns:
            bytes: The derived key, exactly key_length bytes.
        """
        kdf = cls.get_kdf(
            salt.encode("utf-8") if isinstance(salt, str) else salt,
            iterations,
            key_length,
            digest,
        )

        logger.debug(
            f"Deriving {key_length} byte key with {digest} and {iterations} iterations."
        )

        try:
            return kdf.derive(
                password.encode("utf-8") if isinstance(password, str) else password
            )
        except (ValueError, TypeError) as e:
            raise KeyDerivationError(str(e)) from e

    @classmethod
    async def derive_async(
        cls,
        password: str | bytes,
        salt: str | bytes,
        iterations: int,
        key_length: int,
        digest: Digest | str,
        executor: Executor | None = None,
    ) -> bytes:
        """Derive a key from a password in a worker thread.

        Args:
            password (str | bytes): The password. str is UTF-8 encoded.
            salt (str | bytes): The salt. str is UTF-8 encoded.
            iterations (int): Number of iterations.
            key_length (int): Length of the derived key in bytes.
            digest (Digest | str): Digest of the underlying HMAC.
            executor (Executor | None, optional): Executor to run the derivation
                in. If None, the event loop's default executor is used.
                Defaults to None.

        Raises:
            KeyDerivationError: If the derivation fails.

        Returns:
            bytes: The derived key, exactly key_length bytes.
        """
        return await get_running_loop().run_in_executor(
            executor,
            partial(cls.derive, password, salt, iterations, key_length, digest),
        )
