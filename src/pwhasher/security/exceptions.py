"""Exceptions raised by the password hasher."""

from typing import Any


class PasswordHasherError(Exception):
    """Base exception for all password hashing errors."""


class KeyDerivationError(PasswordHasherError):
    """Raised when the key derivation function rejects its parameters."""


class UnsupportedDigestError(KeyDerivationError):
    """Raised when a digest name has no matching hash algorithm."""

    def __init__(self, digest: Any):
        self.digest = digest
        super().__init__(f"Unsupported digest: {digest!r}")


class MalformedRecordError(PasswordHasherError, TypeError, ValueError):
    """Raised when an encrypted password doesn't have the right format.

    This is a defect of the stored data, never the outcome of a wrong password.
    """

    def __init__(self, record: Any, reason: str = "missing or invalid fields"):
        self.record = record
        super().__init__(f"encrypted password doesn't have the right format: {reason}")
