"""Serialization of encrypted passwords into a single storable string.

The format is ``salt::derivedKey::derivedKeyLength::iterations``. Records
written with older settings must stay readable, so the format never changes.
"""

from base64 import b64decode
from binascii import Error as Base64Error
from collections.abc import Mapping
from re import compile as re_compile
from typing import Any

from .containers import EncryptedPassword
from .exceptions import MalformedRecordError

DELIMITER = "::"

# leading integer, surrounding junk ignored
_LEADING_INTEGER = re_compile(r"\s*([+-]?[0-9]+)")
_POSITIVE_INTEGER = re_compile(r"[0-9]+")
# salts are truncated base64, so only the alphabet can be checked
_SALT = re_compile(r"[A-Za-z0-9+/]+")


def serialize_encrypted_password(
    encrypted_password: EncryptedPassword | Mapping[str, Any],
) -> str:
    """Serialize an encrypted password into a string.

    Args:
        encrypted_password (EncryptedPassword | Mapping[str, Any]): The record, or
            a mapping with the keys salt, derived_key, derived_key_length and
            iterations.

    Returns:
        str: The serialized record.
    """
    if isinstance(encrypted_password, Mapping):
        encrypted_password = EncryptedPassword(
            salt=encrypted_password["salt"],
            derived_key=encrypted_password["derived_key"],
            derived_key_length=encrypted_password["derived_key_length"],
            iterations=encrypted_password["iterations"],
        )

    return DELIMITER.join(str(field) for field in encrypted_password)


def _parse_int(value: str | None) -> int | None:
    match = None if value is None else _LEADING_INTEGER.match(value)
    return None if match is None else int(match.group(1), 10)


def deserialize_encrypted_password(
    encrypted_password: str, strict: bool = False
) -> EncryptedPassword:
    """Deserialize a string into an encrypted password.

    By default, parsing is permissive: missing text fields become empty strings,
    number fields are read from their leading digits ("10000\\n" is 10000) and
    become None when there are none. Callers that want corrupt data rejected at
    this point can pass strict=True.

    Args:
        encrypted_password (str): The serialized record.
        strict (bool, optional): Raise on anything but four well-formed fields.
            Defaults to False.

    Raises:
        MalformedRecordError: In strict mode, if the record is not well-formed.

    Returns:
        EncryptedPassword: The record.
    """
    items = encrypted_password.split(DELIMITER)

    def item(index: int) -> str | None:
        return items[index] if index < len(items) else None

    record = EncryptedPassword(
        salt=item(0) or "",
        derived_key=item(1) or "",
        derived_key_length=_parse_int(item(2)),
        iterations=_parse_int(item(3)),
    )

    if strict:
        if len(items) != 4:
            raise MalformedRecordError(
                encrypted_password, f"expected 4 fields, got {len(items)}"
            )
        for index in (2, 3):
            if not _POSITIVE_INTEGER.fullmatch(items[index]):
                raise MalformedRecordError(
                    encrypted_password, f"invalid number {items[index]!r}"
                )
        validate_encrypted_password(record, encrypted_password)
        if not _SALT.fullmatch(record.salt):
            raise MalformedRecordError(encrypted_password, "invalid salt")
        try:
            b64decode(record.derived_key, validate=True)
        except Base64Error as e:
            raise MalformedRecordError(encrypted_password, "invalid base64") from e

    return record


def validate_encrypted_password(
    record: EncryptedPassword, original: Any = None
) -> EncryptedPassword:
    """Check that a record carries every parameter needed to verify it.

    Args:
        record (EncryptedPassword): The deserialized record.
        original (Any, optional): What the record was read from, attached to the
            raised error. Defaults to the record itself.

    Raises:
        MalformedRecordError: If a field is missing, empty or not positive, or
            if the derived key is not as long as derived_key_length says.

    Returns:
        EncryptedPassword: The record, unchanged.
    """
    original = record if original is None else original

    if not record.salt or not record.derived_key:
        raise MalformedRecordError(original, "missing salt or derived key")
    for name in ("derived_key_length", "iterations"):
        value = getattr(record, name)
        if value is None or value <= 0:
            raise MalformedRecordError(original, f"invalid {name}")

    # padded base64 of n bytes is 4 * ceil(n / 3) characters
    if len(record.derived_key) != 4 * ((record.derived_key_length + 2) // 3):
        raise MalformedRecordError(
            original,
            f"derived key doesn't hold {record.derived_key_length} bytes",
        )
    return record
