from typing import NamedTuple


class EncryptedPassword(NamedTuple):
    """Everything needed to check a password against its derived key."""

    salt: str
    derived_key: str
    derived_key_length: int | None
    iterations: int | None
