from base64 import b64encode
from os import urandom


def uid(length: int) -> str:
    """Generates a random string of exactly length characters.

    The characters are the standard base64 encoding of length random bytes,
    truncated to length. The result never contains padding or ":".

    Args:
        length (int): Number of characters to return. Must be positive.

    Raises:
        ValueError: If length is not a positive integer.

    Returns:
        str: The random string.
    """
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise ValueError(f"length must be a positive integer, got {length!r}.")

    return b64encode(urandom(length)).decode("ascii")[:length]
