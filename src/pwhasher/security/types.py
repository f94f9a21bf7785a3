from typing import Literal, TypedDict

Digest = Literal[
    "sha1",
    "sha224",
    "sha256",
    "sha384",
    "sha512",
    "sha512_224",
    "sha512_256",
    "sha3_224",
    "sha3_256",
    "sha3_384",
    "sha3_512",
    "md5",
]


class HasherOptions(TypedDict, total=False):
    iterations: int | None
    salt_length: int | None
    derived_key_length: int | None
    digest: Digest | str | None
