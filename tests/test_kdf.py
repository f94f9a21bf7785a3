"""Tests for PBKDF2 key derivation."""

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from pwhasher.security.exceptions import KeyDerivationError, UnsupportedDigestError
from pwhasher.security.kdf import KeyDerivation


class TestDerive:
    @pytest.mark.parametrize(
        "iterations, expected",
        [
            (1, "0c60c80f961f0e71f3a9b524af6012062fe037a6"),
            (2, "ea6c014dc72d6f8ccd1ed92ace1d41f0d8de8957"),
            (4096, "4b007901b765489abead49d926f721d065a429c1"),
        ],
    )
    def test_rfc6070_vectors(self, iterations, expected):
        key = KeyDerivation.derive("password", "salt", iterations, 20, "sha1")
        assert key.hex() == expected

    def test_deterministic(self):
        k1 = KeyDerivation.derive("pw", b"salt", 100, 30, "sha512")
        k2 = KeyDerivation.derive("pw", b"salt", 100, 30, "sha512")
        assert k1 == k2

    def test_str_and_bytes_inputs_agree(self):
        assert KeyDerivation.derive("pässword", "sält", 10, 16, "sha256") == (
            KeyDerivation.derive(
                "pässword".encode("utf-8"), "sält".encode("utf-8"), 10, 16, "sha256"
            )
        )

    @pytest.mark.parametrize("length", [1, 30, 64, 100])
    def test_output_length(self, length):
        assert len(KeyDerivation.derive("pw", "salt", 10, length, "sha512")) == length

    def test_parameters_change_output(self):
        base = KeyDerivation.derive("pw", "salt", 10, 30, "sha512")
        assert KeyDerivation.derive("pw", "salt", 11, 30, "sha512") != base
        assert KeyDerivation.derive("pw", "salt2", 10, 30, "sha512") != base
        assert KeyDerivation.derive("pw2", "salt", 10, 30, "sha512") != base
        assert KeyDerivation.derive("pw", "salt", 10, 30, "sha256") != base


class TestDigests:
    @pytest.mark.parametrize("digest", ["sha512", "SHA512", "sha3-256", "sha3_256"])
    def test_name_normalization(self, digest):
        assert KeyDerivation.get_algorithm(digest).name.replace("-", "_") in (
            "sha512",
            "sha3_256",
        )

    @pytest.mark.parametrize("digest", ["whirlpool", "", None, 512])
    def test_unsupported_digest(self, digest):
        with pytest.raises(UnsupportedDigestError) as exc_info:
            KeyDerivation.derive("pw", "salt", 10, 30, digest)
        assert exc_info.value.digest == digest

    def test_unsupported_digest_is_kdf_error(self):
        with pytest.raises(KeyDerivationError):
            KeyDerivation.derive("pw", "salt", 10, 30, "whirlpool")


class TestInvalidParameters:
    @pytest.mark.parametrize("iterations", [0, -1, 1.5, None, True])
    def test_invalid_iterations(self, iterations):
        with pytest.raises(KeyDerivationError):
            KeyDerivation.derive("pw", "salt", iterations, 30, "sha512")

    @pytest.mark.parametrize("key_length", [0, -30, "30", None])
    def test_invalid_key_length(self, key_length):
        with pytest.raises(KeyDerivationError):
            KeyDerivation.derive("pw", "salt", 10, key_length, "sha512")


class TestDeriveAsync:
    def test_matches_blocking_form(self):
        key = asyncio.run(KeyDerivation.derive_async("pw", "salt", 100, 30, "sha512"))
        assert key == KeyDerivation.derive("pw", "salt", 100, 30, "sha512")

    def test_concurrent_calls_are_independent(self):
        async def main():
            return await asyncio.gather(
                *(
                    KeyDerivation.derive_async(f"pw{i}", "salt", 100, 30, "sha512")
                    for i in range(8)
                )
            )

        keys = asyncio.run(main())
        assert keys == [
            KeyDerivation.derive(f"pw{i}", "salt", 100, 30, "sha512") for i in range(8)
        ]

    def test_custom_executor(self):
        with ThreadPoolExecutor(max_workers=2) as executor:
            key = asyncio.run(
                KeyDerivation.derive_async(
                    "pw", "salt", 100, 30, "sha512", executor=executor
                )
            )
        assert key == KeyDerivation.derive("pw", "salt", 100, 30, "sha512")

    def test_error_surfaces(self):
        with pytest.raises(UnsupportedDigestError):
            asyncio.run(KeyDerivation.derive_async("pw", "salt", 100, 30, "whirlpool"))
