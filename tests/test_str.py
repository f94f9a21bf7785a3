"""Tests for random token generation."""

import pytest

from pwhasher.str import uid


class TestUid:
    def test_exact_length(self):
        for length in (1, 2, 3, 8, 12, 15, 24, 64):
            assert len(uid(length)) == length

    def test_unique(self):
        assert uid(8) != uid(8)
        assert len({uid(12) for _ in range(100)}) == 100

    def test_base64_alphabet_without_delimiter(self):
        token = uid(200)
        assert "=" not in token
        assert ":" not in token
        assert set(token) <= set(
            "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
        )

    @pytest.mark.parametrize("length", [0, -1, 1.5, "8", True])
    def test_invalid_length(self, length):
        with pytest.raises(ValueError):
            uid(length)

    def test_entropy_failure_propagates(self, monkeypatch):
        import pwhasher.str as str_module

        def broken(_):
            raise NotImplementedError("no entropy source")

        monkeypatch.setattr(str_module, "urandom", broken)
        with pytest.raises(NotImplementedError):
            uid(8)
