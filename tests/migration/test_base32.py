"""Unit tests for Base32 secret encoding."""

import base64
import os

import pytest

from keyden.migration import base32


class TestEncode:
    """Tests for base32.encode()."""

    def test_known_value(self):
        assert base32.encode(b"Hello!") == "JBSWY3DPEE"

    def test_empty(self):
        assert base32.encode(b"") == ""

    def test_no_padding(self):
        assert "=" not in base32.encode(b"a")

    @pytest.mark.parametrize("length", [1, 5, 10, 16, 20, 32])
    def test_matches_standard_encoder(self, length):
        data = os.urandom(length)
        expected = base64.b32encode(data).decode().rstrip("=")
        assert base32.encode(data) == expected

    def test_round_trip_through_standard_decoder(self):
        """Encoded secrets decode back with the standard library decoder."""
        data = bytes(range(20))
        encoded = base32.encode(data)
        padded = encoded + "=" * (-len(encoded) % 8)
        assert base64.b32decode(padded) == data


class TestDecode:
    """Tests for base32.decode()."""

    def test_accepts_unpadded_lowercase_and_spaces(self):
        assert base32.decode("jbsw y3dp ee") == b"Hello!"

    def test_accepts_padding(self):
        assert base32.decode("JBSWY3DPEE======") == b"Hello!"

    def test_invalid_text_fails(self):
        with pytest.raises(ValueError):
            base32.decode("not base32!")
