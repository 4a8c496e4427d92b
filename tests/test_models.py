"""Tests for the token and descriptor data model."""

import hashlib
from urllib.parse import parse_qs, urlsplit

import pytest

from keyden.models import AccountDescriptor, Algorithm, Token


class TestAlgorithm:
    """Tests for Algorithm."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("SHA1", Algorithm.SHA1),
            ("sha256", Algorithm.SHA256),
            ("SHA-512", Algorithm.SHA512),
            (" sha1 ", Algorithm.SHA1),
        ],
    )
    def test_parse(self, name, expected):
        assert Algorithm.parse(name) == expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unsupported algorithm"):
            Algorithm.parse("md5")

    def test_digest(self):
        assert Algorithm.SHA256.digest is hashlib.sha256


class TestToken:
    """Tests for Token."""

    def test_defaults(self):
        token = Token(secret="JBSWY3DPEHPK3PXP")
        assert token.digits == 6
        assert token.period == 30
        assert token.algorithm == Algorithm.SHA1
        assert token.id

    def test_ids_are_unique(self):
        assert Token(secret="A").id != Token(secret="A").id

    @pytest.mark.parametrize("period", [0, -30])
    def test_non_positive_period_raises(self, period):
        with pytest.raises(ValueError, match="period must be positive"):
            Token(secret="A", period=period)

    def test_non_positive_digits_raises(self):
        with pytest.raises(ValueError, match="digits must be positive"):
            Token(secret="A", digits=0)

    def test_from_descriptor(self):
        descriptor = AccountDescriptor(
            issuer="GitHub",
            account="alice",
            secret="JBSWY3DPEHPK3PXP",
            digits=8,
            algorithm=Algorithm.SHA512,
        )
        token = Token.from_descriptor(descriptor)
        assert token.issuer == "GitHub"
        assert token.account == "alice"
        assert token.secret == "JBSWY3DPEHPK3PXP"
        assert token.digits == 8
        assert token.algorithm == Algorithm.SHA512
        assert token.period == 30

    def test_display_name_prefers_issuer(self):
        assert Token(secret="A", issuer="GitHub", account="alice").display_name == "GitHub"
        assert Token(secret="A", account="alice").display_name == "alice"

    @pytest.mark.parametrize(
        "query,expected",
        [("", True), ("git", True), ("ALICE", True), ("bob", False)],
    )
    def test_matches(self, query, expected):
        token = Token(secret="A", issuer="GitHub", account="alice@example.com")
        assert token.matches(query) is expected


class TestAccountDescriptor:
    """Tests for AccountDescriptor.to_uri()."""

    def test_default_uri(self):
        uri = AccountDescriptor(
            issuer="Issuer", account="user@example.com", secret="JBSWY3DPEHPK3PXP"
        ).to_uri()

        parts = urlsplit(uri)
        query = parse_qs(parts.query)
        assert parts.scheme == "otpauth"
        assert parts.netloc == "totp"
        assert query["secret"] == ["JBSWY3DPEHPK3PXP"]
        assert query["issuer"] == ["Issuer"]

    def test_non_default_parameters_are_included(self):
        uri = AccountDescriptor(
            issuer="",
            account="bob",
            secret="JBSWY3DPEHPK3PXP",
            digits=8,
            algorithm=Algorithm.SHA256,
            period=60,
        ).to_uri()

        query = parse_qs(urlsplit(uri).query)
        assert query["algorithm"] == ["SHA256"]
        assert query["digits"] == ["8"]
        assert query["period"] == ["60"]
        assert "issuer" not in query
