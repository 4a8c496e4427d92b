"""Data model shared by the scheduler and the migration decoder.

Tokens are owned by the application; the scheduler references them by id and
keeps its own CacheEntry per registered token. AccountDescriptors are the
transient output of an import and become Tokens through
Token.from_descriptor().
"""

import hashlib
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

import pyotp


DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30


class Algorithm(str, Enum):
    """HMAC digest algorithms supported for TOTP generation."""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @property
    def digest(self) -> Callable:
        """hashlib constructor for this algorithm."""
        return getattr(hashlib, self.value.lower())

    @classmethod
    def parse(cls, value: str) -> "Algorithm":
        """Parse an algorithm name such as 'sha256', 'SHA-512' or 'SHA1'.

        Raises:
            ValueError: If the name is not a supported algorithm.
        """
        normalized = str(value).strip().upper().replace("-", "")
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unsupported algorithm: {value}") from None


@dataclass(frozen=True)
class AccountDescriptor:
    """One account recovered from an import.

    Attributes:
        issuer: Service name, may be empty.
        account: Account label (usually a user name or email).
        secret: Base32 text without padding.
        digits: Code length.
        algorithm: Digest algorithm.
        period: Rotation interval in seconds.
    """

    issuer: str
    account: str
    secret: str
    digits: int = DEFAULT_DIGITS
    algorithm: Algorithm = Algorithm.SHA1
    period: int = DEFAULT_PERIOD

    def to_uri(self) -> str:
        """Render the standard otpauth://totp provisioning URI."""
        totp = pyotp.TOTP(
            self.secret,
            digits=self.digits,
            digest=self.algorithm.digest,
            interval=self.period,
        )
        return totp.provisioning_uri(
            name=self.account, issuer_name=self.issuer or None
        )


@dataclass(frozen=True)
class Token:
    """A TOTP token as seen by the scheduler.

    Attributes:
        secret: Base32 shared secret.
        issuer: Service name shown in lists.
        account: Account label.
        digits: Code length (must be positive).
        period: Rotation interval in seconds (must be positive).
        algorithm: Digest algorithm.
        id: Opaque identifier, stable for the token's lifetime.
    """

    secret: str
    issuer: str = ""
    account: str = ""
    digits: int = DEFAULT_DIGITS
    period: int = DEFAULT_PERIOD
    algorithm: Algorithm = Algorithm.SHA1
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        """Validate token parameters after initialization."""
        if self.period <= 0:
            raise ValueError(f"Token period must be positive, got {self.period}")
        if self.digits <= 0:
            raise ValueError(f"Token digits must be positive, got {self.digits}")

    @classmethod
    def from_descriptor(cls, descriptor: AccountDescriptor) -> "Token":
        """Create a new token (with a fresh id) from an imported account."""
        return cls(
            secret=descriptor.secret,
            issuer=descriptor.issuer,
            account=descriptor.account,
            digits=descriptor.digits,
            period=descriptor.period,
            algorithm=descriptor.algorithm,
        )

    @property
    def display_name(self) -> str:
        return self.issuer or self.account

    def matches(self, query: str) -> bool:
        """Case-insensitive search on display name and account.

        An empty query matches every token.
        """
        if not query:
            return True
        needle = query.casefold()
        return (
            needle in self.display_name.casefold()
            or needle in self.account.casefold()
        )


@dataclass
class CacheEntry:
    """Scheduler-owned cached state for one registered token."""

    code: str
    remaining_seconds: int
    period: int
