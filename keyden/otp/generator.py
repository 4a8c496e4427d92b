"""TOTP (Time-based One-Time Password) code generation.

Thin adapter over pyotp with the contract the scheduler relies on: identical
inputs give identical codes, and a malformed secret yields None instead of
an exception.
"""

import binascii
from datetime import datetime
from typing import Optional, Union

import pyotp
from loguru import logger

from keyden.migration import base32
from keyden.models import Algorithm

Timestamp = Union[int, float, datetime]


class CodeGenerator:
    """Computes TOTP codes for arbitrary token parameters."""

    def generate(
        self,
        secret: str,
        digits: int,
        period: int,
        algorithm: Algorithm,
        at: Timestamp,
    ) -> Optional[str]:
        """Generate the code valid at a given time.

        Secrets may be typed the way authenticator sites display them:
        lower case, grouped with spaces or dashes, with or without padding.

        Args:
            secret: Base32-encoded shared secret.
            digits: Code length.
            period: Rotation interval in seconds.
            algorithm: HMAC digest algorithm.
            at: POSIX timestamp or datetime.

        Returns:
            Zero-padded code string, or None if the secret is empty or
            malformed.
        """
        try:
            key = base32.decode(secret)
            if not key:
                logger.debug("Code generation skipped: empty secret")
                return None
            totp = pyotp.TOTP(
                base32.encode(key),
                digits=digits,
                digest=Algorithm(algorithm).digest,
                interval=period,
            )
            return totp.at(at)
        except (binascii.Error, ValueError, TypeError, AttributeError) as e:
            logger.debug(f"Code generation failed: {e}")
            return None


def remaining_seconds(now_seconds: int, period: int) -> int:
    """Seconds until the code for `period` rotates.

    Returns:
        Value in [1, period].
    """
    return period - (now_seconds % period)
