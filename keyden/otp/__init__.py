"""TOTP generation and scheduling for Keyden.

This module provides:
- generator: pyotp-backed code generation with a failure-as-None contract
- timer: shared-clock service caching codes for many tokens
"""

from keyden.otp.generator import CodeGenerator, remaining_seconds
from keyden.otp.timer import TOTPTimerService

__all__ = [
    "CodeGenerator",
    "remaining_seconds",
    "TOTPTimerService",
]
