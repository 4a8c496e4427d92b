"""Keyden: TOTP scheduling and authenticator migration import."""

__version__ = "0.1.0"
