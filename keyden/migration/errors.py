"""Exceptions raised while decoding migration payloads."""


class MigrationError(ValueError):
    """Base class for migration decode failures."""


class WireFormatError(MigrationError):
    """The binary payload is truncated or otherwise malformed."""
