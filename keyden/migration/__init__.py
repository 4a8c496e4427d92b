"""Import of OTP accounts from authenticator export formats.

This module provides:
- decoder: otpauth-migration:// and otpauth:// URI parsing
- wire: minimal protobuf wire-format cursor
- base32: unpadded Base32 encoding of raw secrets
"""

from keyden.migration.base32 import encode as base32_encode
from keyden.migration.decoder import (
    decode_migration_payload,
    parse_import_uri,
    parse_migration_url,
    parse_otp_parameters,
)
from keyden.migration.errors import MigrationError, WireFormatError
from keyden.migration.wire import WireCursor

__all__ = [
    # Decoding
    "decode_migration_payload",
    "parse_import_uri",
    "parse_migration_url",
    "parse_otp_parameters",
    # Wire format
    "WireCursor",
    "base32_encode",
    # Errors
    "MigrationError",
    "WireFormatError",
]
