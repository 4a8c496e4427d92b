"""Decoder for Google Authenticator export URLs.

Format: otpauth-migration://offline?data=<percent-encoded base64 payload>

The payload is a small protobuf message:

    message MigrationPayload {
      repeated OtpParameters otp_parameters = 1;
      int32 version = 2;
      int32 batch_size = 3;
      int32 batch_index = 4;
      int32 batch_id = 5;
    }
    message OtpParameters {
      bytes secret = 1;
      string name = 2;
      string issuer = 3;
      Algorithm algorithm = 4;
      DigitCount digits = 5;
      OtpType type = 6;
      int64 counter = 7;
    }

Decoding is lenient: unknown fields are skipped, malformed or unsupported
records are dropped, and only a payload without any usable record counts as
a failure.
"""

import base64
import binascii
import re
from typing import List, Optional
from urllib.parse import unquote, urlsplit

import pyotp
from loguru import logger

from keyden.migration import base32
from keyden.migration.errors import MigrationError, WireFormatError
from keyden.migration.wire import (
    WIRETYPE_LENGTH_DELIMITED,
    WIRETYPE_VARINT,
    WireCursor,
)
from keyden.models import DEFAULT_PERIOD, AccountDescriptor, Algorithm

MIGRATION_SCHEME = "otpauth-migration://"
OTPAUTH_SCHEME = "otpauth://"
DATA_PARAM = "data"

# MigrationPayload field numbers
FIELD_OTP_PARAMETERS = 1

# OtpParameters field numbers
FIELD_SECRET = 1
FIELD_NAME = 2
FIELD_ISSUER = 3
FIELD_ALGORITHM = 4
FIELD_DIGITS = 5
FIELD_TYPE = 6

ALGORITHMS = {1: Algorithm.SHA1, 2: Algorithm.SHA256, 3: Algorithm.SHA512}
DIGIT_COUNTS = {1: 6, 2: 8}

OTP_TYPE_UNSPECIFIED = 0
OTP_TYPE_HOTP = 1
OTP_TYPE_TOTP = 2

_NON_BASE64 = re.compile(r"[^A-Za-z0-9+/=]")


def _decode_text(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return ""


def _split_name(name: str, issuer: str):
    """Split 'Issuer:account' names when the record carries no issuer.

    Returns:
        Tuple of (issuer, account).
    """
    if not issuer and ":" in name:
        left, right = name.split(":", 1)
        return left.strip(), right.strip()
    return issuer, name


def parse_otp_parameters(data: bytes) -> Optional[AccountDescriptor]:
    """Parse a single OtpParameters record.

    A truncated field ends the record; fields read before it are kept.

    Args:
        data: Raw bytes of one OtpParameters message.

    Returns:
        AccountDescriptor, or None if the record has no secret or is not a
        time-based account.
    """
    secret: Optional[bytes] = None
    name = ""
    issuer = ""
    algorithm = Algorithm.SHA1
    digits = 6
    otp_type = OTP_TYPE_UNSPECIFIED

    cursor = WireCursor(data)
    try:
        while not cursor.at_end:
            field_number, wire_type = cursor.read_tag()

            if field_number == FIELD_SECRET and wire_type == WIRETYPE_LENGTH_DELIMITED:
                secret = cursor.read_length_delimited()
            elif field_number == FIELD_NAME and wire_type == WIRETYPE_LENGTH_DELIMITED:
                name = _decode_text(cursor.read_length_delimited())
            elif field_number == FIELD_ISSUER and wire_type == WIRETYPE_LENGTH_DELIMITED:
                issuer = _decode_text(cursor.read_length_delimited())
            elif field_number == FIELD_ALGORITHM and wire_type == WIRETYPE_VARINT:
                algorithm = ALGORITHMS.get(cursor.read_varint(), Algorithm.SHA1)
            elif field_number == FIELD_DIGITS and wire_type == WIRETYPE_VARINT:
                digits = DIGIT_COUNTS.get(cursor.read_varint(), 6)
            elif field_number == FIELD_TYPE and wire_type == WIRETYPE_VARINT:
                otp_type = cursor.read_varint()
            else:
                cursor.skip_field(wire_type)
    except WireFormatError as e:
        logger.debug(f"Truncated account record at byte {cursor.offset}: {e}")

    if otp_type == OTP_TYPE_HOTP:
        logger.info(f"Skipping counter-based (HOTP) account: {name}")
        return None
    if otp_type not in (OTP_TYPE_TOTP, OTP_TYPE_UNSPECIFIED):
        logger.debug(f"Skipping account with unknown OTP type {otp_type}: {name}")
        return None
    if secret is None:
        logger.debug(f"Skipping account without secret: {name}")
        return None

    issuer, account = _split_name(name, issuer)
    descriptor = AccountDescriptor(
        issuer=issuer,
        account=account,
        secret=base32.encode(secret),
        digits=digits,
        algorithm=algorithm,
        period=DEFAULT_PERIOD,
    )
    logger.debug(f"Parsed account: issuer={issuer}, account={account}")
    return descriptor


def decode_migration_payload(data: bytes) -> List[AccountDescriptor]:
    """Walk a MigrationPayload and collect every usable account.

    A malformed top-level field stops the walk; records parsed before it are
    returned.

    Args:
        data: Decoded binary payload.

    Returns:
        List of descriptors, possibly empty.
    """
    results: List[AccountDescriptor] = []
    cursor = WireCursor(data)
    try:
        while not cursor.at_end:
            field_number, wire_type = cursor.read_tag()
            if (
                field_number == FIELD_OTP_PARAMETERS
                and wire_type == WIRETYPE_LENGTH_DELIMITED
            ):
                descriptor = parse_otp_parameters(cursor.read_length_delimited())
                if descriptor is not None:
                    results.append(descriptor)
            else:
                cursor.skip_field(wire_type)
    except WireFormatError as e:
        logger.warning(f"Migration payload truncated at byte {cursor.offset}: {e}")

    logger.info(f"Parsed {len(results)} accounts from migration payload")
    return results


def _pad_base64(text: str) -> str:
    return text + "=" * (-len(text) % 4)


def _decode_base64(text: str) -> bytes:
    """Decode base64, ignoring characters outside the alphabet.

    Retries once with '=' padding appended when the first attempt fails.

    Raises:
        MigrationError: If neither attempt decodes.
    """
    cleaned = _NON_BASE64.sub("", text)
    try:
        return base64.b64decode(cleaned, validate=True)
    except binascii.Error:
        pass
    try:
        return base64.b64decode(_pad_base64(cleaned), validate=True)
    except binascii.Error as e:
        raise MigrationError(f"Failed to base64 decode data: {e}") from e


def _query_value(url: str, key: str) -> Optional[str]:
    """Return the percent-decoded value of the first `key` query parameter.

    '+' is kept literally since it is part of the base64 alphabet.
    """
    for pair in urlsplit(url).query.split("&"):
        name, sep, value = pair.partition("=")
        if sep and unquote(name) == key:
            return unquote(value)
    return None


def parse_migration_url(url: str) -> Optional[List[AccountDescriptor]]:
    """Parse an otpauth-migration:// URL into account descriptors.

    Args:
        url: The full migration URL, usually scanned from a QR code.

    Returns:
        Non-empty list of descriptors, or None if the URL is not a migration
        URL, carries no data, or contains no usable account.
    """
    url = (url or "").strip()
    if not url.lower().startswith(MIGRATION_SCHEME):
        return None

    data_param = _query_value(url, DATA_PARAM)
    if not data_param:
        logger.warning("Failed to parse URL or find data parameter")
        return None

    try:
        payload = _decode_base64(data_param)
    except MigrationError as e:
        logger.warning(str(e))
        return None

    results = decode_migration_payload(payload)
    return results or None


def _parse_otpauth_uri(uri: str) -> Optional[AccountDescriptor]:
    try:
        otp = pyotp.parse_uri(uri)
    except ValueError as e:
        logger.warning(f"Failed to parse otpauth URI: {e}")
        return None

    if not isinstance(otp, pyotp.TOTP):
        logger.info(f"Skipping counter-based (HOTP) account: {otp.name}")
        return None

    algorithm = Algorithm.parse(otp.digest().name)
    return AccountDescriptor(
        issuer=otp.issuer or "",
        account=otp.name or "",
        secret=otp.secret.upper().rstrip("="),
        digits=otp.digits,
        algorithm=algorithm,
        period=otp.interval,
    )


def parse_import_uri(uri: str) -> Optional[List[AccountDescriptor]]:
    """Parse either a migration URL or a single otpauth://totp URI.

    Returns:
        Non-empty list of descriptors, or None if nothing usable was found.
    """
    uri = (uri or "").strip()
    lowered = uri.lower()
    if lowered.startswith(MIGRATION_SCHEME):
        return parse_migration_url(uri)
    if lowered.startswith(OTPAUTH_SCHEME):
        descriptor = _parse_otpauth_uri(uri)
        return [descriptor] if descriptor is not None else None

    logger.warning("Unrecognized import URI scheme")
    return None
