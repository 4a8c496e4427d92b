"""Base32 (RFC 4648) text encoding of OTP secrets.

otpauth URIs carry secrets as unpadded upper-case Base32.
"""

import base64

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"


def encode(data: bytes) -> str:
    """Encode raw secret bytes as Base32 without '=' padding.

    Example:
        >>> encode(b"Hello!")
        'JBSWY3DPEE'
    """
    chars = []
    buffer = 0
    bits = 0
    for byte in data:
        buffer = ((buffer << 8) | byte) & 0xFFFF
        bits += 8
        while bits >= 5:
            bits -= 5
            chars.append(ALPHABET[(buffer >> bits) & 0x1F])
    if bits:
        chars.append(ALPHABET[(buffer << (5 - bits)) & 0x1F])
    return "".join(chars)


def decode(text: str) -> bytes:
    """Decode Base32 text, tolerating lower case, spaces and missing padding.

    Raises:
        binascii.Error: If the text is not valid Base32.
    """
    cleaned = text.replace(" ", "").replace("-", "").upper().rstrip("=")
    padding = -len(cleaned) % 8
    return base64.b32decode(cleaned + "=" * padding)
