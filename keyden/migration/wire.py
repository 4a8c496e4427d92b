"""Minimal protobuf wire-format cursor.

Only what the migration payload needs: varints, tags, length-delimited
fields and skipping of any field whose wire type has a known size.
"""

from typing import Tuple

from keyden.migration.errors import WireFormatError

WIRETYPE_VARINT = 0
WIRETYPE_FIXED64 = 1
WIRETYPE_LENGTH_DELIMITED = 2
WIRETYPE_FIXED32 = 5

# A 64-bit varint never needs more than 10 groups.
MAX_VARINT_GROUPS = 10


class WireCursor:
    """Read position over an immutable byte buffer.

    Attributes:
        data: The buffer being read.
        offset: Index of the next unread byte.
    """

    def __init__(self, data: bytes, offset: int = 0):
        self.data = bytes(data)
        self.offset = offset

    @property
    def at_end(self) -> bool:
        return self.offset >= len(self.data)

    @property
    def remaining(self) -> int:
        return max(len(self.data) - self.offset, 0)

    def read_varint(self) -> int:
        """Read an unsigned varint.

        Raises:
            WireFormatError: If the buffer ends mid-varint or the varint runs
                past MAX_VARINT_GROUPS groups.
        """
        result = 0
        shift = 0
        for _ in range(MAX_VARINT_GROUPS):
            if self.offset >= len(self.data):
                raise WireFormatError("Truncated varint")
            byte = self.data[self.offset]
            self.offset += 1
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result
            shift += 7
        raise WireFormatError("Varint too long")

    def read_tag(self) -> Tuple[int, int]:
        """Read a field tag and return (field_number, wire_type)."""
        tag = self.read_varint()
        return tag >> 3, tag & 0x07

    def read_bytes(self, length: int) -> bytes:
        end = self.offset + length
        if end > len(self.data):
            raise WireFormatError(
                f"Field length {length} exceeds remaining {self.remaining} bytes"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def read_length_delimited(self) -> bytes:
        """Read a length-prefixed byte string."""
        return self.read_bytes(self.read_varint())

    def skip_field(self, wire_type: int) -> None:
        """Advance past a field value of the given wire type.

        Raises:
            WireFormatError: On an unsupported wire type or if the value runs
                past the end of the buffer.
        """
        if wire_type == WIRETYPE_VARINT:
            self.read_varint()
        elif wire_type == WIRETYPE_FIXED64:
            self.read_bytes(8)
        elif wire_type == WIRETYPE_LENGTH_DELIMITED:
            self.read_length_delimited()
        elif wire_type == WIRETYPE_FIXED32:
            self.read_bytes(4)
        else:
            raise WireFormatError(f"Unsupported wire type: {wire_type}")
