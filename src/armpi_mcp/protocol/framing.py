"""Frame builder and parser for the ArmPi TCP protocol.

Request layout::

    +---------+--------------+-------------------+
    | Command | Payload size |      Payload      |
    | 1 byte  | int32 LE     |  variable length  |
    +---------+--------------+-------------------+

Response layout::

    +---------+--------------+-------------------+
    | Success | Message size |      Message      |
    | 1 byte  | int32 LE     |  variable length  |
    +---------+--------------+-------------------+

- Command: one of the codes in :class:`~.commands.Command` (1-5)
- Success: 0 for failure, anything else for success
- Message: little-endian float64 values when its length is a non-zero
  multiple of 8, otherwise text
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable

from ..errors import ArgumentError, ProtocolError

HEADER = struct.Struct("<Bi")
HEADER_SIZE = HEADER.size  # 5 bytes
DOUBLE = struct.Struct("<d")
DURATION = struct.Struct("<i")
DOUBLE_SIZE = DOUBLE.size  # 8 bytes
DURATION_MIN = -(2**31)
DURATION_MAX = 2**31 - 1
TEXT_ENCODING = "utf-8"


@dataclass
class Request:
    """A parsed request frame."""

    command: int
    payload: bytes

    def __repr__(self) -> str:
        return (
            f"Request(command={self.command}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


@dataclass
class Response:
    """A parsed response frame."""

    success: bool
    payload: bytes

    @property
    def is_vector(self) -> bool:
        return is_vector_payload(self.payload)

    def decode(self) -> tuple[float, ...] | str:
        """Decode the message using the 8-byte heuristic."""
        return decode_payload(self.payload)[1]


def check_duration(duration_ms: int) -> int:
    """Return ``duration_ms`` as an int, ensuring it fits the int32 field.

    Raises:
        ArgumentError: If the duration cannot be encoded.
    """
    value = int(duration_ms)
    if not DURATION_MIN <= value <= DURATION_MAX:
        raise ArgumentError(
            f"Duration must be {DURATION_MIN}-{DURATION_MAX} ms, got {value}"
        )
    return value


def encode_payload(
    values: Iterable[float],
    duration_ms: int | None = None,
    pad_to_double: bool = False,
) -> bytes:
    """Pack float64 values and an optional int32 duration.

    Args:
        values: Numbers packed as little-endian doubles, in order.
        duration_ms: Optional duration appended as a little-endian int32.
        pad_to_double: Zero-pad the result to a multiple of 8 bytes.

    Returns:
        The raw payload bytes.

    Raises:
        ArgumentError: If the duration does not fit in an int32.
    """
    data = b"".join(DOUBLE.pack(float(v)) for v in values)
    if duration_ms is not None:
        data += DURATION.pack(check_duration(duration_ms))
    if pad_to_double and len(data) % DOUBLE_SIZE:
        data += b"\x00" * (DOUBLE_SIZE - len(data) % DOUBLE_SIZE)
    return data


def encode_text(text: str) -> bytes:
    """Encode a status message the way the device sends it."""
    return text.encode(TEXT_ENCODING)


def is_vector_payload(data: bytes) -> bool:
    """Return True when ``data`` should be read as a float64 vector."""
    return len(data) > 0 and len(data) % DOUBLE_SIZE == 0


def decode_payload(data: bytes) -> tuple[bool, tuple[float, ...] | str]:
    """Decode a response message.

    A message whose length is a multiple of 8 is a vector of little-endian
    doubles; anything else is text. The device relies on this rule to tell
    positions from status strings, so it must not be changed.

    Returns:
        ``(is_vector, value)`` where value is a tuple of floats or a string.
        An empty message decodes to ``(False, "")``.
    """
    if is_vector_payload(data):
        count = len(data) // DOUBLE_SIZE
        return True, struct.unpack(f"<{count}d", data)
    return False, data.decode(TEXT_ENCODING, errors="replace")


def build_request(command: int, payload: bytes = b"") -> bytes:
    """Build a request frame.

    Args:
        command: Single-byte command code.
        payload: Command-specific payload bytes.
    """
    return HEADER.pack(command, len(payload)) + payload


def build_response(success: bool, payload: bytes = b"") -> bytes:
    """Build a response frame, as the device would send it."""
    return HEADER.pack(1 if success else 0, len(payload)) + payload


def _parse_header(header: bytes) -> tuple[int, int]:
    if len(header) != HEADER_SIZE:
        raise ProtocolError(
            f"Frame header must be {HEADER_SIZE} bytes, got {len(header)}"
        )
    code, length = HEADER.unpack(header)
    if length < 0:
        raise ProtocolError(f"Negative payload length in header: {length}")
    return code, length


def parse_response_header(header: bytes) -> tuple[bool, int]:
    """Parse the 5-byte response header.

    Returns:
        ``(success, message_length)``.

    Raises:
        ProtocolError: If the header is short or declares a negative length.
    """
    flag, length = _parse_header(header)
    return flag != 0, length


def _split_frame(data: bytes) -> tuple[int, bytes]:
    code, length = _parse_header(data[:HEADER_SIZE])
    body = data[HEADER_SIZE:]
    if len(body) != length:
        raise ProtocolError(
            f"Declared payload length {length} does not match "
            f"{len(body)} bytes received"
        )
    return code, body


def parse_request(data: bytes) -> Request:
    """Parse a complete request frame.

    Raises:
        ProtocolError: If the declared length does not match the payload.
    """
    command, payload = _split_frame(data)
    return Request(command=command, payload=payload)


def parse_response(data: bytes) -> Response:
    """Parse a complete response frame.

    Raises:
        ProtocolError: If the declared length does not match the message.
    """
    flag, payload = _split_frame(data)
    return Response(success=flag != 0, payload=payload)
