"""Command codes and request builders.

Each command is a single-byte code. Move commands carry float64
coordinates followed by an int32 duration in milliseconds; the rest
carry no payload.
"""

from __future__ import annotations

from enum import IntEnum

from ..errors import ProtocolError
from .framing import (
    DOUBLE,
    DOUBLE_SIZE,
    DURATION,
    build_request,
    encode_payload,
)

DEFAULT_MOVE_DURATION_MS = 1500


class Command(IntEnum):
    """Command codes understood by the arm controller."""

    MOVE_XYZ = 1
    MOVE_ANGLES = 2
    STOP = 3
    GET_POSITION = 4
    HOME = 5


# Recommended working envelope (mm / degrees). The firmware clamps
# internally, so these are only advisory.
XYZ_LIMITS: dict[str, tuple[float, float]] = {
    "x": (-5.0, 5.0),
    "y": (6.0, 18.0),
    "z": (13.0, 18.0),
}

ANGLE_LIMITS: dict[str, tuple[float, float]] = {
    "alpha": (-180.0, 180.0),
    "alpha1": (-180.0, 0.0),
    "alpha2": (0.0, 180.0),
}


def build_command(command: Command, payload: bytes = b"") -> bytes:
    """Build a request frame for a command."""
    return build_request(command.value, payload)


def encode_move_xyz(
    x: float,
    y: float,
    z: float,
    duration_ms: int = DEFAULT_MOVE_DURATION_MS,
    pad_to_double: bool = False,
) -> bytes:
    """Encode the MoveXYZ payload: x, y, z as doubles + int32 duration."""
    return encode_payload((x, y, z), duration_ms, pad_to_double=pad_to_double)


def encode_move_angles(
    x: float,
    y: float,
    z: float,
    alpha: float,
    alpha1: float,
    alpha2: float,
    duration_ms: int = DEFAULT_MOVE_DURATION_MS,
    pad_to_double: bool = False,
) -> bytes:
    """Encode the MoveAngles payload: six doubles + int32 duration."""
    return encode_payload(
        (x, y, z, alpha, alpha1, alpha2), duration_ms, pad_to_double=pad_to_double
    )


def decode_move_payload(
    payload: bytes, value_count: int
) -> tuple[tuple[float, ...], int]:
    """Split a move payload back into its coordinates and duration.

    Trailing zero padding after the duration is ignored.

    Raises:
        ProtocolError: If the payload is too short for ``value_count`` values.
    """
    needed = value_count * DOUBLE_SIZE + DURATION.size
    if len(payload) < needed:
        raise ProtocolError(
            f"Move payload needs {needed} bytes for {value_count} values, "
            f"got {len(payload)}"
        )
    values = tuple(
        DOUBLE.unpack_from(payload, i * DOUBLE_SIZE)[0] for i in range(value_count)
    )
    (duration_ms,) = DURATION.unpack_from(payload, value_count * DOUBLE_SIZE)
    return values, duration_ms


def build_move_xyz(
    x: float,
    y: float,
    z: float,
    duration_ms: int = DEFAULT_MOVE_DURATION_MS,
    pad_to_double: bool = False,
) -> bytes:
    """Build a MoveXYZ request.

    Args:
        x, y, z: Target position in millimetres.
        duration_ms: Movement time in milliseconds.
        pad_to_double: Zero-pad the payload to a multiple of 8 bytes.
    """
    return build_command(
        Command.MOVE_XYZ,
        encode_move_xyz(x, y, z, duration_ms, pad_to_double=pad_to_double),
    )


def build_move_angles(
    x: float,
    y: float,
    z: float,
    alpha: float,
    alpha1: float,
    alpha2: float,
    duration_ms: int = DEFAULT_MOVE_DURATION_MS,
    pad_to_double: bool = False,
) -> bytes:
    """Build a MoveAngles request with explicit joint angles in degrees."""
    return build_command(
        Command.MOVE_ANGLES,
        encode_move_angles(
            x, y, z, alpha, alpha1, alpha2, duration_ms, pad_to_double=pad_to_double
        ),
    )


def build_stop() -> bytes:
    """Build a Stop request."""
    return build_command(Command.STOP)


def build_get_position() -> bytes:
    """Build a GetPosition request."""
    return build_command(Command.GET_POSITION)


def build_home() -> bytes:
    """Build a Home request."""
    return build_command(Command.HOME)


def out_of_range(
    values: dict[str, float], limits: dict[str, tuple[float, float]]
) -> list[str]:
    """Return a description for each value outside its recommended range."""
    problems = []
    for name, value in values.items():
        low, high = limits[name]
        if not low <= value <= high:
            problems.append(f"{name}={value:g} outside recommended range [{low:g}, {high:g}]")
    return problems
