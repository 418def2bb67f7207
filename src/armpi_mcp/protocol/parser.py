"""Interpretation of device responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Union

from ..models.position import Position
from .framing import TEXT_ENCODING, Response

Payload = Union[str, tuple[float, ...], Position]


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single command.

    Unpacks as ``success, payload = result``.
    """

    success: bool
    payload: Payload = ""

    def __iter__(self) -> Iterator:
        return iter((self.success, self.payload))

    @property
    def is_vector(self) -> bool:
        return not isinstance(self.payload, str)

    @property
    def message(self) -> str:
        """Human-readable form of the payload."""
        if isinstance(self.payload, str):
            return self.payload
        if isinstance(self.payload, Position):
            return str(self.payload)
        return ", ".join(f"{v:.2f}" for v in self.payload)

    def to_dict(self) -> dict:
        result: dict = {"success": self.success}
        if isinstance(self.payload, Position):
            result["position"] = self.payload.to_dict()
        elif isinstance(self.payload, tuple):
            result["values"] = list(self.payload)
        else:
            result["message"] = self.payload
        return result


def parse_command_result(response: Response, empty_message: str = "") -> CommandResult:
    """Turn a response frame into a result, decoding the message.

    Args:
        response: The parsed response frame.
        empty_message: Text to report when the device sent no message.
    """
    if not response.payload:
        return CommandResult(response.success, empty_message)
    return CommandResult(response.success, response.decode())


def parse_text_result(response: Response, empty_message: str = "OK") -> CommandResult:
    """Read the message as text regardless of its length.

    MoveAngles replies are always status strings, so the 8-byte vector
    rule does not apply to them.
    """
    if not response.payload:
        return CommandResult(response.success, empty_message)
    return CommandResult(
        response.success, response.payload.decode(TEXT_ENCODING, errors="replace")
    )


def parse_position(response: Response) -> CommandResult:
    """Interpret a GetPosition response.

    A textual reply, or a vector with fewer than three values, is reported
    as a failure even if the device flagged success.
    """
    value = response.decode()
    if isinstance(value, str):
        return CommandResult(False, value or "Empty position reply")
    if not response.success:
        return CommandResult(False, value)
    try:
        return CommandResult(True, Position.from_values(value))
    except ValueError as e:
        return CommandResult(False, str(e))
