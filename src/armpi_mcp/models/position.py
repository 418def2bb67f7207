"""Arm position model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence


@dataclass(frozen=True)
class Position:
    """Cartesian position in millimetres, optionally with joint values.

    The controller reports at least x, y and z; any further values are
    kept in ``joints`` in the order they were received.
    """

    x: float
    y: float
    z: float
    joints: tuple[float, ...] = field(default_factory=tuple)

    @classmethod
    def from_values(cls, values: Sequence[float]) -> Position:
        if len(values) < 3:
            raise ValueError(f"Position needs at least 3 values, got {len(values)}")
        return cls(
            x=float(values[0]),
            y=float(values[1]),
            z=float(values[2]),
            joints=tuple(float(v) for v in values[3:]),
        )

    def as_tuple(self) -> tuple[float, ...]:
        return (self.x, self.y, self.z) + self.joints

    def to_dict(self) -> dict:
        result = {"x": self.x, "y": self.y, "z": self.z}
        if self.joints:
            result["joints"] = list(self.joints)
        return result

    def __str__(self) -> str:
        return f"X={self.x:.2f}, Y={self.y:.2f}, Z={self.z:.2f}"
