"""Multi-point trajectories built from single move commands.

The protocol has no "motion complete" message, so after each move the
runner waits for the commanded duration plus a fixed margin before sending
the next one.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Sequence

from .client import ArmClient, CommandResult
from .errors import ArgumentError
from .protocol.framing import check_duration

logger = logging.getLogger(__name__)

DEFAULT_STEP_DURATION_MS = 1000
SETTLE_MARGIN_S = 0.1


@dataclass(frozen=True)
class TrajectoryResult:
    """Outcome of a trajectory run."""

    total: int
    completed: int
    failed_index: int | None = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.failed_index is None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "total": self.total,
            "completed": self.completed,
            "failed_index": self.failed_index,
            "message": self.message,
        }


def settle_delay(duration_ms: int) -> float:
    """Seconds to wait after a move of ``duration_ms`` before the next one."""
    return duration_ms / 1000 + SETTLE_MARGIN_S


def _check_rows(rows: Sequence[Sequence[float]], what: str) -> None:
    for i, row in enumerate(rows):
        if len(row) != 3:
            raise ArgumentError(f"{what} {i} must have 3 values, got {len(row)}")


class TrajectoryRunner:
    """Drives an :class:`ArmClient` through a sequence of targets.

    Waits block the calling thread; nothing else should use the client
    while a trajectory runs.
    """

    def __init__(
        self,
        client: ArmClient,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._sleep = sleep

    def run_trajectory(
        self,
        points: Sequence[Sequence[float]],
        duration_ms: int = DEFAULT_STEP_DURATION_MS,
    ) -> TrajectoryResult:
        """Move through ``points`` (each ``(x, y, z)``) in order.

        Stops at the first failed move.

        Raises:
            ArgumentError: If a point does not have exactly 3 values or
                the duration does not fit the int32 field.
        """
        _check_rows(points, "Point")
        check_duration(duration_ms)
        logger.info("Running trajectory of %d points", len(points))
        return self._run(
            len(points),
            lambda i: self._client.move_xyz(*points[i], duration_ms=duration_ms),
            duration_ms,
        )

    def run_trajectory_with_angles(
        self,
        points: Sequence[Sequence[float]],
        angles: Sequence[Sequence[float]],
        duration_ms: int = DEFAULT_STEP_DURATION_MS,
    ) -> TrajectoryResult:
        """Move through ``points`` with matching ``(alpha, alpha1, alpha2)`` rows.

        Raises:
            ArgumentError: If the two sequences differ in length or a row
                does not have exactly 3 values, or the duration does not fit the
                int32 field. Nothing is sent in that case.
        """
        if len(points) != len(angles):
            raise ArgumentError(
                f"Number of points ({len(points)}) must match "
                f"number of angle sets ({len(angles)})"
            )
        _check_rows(points, "Point")
        _check_rows(angles, "Angle set")
        check_duration(duration_ms)
        logger.info("Running trajectory with angles: %d points", len(points))
        return self._run(
            len(points),
            lambda i: self._client.move_with_angles(
                *points[i], *angles[i], duration_ms=duration_ms
            ),
            duration_ms,
        )

    def _run(
        self,
        total: int,
        step: Callable[[int], CommandResult],
        duration_ms: int,
    ) -> TrajectoryResult:
        delay = settle_delay(duration_ms)
        for i in range(total):
            result = step(i)
            if not result.success:
                logger.warning(
                    "Trajectory aborted at point %d of %d: %s",
                    i + 1, total, result.message,
                )
                return TrajectoryResult(
                    total=total,
                    completed=i,
                    failed_index=i,
                    message=result.message,
                )
            self._sleep(delay)

        logger.info("Trajectory completed (%d points)", total)
        return TrajectoryResult(total=total, completed=total)
