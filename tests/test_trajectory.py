"""Tests for trajectory sequencing."""

from unittest.mock import MagicMock

import pytest

from armpi_mcp.client import ArmClient, CommandResult
from armpi_mcp.errors import ArgumentError
from armpi_mcp.protocol.commands import Command
from armpi_mcp.protocol.framing import build_response, encode_text, parse_request
from armpi_mcp.trajectory import TrajectoryRunner, settle_delay


def test_settle_delay():
    """Wait is the move duration plus a 100 ms margin."""
    assert settle_delay(1000) == pytest.approx(1.1)
    assert settle_delay(1500) == pytest.approx(1.6)


def test_run_trajectory_all_points(client, fake_conn):
    """Each point is sent in order, waiting after every move."""
    fake_conn.queue(*[build_response(True, encode_text("OK"))] * 3)
    delays = []
    runner = TrajectoryRunner(client, sleep=delays.append)

    result = runner.run_trajectory([(0, 10, 15), (1, 11, 16), (2, 12, 17)], 1000)

    assert result.success
    assert result.completed == 3
    assert result.failed_index is None
    assert len(fake_conn.sent) == 3
    assert all(parse_request(f).command == Command.MOVE_XYZ for f in fake_conn.sent)
    assert delays == [pytest.approx(1.1)] * 3


def test_run_trajectory_aborts_on_second_point(client, fake_conn):
    """The session failing on point two stops the run there."""
    fake_conn.queue(build_response(True, encode_text("OK")))
    delays = []
    runner = TrajectoryRunner(client, sleep=delays.append)

    result = runner.run_trajectory([(0, 10, 15), (1, 11, 16), (2, 12, 17)], 1000)

    assert not result.success
    assert result.completed == 1
    assert result.failed_index == 1
    assert result.message
    assert len(fake_conn.sent) == 2
    assert len(delays) == 1


def test_run_trajectory_device_rejects_point():
    """A rejected move aborts without trying later points."""
    arm = MagicMock(spec=ArmClient)
    arm.move_xyz.side_effect = [
        CommandResult(True, "OK"),
        CommandResult(False, "Out of reach"),
    ]
    runner = TrajectoryRunner(arm, sleep=lambda s: None)

    result = runner.run_trajectory([(0, 10, 15), (1, 11, 16), (2, 12, 17)], 800)

    assert result.to_dict() == {
        "success": False,
        "total": 3,
        "completed": 1,
        "failed_index": 1,
        "message": "Out of reach",
    }
    assert arm.move_xyz.call_count == 2
    arm.move_xyz.assert_called_with(1, 11, 16, duration_ms=800)


def test_run_trajectory_empty():
    """An empty trajectory succeeds without sending anything."""
    arm = MagicMock(spec=ArmClient)
    result = TrajectoryRunner(arm, sleep=lambda s: None).run_trajectory([])
    assert result.success
    assert result.total == 0
    arm.move_xyz.assert_not_called()


def test_run_trajectory_bad_point(client, fake_conn):
    """Points must have exactly three coordinates."""
    with pytest.raises(ArgumentError):
        TrajectoryRunner(client).run_trajectory([(0, 10, 15), (1, 11)])
    assert fake_conn.sent == []


def test_angles_count_mismatch_sends_nothing(client, fake_conn):
    """Mismatched points and angles fail before any frame is written."""
    runner = TrajectoryRunner(client, sleep=lambda s: None)
    with pytest.raises(ArgumentError):
        runner.run_trajectory_with_angles(
            [(0, 10, 15), (1, 11, 16), (2, 12, 17)],
            [(0, -90, 90), (0, -90, 90)],
        )
    assert fake_conn.sent == []


def test_run_trajectory_with_angles(client, fake_conn):
    """Each point is paired with its angle row."""
    fake_conn.queue(build_response(True), build_response(True))
    runner = TrajectoryRunner(client, sleep=lambda s: None)

    result = runner.run_trajectory_with_angles(
        [(0, 10, 15), (1, 11, 16)], [(0, -90, 90), (30, -45, 45)], 1200
    )

    assert result.success
    assert [parse_request(f).command for f in fake_conn.sent] == [Command.MOVE_ANGLES] * 2


def test_run_trajectory_with_angles_abort():
    """The angle variant aborts on first failure too."""
    arm = MagicMock(spec=ArmClient)
    arm.move_with_angles.return_value = CommandResult(False, "busy")
    result = TrajectoryRunner(arm, sleep=lambda s: None).run_trajectory_with_angles(
        [(0, 10, 15), (1, 11, 16)], [(0, -90, 90), (0, -90, 90)]
    )
    assert result.failed_index == 0
    assert result.completed == 0
    arm.move_with_angles.assert_called_once_with(0, 10, 15, 0, -90, 90, duration_ms=1000)


def test_run_trajectory_duration_out_of_range(client, fake_conn):
    """A duration outside int32 is rejected before anything is sent."""
    runner = TrajectoryRunner(client, sleep=lambda s: None)
    with pytest.raises(ArgumentError, match="Duration"):
        runner.run_trajectory([(0, 10, 15)], 2**31)
    assert fake_conn.sent == []


def test_run_trajectory_with_angles_duration_out_of_range(client, fake_conn):
    runner = TrajectoryRunner(client, sleep=lambda s: None)
    with pytest.raises(ArgumentError):
        runner.run_trajectory_with_angles([(0, 10, 15)], [(0, -90, 90)], 2**31)
    assert fake_conn.sent == []
