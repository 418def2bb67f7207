"""Tests for response interpretation and the position model."""

import struct

import pytest

from armpi_mcp.models.position import Position
from armpi_mcp.protocol.framing import Response
from armpi_mcp.protocol.parser import (
    CommandResult,
    parse_command_result,
    parse_position,
    parse_text_result,
)


def test_command_result_unpacks():
    """Results unpack as (success, payload)."""
    success, payload = CommandResult(True, "OK")
    assert success is True
    assert payload == "OK"


def test_command_result_to_dict_variants():
    """to_dict names the payload by its kind."""
    assert CommandResult(False, "busy").to_dict() == {"success": False, "message": "busy"}
    assert CommandResult(True, (1.0, 2.0)).to_dict() == {"success": True, "values": [1.0, 2.0]}
    assert CommandResult(True, Position(1, 2, 3)).to_dict() == {
        "success": True,
        "position": {"x": 1, "y": 2, "z": 3},
    }


def test_parse_command_result_text_and_vector():
    """Messages decode with the 8-byte rule."""
    text = parse_command_result(Response(True, b"done"))
    assert text.payload == "done"
    assert not text.is_vector

    vector = parse_command_result(Response(True, struct.pack("<2d", 1.0, 2.0)))
    assert vector.payload == (1.0, 2.0)
    assert vector.is_vector


def test_parse_command_result_empty_message():
    """The caller chooses what an empty reply reads as."""
    assert parse_command_result(Response(True, b"")).payload == ""
    assert parse_command_result(Response(True, b""), empty_message="OK").payload == "OK"


def test_parse_text_result_ignores_vector_rule():
    """An 8-byte status string stays text."""
    result = parse_text_result(Response(True, b"Moved OK"))
    assert result.payload == "Moved OK"
    assert not result.is_vector


def test_parse_text_result_empty_is_ok():
    assert tuple(parse_text_result(Response(True, b""))) == (True, "OK")


def test_parse_position_vector():
    """A 24-byte reply is a 3-element position."""
    result = parse_position(Response(True, struct.pack("<3d", 0.5, 10.0, 15.0)))
    assert result.success
    assert result.payload == Position(0.5, 10.0, 15.0)


def test_parse_position_with_joints():
    """Extra values are kept as joint readings."""
    result = parse_position(Response(True, struct.pack("<5d", 1, 2, 3, 45, -30)))
    assert result.payload.joints == (45.0, -30.0)
    assert result.payload.as_tuple() == (1.0, 2.0, 3.0, 45.0, -30.0)


def test_parse_position_text_is_failure():
    """A textual reply fails even if the device flagged success."""
    result = parse_position(Response(True, b"error"))
    assert result.success is False
    assert result.payload == "error"


def test_parse_position_too_few_values():
    """Fewer than three values cannot be a position."""
    result = parse_position(Response(True, struct.pack("<2d", 1, 2)))
    assert result.success is False
    assert "at least 3" in result.message


def test_parse_position_device_failure_keeps_values():
    """A failed flag is reported as failure."""
    result = parse_position(Response(False, struct.pack("<3d", 1, 2, 3)))
    assert result.success is False


def test_position_from_values_rejects_short():
    with pytest.raises(ValueError):
        Position.from_values([1.0])


def test_position_str():
    assert str(Position(1, 2.5, 3)) == "X=1.00, Y=2.50, Z=3.00"
